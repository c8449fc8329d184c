"""
Session store: the only engine component that reads and writes sessions and
answers.

Write methods are expected to run inside ``transaction.atomic()`` opened by the
caller; the methods that must be atomic on their own open nested atomic blocks
(savepoints) so that an integrity error never poisons the outer transaction.
"""

import datetime
import logging
from typing import Optional, Set, Tuple

from django.contrib.auth import get_user_model
from django.db import IntegrityError, transaction
from django.db.models import QuerySet

from ..models import Answer, TestSession
from .exceptions import NotFound

logger = logging.getLogger(__name__)


class SessionStore:
    def get(self, session_id: int, for_update: bool = False) -> TestSession:
        qs = TestSession.objects.all()
        if for_update:
            qs = qs.select_for_update()
        try:
            return qs.get(pk=session_id)
        except TestSession.DoesNotExist:
            raise NotFound("Session not found", {"session_id": session_id})

    def find_open(self, student_id: int, test_id: int) -> Optional[TestSession]:
        return TestSession.objects.filter(
            student_id=student_id, test_id=test_id, ended_at__isnull=True
        ).first()

    def count_completed(self, student_id: int, test_id: int) -> int:
        return TestSession.objects.filter(
            student_id=student_id, test_id=test_id, ended_at__isnull=False
        ).count()

    def lock_student(self, student_id: int) -> None:
        """Serialise concurrent session starts of one student."""
        list(get_user_model().objects.select_for_update().filter(pk=student_id).values_list("pk"))

    def create_open(
        self,
        student_id: int,
        test_id: int,
        started_at: datetime.datetime,
        question_seed: Optional[int] = None,
    ) -> Tuple[TestSession, bool]:
        """
        Create an open session unless one already exists.

        Returns:
            (session, created). When a concurrent writer wins the race, the
            unique constraint on open sessions rejects the insert and the
            winner's session is returned with ``created=False``.
        """
        try:
            with transaction.atomic():
                session = TestSession.objects.create(
                    student_id=student_id,
                    test_id=test_id,
                    started_at=started_at,
                    question_seed=question_seed,
                )
            return session, True
        except IntegrityError:
            existing = self.find_open(student_id, test_id)
            if existing is None:
                raise
            logger.info(
                f"Concurrent start for student {student_id}, test {test_id} resolved to session {existing.pk}"
            )
            return existing, False

    def upsert_answer(
        self,
        session_id: int,
        question_id: int,
        selected_option: str,
        is_correct: bool,
        answered_at: datetime.datetime,
    ) -> Tuple[Answer, bool]:
        return Answer.objects.update_or_create(
            session_id=session_id,
            question_id=question_id,
            defaults={
                "selected_option": selected_option,
                "is_correct": is_correct,
                "answered_at": answered_at,
            },
        )

    def get_answer(self, session_id: int, question_id: int) -> Optional[Answer]:
        return Answer.objects.filter(session_id=session_id, question_id=question_id).first()

    def answered_question_ids(self, session_id: int) -> Set[int]:
        return set(
            Answer.objects.filter(session_id=session_id).values_list("question_id", flat=True)
        )

    def count_correct(self, session_id: int) -> int:
        return Answer.objects.filter(session_id=session_id, is_correct=True).count()

    def mark_completed(
        self,
        session: TestSession,
        score: int,
        ended_at: datetime.datetime,
        reason: str,
    ) -> bool:
        """
        Close an open session. Only an open row is updated, so a session that
        was completed in the meantime keeps its original score.

        Returns:
            True if this call closed the session.
        """
        updated = TestSession.objects.filter(pk=session.pk, ended_at__isnull=True).update(
            ended_at=ended_at, score=score, end_reason=reason
        )
        session.refresh_from_db()
        return updated == 1

    def open_sessions(self) -> QuerySet:
        return TestSession.objects.filter(ended_at__isnull=True).select_related("test")
