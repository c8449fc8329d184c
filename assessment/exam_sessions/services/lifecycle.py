"""
Session lifecycle: the only entry and exit point of the session state machine.

    NOT_STARTED --start--> IN_PROGRESS --finish | exhaustion | expiry--> COMPLETED

COMPLETED is terminal. Starting while a session is open returns that session,
unless its time has run out: then it is closed as expired and a new attempt
begins. Finishing a completed session returns it unchanged.
"""

import datetime
import logging
import secrets
from dataclasses import dataclass
from typing import List, Optional

from django.db import transaction

from ...catalog.models import Test
from ..models import TestSession
from .catalog import TestCatalog
from .clock import Clock
from .enrollment import EnrollmentCheck
from .exceptions import Forbidden, InvalidState
from .store import SessionStore

logger = logging.getLogger(__name__)

SEED_UPPER_BOUND = 2**31 - 1


@dataclass
class SessionResult:
    score: int
    total: int
    percentage: float
    passed: bool

    def to_dict(self):
        return {
            "score": self.score,
            "total": self.total,
            "percentage": self.percentage,
            "passed": self.passed,
        }


class SessionLifecycleManager:
    def __init__(
        self,
        store: SessionStore,
        catalog: TestCatalog,
        enrollment: EnrollmentCheck,
        clock: Clock,
    ) -> None:
        self.store = store
        self.catalog = catalog
        self.enrollment = enrollment
        self.clock = clock

    # --- Start ---

    def start(self, student_id: int, test_id: int) -> TestSession:
        """
        Start (or resume) the student's attempt at a test.

        Raises:
            NotFound: the test does not exist
            InvalidState: the test is inactive, outside its window, or the
                attempt limit is used up
            Forbidden: the student is not enrolled in the test's course
        """
        test = self.catalog.get_test(test_id)
        now = self.clock.now()

        if not test.active:
            raise InvalidState("Test is not active", {"test_id": test.pk})
        if not test.has_opened(now):
            raise InvalidState("Test not yet started", {"start_time": test.start_time.isoformat()})
        if test.has_closed(now):
            raise InvalidState("Test already ended", {"end_time": test.end_time.isoformat()})
        if not self.enrollment.is_enrolled(student_id, test):
            raise Forbidden("Student not enrolled in this course", {"test_id": test.pk})

        # An open session whose time ran out is closed first, outside the start
        # transaction, so the expiry is kept even if no new attempt is allowed.
        stale = self.store.find_open(student_id, test.pk)
        if stale is not None and self.has_expired(stale, test, now):
            self.complete(stale.pk, TestSession.EndReason.EXPIRED)

        with transaction.atomic():
            self.store.lock_student(student_id)

            existing = self.store.find_open(student_id, test.pk)
            if existing is not None:
                logger.info(f"Resuming session {existing.pk} for student {student_id}, test {test.pk}")
                return existing

            if test.attempts_allowed:
                attempts = self.store.count_completed(student_id, test.pk)
                if attempts >= test.attempts_allowed:
                    raise InvalidState(
                        "Maximum attempts reached for this test",
                        {"attempts": attempts, "attempts_allowed": test.attempts_allowed},
                    )

            seed = secrets.randbelow(SEED_UPPER_BOUND) if test.shuffle_questions else None
            session, created = self.store.create_open(student_id, test.pk, now, seed)

        if created:
            logger.info(f"Started session {session.pk} for student {student_id}, test {test.pk}")
        return session

    # --- Finish ---

    def finish(self, session_id: int, requesting_student_id: int) -> TestSession:
        """
        Finish the session on behalf of its student.

        Raises:
            NotFound: the session does not exist
            Forbidden: the session belongs to another student
        """
        self.get_owned(session_id, requesting_student_id)
        return self.complete(session_id, TestSession.EndReason.FINISHED)

    def complete(self, session_id: int, reason: str) -> TestSession:
        """
        Score and close an open session; return a completed session unchanged.

        The session row is locked for the duration, so concurrent completions
        (explicit finish, exhaustion, expiry) score the session once.
        """
        with transaction.atomic():
            session = self.store.get(session_id, for_update=True)
            if not session.is_open:
                return session

            score = self.store.count_correct(session.pk)
            if self.store.mark_completed(session, score, self.clock.now(), reason):
                logger.info(f"Session {session.pk} completed ({reason}) with score {score}")
            return session

    def get_owned(self, session_id: int, student_id: int) -> TestSession:
        session = self.store.get(session_id)
        if session.student_id != student_id:
            raise Forbidden("Not your session", {"session_id": session_id})
        return session

    # --- Time limits ---

    def deadline(self, session: TestSession, test: Test) -> Optional[datetime.datetime]:
        return test.deadline_for(session.started_at)

    def has_expired(self, session: TestSession, test: Test, now: Optional[datetime.datetime] = None) -> bool:
        if not session.is_open:
            return False
        deadline = self.deadline(session, test)
        return deadline is not None and (now or self.clock.now()) >= deadline

    def close_expired(self, close_all: bool = False, dry_run: bool = False) -> List[int]:
        """
        Close open sessions whose deadline has passed, or every open session
        when ``close_all`` is set.

        Returns:
            Ids of the sessions that were (or, on a dry run, would be) closed.
        """
        now = self.clock.now()
        reason = TestSession.EndReason.CLOSED if close_all else TestSession.EndReason.EXPIRED
        due = [
            session
            for session in self.store.open_sessions()
            if close_all or self.has_expired(session, session.test, now)
        ]
        if dry_run:
            return [session.pk for session in due]

        closed = []
        for session in due:
            completed = self.complete(session.pk, reason)
            if completed.end_reason == reason:
                closed.append(completed.pk)
        if closed:
            logger.info(f"Closed {len(closed)} open sessions ({reason})")
        return closed

    # --- Results ---

    def result(self, session: TestSession) -> Optional[SessionResult]:
        """Score summary of a completed session; None while it is open."""
        if session.is_open:
            return None
        test = session.test
        total = len(self.catalog.questions(test.bank_id))
        percentage = round(session.score / total * 100, 2) if total else 0.0
        return SessionResult(
            score=session.score,
            total=total,
            percentage=percentage,
            passed=percentage >= test.pass_mark,
        )
