"""
Answer recorder: validates and stores a single answer per question, then
decides where the student goes next.

Answers are upserted per (session, question): resubmitting a question while the
session is open overwrites the earlier choice. When the last unanswered
question receives an answer the session is completed in the same transaction.
"""

import logging
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Tuple

from django.db import transaction

from ...catalog.models import Test
from ..models import TestSession
from .catalog import CatalogQuestion
from .exceptions import InvalidState, SessionValidationError
from .lifecycle import SessionLifecycleManager
from .sequencer import QuestionSequencer
from .store import SessionStore

logger = logging.getLogger(__name__)


@dataclass
class SubmissionResult:
    finished: bool
    next_question: Optional[Dict[str, Any]] = None
    score: Optional[int] = None
    progress: Dict[str, int] = field(default_factory=dict)

    def to_dict(self) -> Dict[str, Any]:
        if self.finished:
            return {"finished": True, "score": self.score, "progress": self.progress}
        return {
            "finished": False,
            "next_question": self.next_question,
            "progress": self.progress,
        }


@dataclass
class PreviousQuestionResult:
    previous_question: Optional[Dict[str, Any]]
    progress: Dict[str, int]
    message: str = ""

    def to_dict(self) -> Dict[str, Any]:
        data = {
            "finished": False,
            "previous_question": self.previous_question,
            "progress": self.progress,
        }
        if self.message:
            data["message"] = self.message
        return data


class AnswerRecorder:
    def __init__(
        self,
        store: SessionStore,
        lifecycle: SessionLifecycleManager,
        sequencer: QuestionSequencer,
    ) -> None:
        self.store = store
        self.lifecycle = lifecycle
        self.sequencer = sequencer
        self.catalog = sequencer.catalog
        self.clock = lifecycle.clock

    def submit_only(self, session_id: int, question_id: int, selected_option: str) -> Dict[str, bool]:
        """Record an answer without computing navigation."""
        self._expire_if_due(session_id)
        with transaction.atomic():
            self._record(session_id, question_id, selected_option)
        return {"ok": True}

    def submit_and_advance(self, session_id: int, question_id: int, selected_option: str) -> SubmissionResult:
        """
        Record an answer and return the first unanswered question, or complete
        the session when every question has an answer.

        Raises:
            NotFound: the session does not exist
            InvalidState: the session is closed or its time is up
            SessionValidationError: the question is not part of the session's test
        """
        self._expire_if_due(session_id)
        with transaction.atomic():
            session, test = self._record(session_id, question_id, selected_option)
            questions = self.sequencer.ordered_questions(session, test)
            answered = self.store.answered_question_ids(session.pk)
            progress = {"answered": len(answered), "total": len(questions)}

            next_question = next((q for q in questions if q.id not in answered), None)
            if next_question is None:
                completed = self.lifecycle.complete(session.pk, TestSession.EndReason.EXHAUSTED)
                return SubmissionResult(finished=True, score=completed.score, progress=progress)

        return SubmissionResult(
            finished=False, next_question=next_question.public(), progress=progress
        )

    def submit_and_go_back(
        self, session_id: int, question_id: int, selected_option: Optional[str] = None
    ) -> PreviousQuestionResult:
        """
        Record the answer (when one is given) and return the question before
        ``question_id`` in the session's order.
        """
        self._expire_if_due(session_id)
        with transaction.atomic():
            if selected_option is not None:
                session, test = self._record(session_id, question_id, selected_option)
            else:
                session, test = self._open_session(session_id)
            questions = self.sequencer.ordered_questions(session, test)
            position = self._position_of(questions, question_id, test)
            answered = self.store.answered_question_ids(session.pk)

        progress = {
            "index": max(position - 1, 1),
            "answered": len(answered),
            "total": len(questions),
        }
        if position == 1:
            return PreviousQuestionResult(
                previous_question=None,
                progress=progress,
                message="Already at the first question.",
            )
        return PreviousQuestionResult(
            previous_question=questions[position - 2].public(), progress=progress
        )

    # --- Internals ---

    def _expire_if_due(self, session_id: int) -> None:
        """
        Close the session when its deadline has passed and reject the request.

        Runs outside the recording transaction so that the expiry is committed
        even though the request fails.
        """
        session = self.store.get(session_id)
        if self.lifecycle.has_expired(session, session.test):
            self.lifecycle.complete(session.pk, TestSession.EndReason.EXPIRED)
            raise InvalidState("Time is up for this session", {"session_id": session.pk})

    def _open_session(self, session_id: int) -> Tuple[TestSession, Test]:
        session = self.store.get(session_id, for_update=True)
        if not session.is_open:
            raise InvalidState("Session already finished", {"session_id": session.pk})
        return session, session.test

    def _record(self, session_id: int, question_id: int, selected_option: str) -> Tuple[TestSession, Test]:
        session, test = self._open_session(session_id)

        question = self.catalog.question_in_bank(test.bank_id, question_id)
        if question is None:
            raise SessionValidationError(
                "Question is not part of this test",
                {"question_id": question_id, "test_id": test.pk},
            )

        is_correct = question.is_correct(selected_option)
        _answer, created = self.store.upsert_answer(
            session.pk, question.id, selected_option, is_correct, self.clock.now()
        )
        logger.debug(
            f"{'Recorded' if created else 'Updated'} answer for session {session.pk}, question {question.id}"
        )
        return session, test

    @staticmethod
    def _position_of(questions: List[CatalogQuestion], question_id: int, test: Test) -> int:
        for position, question in enumerate(questions, start=1):
            if question.id == question_id:
                return position
        raise SessionValidationError(
            "Question is not part of this test",
            {"question_id": question_id, "test_id": test.pk},
        )
