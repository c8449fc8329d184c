import logging
import random
from dataclasses import dataclass
from typing import Any, Dict, List, Optional

from ...catalog.models import Test
from ..models import TestSession
from .catalog import CatalogQuestion, TestCatalog
from .exceptions import InvalidState, SessionValidationError
from .store import SessionStore

logger = logging.getLogger(__name__)


def seeded_shuffle(items: List[Any], seed: int) -> List[Any]:
    """Deterministic shuffle: the same items and seed always give the same order."""
    result = list(items)
    random.Random(seed).shuffle(result)
    return result


@dataclass
class QuestionView:
    question: Dict[str, Any]
    index: int
    total: int
    answered: bool
    previous_answer: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        return {
            "question": self.question,
            "index": self.index,
            "total": self.total,
            "answered": self.answered,
            "previous_answer": self.previous_answer,
        }


class QuestionSequencer:
    """
    Maps question positions of a session to questions.

    Positions follow the bank's creation order. Tests that shuffle questions
    give each session its own order, derived from the seed stored on the
    session so that re-fetching a position always returns the same question.
    """

    def __init__(self, store: SessionStore, catalog: TestCatalog) -> None:
        self.store = store
        self.catalog = catalog

    def ordered_questions(self, session: TestSession, test: Test) -> List[CatalogQuestion]:
        """
        Questions in the session's order.

        For shuffled sessions only the questions that existed when the session
        started are shuffled; questions added later follow in creation order,
        so positions already handed out keep their question.
        """
        questions = list(self.catalog.questions(test.bank_id))
        if session.question_seed is None:
            return questions
        initial = [q for q in questions if q.created_at <= session.started_at]
        added = [q for q in questions if q.created_at > session.started_at]
        return seeded_shuffle(initial, session.question_seed) + added

    def fetch_by_number(self, session_id: int, question_number: int) -> QuestionView:
        """
        Return the question at 1-based position ``question_number``, without
        its answer key. Read-only; works on completed sessions too.

        Raises:
            NotFound: the session does not exist
            InvalidState: the test has no questions
            SessionValidationError: the position is outside ``1..total``
        """
        session = self.store.get(session_id)
        test = session.test
        questions = self.ordered_questions(session, test)
        if not questions:
            raise InvalidState("No questions available for this test", {"test_id": test.pk})

        total = len(questions)
        if not isinstance(question_number, int) or not 1 <= question_number <= total:
            raise SessionValidationError(
                "Invalid question number",
                {"question_number": question_number, "total": total},
            )

        question = questions[question_number - 1]
        answer = self.store.get_answer(session.pk, question.id)
        return QuestionView(
            question=question.public(),
            index=question_number,
            total=total,
            answered=answer is not None,
            previous_answer=answer.selected_option if answer else None,
        )
