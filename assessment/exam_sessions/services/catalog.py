"""
Test catalog: read access to tests and the questions of their banks.

Question lists are loaded per bank in creation order and kept in the TTL
cache as immutable records. The cache lives in the shared Django cache, so
saving or deleting a question invalidates its bank's entry for every worker
(see ``assessment.signals``).
"""

import datetime
import logging
from dataclasses import dataclass
from typing import Any, Dict, Optional, Tuple

from ...catalog.models import Question, Test
from .cache import TTLCache
from .exceptions import NotFound

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class CatalogQuestion:
    """Immutable snapshot of a question, including its answer key."""

    id: int
    bank_id: int
    text: str
    options: Any
    answer: str
    marks: int
    created_at: datetime.datetime

    @classmethod
    def from_model(cls, question: Question) -> "CatalogQuestion":
        return cls(
            id=question.pk,
            bank_id=question.bank_id,
            text=question.text,
            options=question.options,
            answer=question.answer,
            marks=question.marks,
            created_at=question.created_at,
        )

    def is_correct(self, selected_option: str) -> bool:
        return selected_option == self.answer

    def public(self) -> Dict[str, Any]:
        """Client-facing view of the question. Never contains the answer key."""
        return {
            "id": self.id,
            "text": self.text,
            "options": self.options,
            "marks": self.marks,
        }


class TestCatalog:
    def __init__(self, cache: TTLCache) -> None:
        self.cache = cache

    @staticmethod
    def bank_key(bank_id: int) -> Tuple[str, int]:
        return ("bank-questions", bank_id)

    def get_test(self, test_id: int) -> Test:
        try:
            return Test.objects.get(pk=test_id)
        except Test.DoesNotExist:
            raise NotFound("Test not found", {"test_id": test_id})

    def questions(self, bank_id: int) -> Tuple[CatalogQuestion, ...]:
        """All questions of a bank in creation order."""
        return self.cache.get_or_fetch(
            self.bank_key(bank_id), lambda: self._load_questions(bank_id)
        )

    def question_in_bank(self, bank_id: int, question_id: int) -> Optional[CatalogQuestion]:
        for question in self.questions(bank_id):
            if question.id == question_id:
                return question
        return None

    def invalidate_bank(self, bank_id: int) -> None:
        self.cache.invalidate(self.bank_key(bank_id))

    def _load_questions(self, bank_id: int) -> Tuple[CatalogQuestion, ...]:
        rows = Question.objects.filter(bank_id=bank_id).order_by("id")
        questions = tuple(CatalogQuestion.from_model(q) for q in rows)
        logger.debug(f"Loaded {len(questions)} questions for bank {bank_id}")
        return questions
