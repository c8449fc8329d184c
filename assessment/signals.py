"""
Keeps the engine's cached question lists in step with the question bank.
"""

import logging

from django.db.models.signals import post_delete, post_save

from .catalog.models import Question

logger = logging.getLogger(__name__)


def connect_catalog_invalidation(catalog) -> None:
    def invalidate_question_bank(sender, instance: Question, **kwargs) -> None:
        catalog.invalidate_bank(instance.bank_id)
        logger.debug(f"Question {instance.pk} changed, bank {instance.bank_id} cache dropped")

    post_save.connect(
        invalidate_question_bank,
        sender=Question,
        weak=False,
        dispatch_uid="assessment.invalidate_question_bank.save",
    )
    post_delete.connect(
        invalidate_question_bank,
        sender=Question,
        weak=False,
        dispatch_uid="assessment.invalidate_question_bank.delete",
    )
