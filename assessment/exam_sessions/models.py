from django.conf import settings
from django.db import models
from django.db.models import Q
from django.utils.translation import gettext_lazy as _

from ..catalog.models import Question, Test

User = settings.AUTH_USER_MODEL


class TestSession(models.Model):
    """
    One student's attempt at one test.

    A session is open while ``ended_at`` is empty. At most one open session may
    exist per student and test; the partial unique constraint enforces this in
    the database. ``score`` is written exactly once, when the session ends.
    """

    class Status(models.TextChoices):
        IN_PROGRESS = "IN_PROGRESS", _("In progress")
        COMPLETED = "COMPLETED", _("Completed")

    class EndReason(models.TextChoices):
        FINISHED = "finished", _("Finished by student")
        EXHAUSTED = "exhausted", _("All questions answered")
        EXPIRED = "expired", _("Time limit reached")
        CLOSED = "closed", _("Closed by administrator")

    student = models.ForeignKey(User, on_delete=models.CASCADE, related_name="test_sessions")
    test = models.ForeignKey(Test, on_delete=models.CASCADE, related_name="sessions")
    started_at = models.DateTimeField()
    ended_at = models.DateTimeField(null=True, blank=True)
    score = models.PositiveIntegerField(null=True, blank=True)
    question_seed = models.PositiveIntegerField(
        null=True,
        blank=True,
        help_text=_("Seed of the per-session question order for shuffled tests."),
    )
    end_reason = models.CharField(
        max_length=10, choices=EndReason.choices, blank=True, default=""
    )

    class Meta:
        verbose_name = _("Test Session")
        verbose_name_plural = _("Test Sessions")
        ordering = ["-started_at"]
        constraints = [
            models.UniqueConstraint(
                fields=["student", "test"],
                condition=Q(ended_at__isnull=True),
                name="unique_open_session_per_student_test",
            ),
        ]
        indexes = [
            models.Index(fields=["student", "test"], name="session_student_test_idx"),
        ]

    def __str__(self):
        return f"Session {self.pk} - {self.test} ({self.status})"

    @property
    def is_open(self) -> bool:
        return self.ended_at is None

    @property
    def status(self) -> str:
        return self.Status.IN_PROGRESS if self.is_open else self.Status.COMPLETED


class Answer(models.Model):
    session = models.ForeignKey(TestSession, on_delete=models.CASCADE, related_name="answers")
    question = models.ForeignKey(Question, on_delete=models.CASCADE, related_name="answers")
    selected_option = models.CharField(max_length=500)
    is_correct = models.BooleanField(default=False)
    answered_at = models.DateTimeField()

    class Meta:
        verbose_name = _("Answer")
        verbose_name_plural = _("Answers")
        ordering = ["session", "question"]
        constraints = [
            models.UniqueConstraint(
                fields=["session", "question"],
                name="unique_answer_per_session_question",
            ),
        ]

    def __str__(self):
        return f"Answer(session={self.session_id}, question={self.question_id})"
