"""
Assessment Catalog Models

Read-side data the exam session engine consumes: courses and the classes that
enrol students in them, question banks with their questions, and the tests that
draw on a bank. Maintaining these records (CRUD, imports, images) happens
elsewhere; the engine only reads them.

Models:
- Course: a subject taught to one or more classes
- SchoolClass: a group of students enrolled in a course
- QuestionBank: pool of questions a test draws from
- Question: one multiple-choice item, ordered by creation
- Test: a timed, optionally windowed assessment over a bank

Author: Assessment Backend Team
Version: 1.0.0
"""

import datetime
from typing import Optional

from django.conf import settings
from django.core.validators import MaxValueValidator, MinValueValidator
from django.db import models
from django.utils.translation import gettext_lazy as _

User = settings.AUTH_USER_MODEL


class Course(models.Model):
    title = models.CharField(max_length=200)
    code = models.CharField(max_length=30, unique=True)
    created_by = models.ForeignKey(
        User,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="created_courses",
    )
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        verbose_name = _("Course")
        verbose_name_plural = _("Courses")
        ordering = ["code"]

    def __str__(self):
        return f"{self.code} - {self.title}"


class SchoolClass(models.Model):
    name = models.CharField(max_length=100)
    course = models.ForeignKey(Course, on_delete=models.CASCADE, related_name="classes")
    students = models.ManyToManyField(User, blank=True, related_name="school_classes")

    class Meta:
        verbose_name = _("Class")
        verbose_name_plural = _("Classes")
        unique_together = ("course", "name")
        ordering = ["course", "name"]

    def __str__(self):
        return f"{self.name} ({self.course.code})"


class QuestionBank(models.Model):
    name = models.CharField(max_length=200)
    course = models.ForeignKey(
        Course,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="question_banks",
    )
    created_by = models.ForeignKey(
        User,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="question_banks",
    )
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        verbose_name = _("Question Bank")
        verbose_name_plural = _("Question Banks")
        ordering = ["name"]

    def __str__(self):
        return self.name


class Question(models.Model):
    """
    A multiple-choice question.

    ``options`` holds either a list of option strings or a mapping of option
    key to option text; ``answer`` equals one option string or one option key.
    ``marks`` is the declared weight of the question. Scores are a plain count
    of correct answers and do not use it.
    """

    bank = models.ForeignKey(QuestionBank, on_delete=models.CASCADE, related_name="questions")
    text = models.TextField()
    options = models.JSONField(default=list)
    answer = models.CharField(max_length=500)
    marks = models.PositiveIntegerField(default=1)
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        verbose_name = _("Question")
        verbose_name_plural = _("Questions")
        ordering = ["id"]

    def __str__(self):
        return f"Q{self.pk}: {self.text[:40]}"


class Test(models.Model):
    title = models.CharField(max_length=200)
    course = models.ForeignKey(Course, on_delete=models.CASCADE, related_name="tests")
    bank = models.ForeignKey(QuestionBank, on_delete=models.PROTECT, related_name="tests")
    start_time = models.DateTimeField(null=True, blank=True)
    end_time = models.DateTimeField(null=True, blank=True)
    active = models.BooleanField(default=False)
    pass_mark = models.PositiveSmallIntegerField(
        default=50,
        validators=[MinValueValidator(0), MaxValueValidator(100)],
        help_text=_("Minimum percentage required to pass."),
    )
    attempts_allowed = models.PositiveSmallIntegerField(
        null=True,
        blank=True,
        help_text=_("Maximum number of completed attempts. Empty means unlimited."),
    )
    duration = models.PositiveIntegerField(
        null=True,
        blank=True,
        help_text=_("Time allowed per attempt in minutes. Empty means untimed."),
    )
    shuffle_questions = models.BooleanField(
        default=False,
        help_text=_("Serve each session its own reproducible question order."),
    )
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        verbose_name = _("Test")
        verbose_name_plural = _("Tests")
        ordering = ["-created_at"]

    def __str__(self):
        return self.title

    def has_opened(self, now: datetime.datetime) -> bool:
        return self.start_time is None or self.start_time <= now

    def has_closed(self, now: datetime.datetime) -> bool:
        return self.end_time is not None and self.end_time < now

    def deadline_for(self, started_at: datetime.datetime) -> Optional[datetime.datetime]:
        """
        Latest moment an attempt started at ``started_at`` may stay open.

        The earlier of the duration limit and the test's end time, or None for
        an untimed test without an end time.
        """
        candidates = []
        if self.duration:
            candidates.append(started_at + datetime.timedelta(minutes=self.duration))
        if self.end_time is not None:
            candidates.append(self.end_time)
        return min(candidates) if candidates else None
