"""
Shared fixtures for the assessment test suite.

Builds a small catalog (course, class, question bank, questions, test) and
users with a given role. Question ids follow the order of ``QUESTIONS``.
"""

import itertools
from dataclasses import dataclass
from typing import Iterable, List

from django.conf import settings
from django.contrib.auth.models import User
from django.core.cache import caches
from rest_framework_simplejwt.tokens import AccessToken

from assessment.models import Course, Profile, Question, QuestionBank, Role, SchoolClass, Test

PASSWORD = "Musterpassword"

# (text, options, answer)
QUESTIONS = [
    ("2 + 2 = ?", ["3", "4", "5"], "4"),
    ("1 + 2 = ?", ["2", "3", "4"], "3"),
    ("3 + 3 = ?", ["5", "6", "7"], "6"),
]

_course_codes = itertools.count(1)


@dataclass
class ExamFixture:
    course: Course
    school_class: SchoolClass
    bank: QuestionBank
    questions: List[Question]
    test: Test


def create_user(username: str, role: str = Role.STUDENT, **extra) -> User:
    user = User.objects.create_user(
        username=username, password=PASSWORD, email=f"{username}@test.com", **extra
    )
    Profile.objects.filter(user=user).update(role=role)
    return user


def create_exam(students: Iterable[User] = (), num_questions: int = 2, **test_fields) -> ExamFixture:
    code = f"C{next(_course_codes):03d}"
    course = Course.objects.create(title=f"Mathematics {code}", code=code)
    school_class = SchoolClass.objects.create(name="Class A", course=course)
    school_class.students.add(*students)

    bank = QuestionBank.objects.create(name=f"Bank {code}", course=course)
    questions = [
        Question.objects.create(bank=bank, text=text, options=options, answer=answer)
        for text, options, answer in QUESTIONS[:num_questions]
    ]

    test_fields.setdefault("active", True)
    test = Test.objects.create(title=f"Test {code}", course=course, bank=bank, **test_fields)
    return ExamFixture(
        course=course, school_class=school_class, bank=bank, questions=questions, test=test
    )


def access_token_for(user: User) -> str:
    return str(AccessToken.for_user(user))


def reset_question_cache() -> None:
    """Drop cached question lists; row ids are reused after a test's rollback."""
    caches[settings.EXAM_QUESTION_CACHE_ALIAS].clear()
