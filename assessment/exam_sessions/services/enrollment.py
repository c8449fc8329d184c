from typing import Protocol

from ...catalog.models import SchoolClass, Test


class EnrollmentCheck(Protocol):
    """Answers whether a student may attempt a test."""

    def is_enrolled(self, student_id: int, test: Test) -> bool: ...


class CourseEnrollmentCheck:
    """A student may attempt a test when one of their classes belongs to the test's course."""

    def is_enrolled(self, student_id: int, test: Test) -> bool:
        return SchoolClass.objects.filter(
            course_id=test.course_id, students__id=student_id
        ).exists()
