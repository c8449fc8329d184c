"""
Exam Session API Tests

End-to-end checks of the session endpoints through the Django test client:
authentication by cookie or header, role checks, the response envelope and a
complete two-question attempt.
"""

import json

from django.test import SimpleTestCase, TestCase
from rest_framework import status

from assessment.exam_sessions.models import Answer, TestSession
from assessment.exam_sessions.serializers import AnswerNavigationSerializer, SelectedOptionSerializer
from assessment.models import Role
from assessment.tests.helpers import (
    access_token_for,
    create_exam,
    create_user,
    reset_question_cache,
)


class SessionAPITests(TestCase):
    @classmethod
    def setUpTestData(cls):
        cls.student = create_user("student")
        cls.other_student = create_user("other_student")
        cls.teacher = create_user("teacher", role=Role.TEACHER)
        cls.admin = create_user("admin", role=Role.ADMIN)
        cls.exam = create_exam(students=[cls.student, cls.other_student])
        cls.first, cls.second = cls.exam.questions

    def setUp(self):
        reset_question_cache()
        self.login(self.student)

    # --- Helpers ---

    def login(self, user):
        self.client.cookies["access_token"] = access_token_for(user)

    def post(self, url, data=None):
        return self.client.post(url, json.dumps(data or {}), content_type="application/json")

    def start(self):
        response = self.post(f"/api/sessions/start/{self.exam.test.id}/")
        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        return response.json()["data"]["id"]

    # --- Full attempt ---

    def test_two_question_attempt(self):
        response = self.post(f"/api/sessions/start/{self.exam.test.id}/")
        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        body = response.json()
        self.assertTrue(body["success"])
        self.assertEqual(body["data"]["total_questions"], 2)
        self.assertEqual(body["data"]["status"], "IN_PROGRESS")
        session_id = body["data"]["id"]

        response = self.client.get(f"/api/sessions/{session_id}/questions/1/")
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        data = response.json()["data"]
        self.assertEqual(data["question"]["id"], self.first.id)
        self.assertNotIn("answer", data["question"])
        self.assertFalse(data["answered"])

        response = self.post(
            f"/api/sessions/{session_id}/answer/next/",
            {"question_id": self.first.id, "selected_option": "4"},
        )
        data = response.json()["data"]
        self.assertFalse(data["finished"])
        self.assertEqual(data["next_question"]["id"], self.second.id)
        self.assertNotIn("answer", data["next_question"])

        response = self.post(
            f"/api/sessions/{session_id}/answer/next/",
            {"question_id": self.second.id, "selected_option": "3"},
        )
        data = response.json()["data"]
        self.assertTrue(data["finished"])
        self.assertEqual(data["score"], 2)

        response = self.client.get(f"/api/sessions/{session_id}/questions/1/")
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertTrue(response.json()["data"]["answered"])

        response = self.post(f"/api/sessions/{session_id}/finish/")
        data = response.json()["data"]
        self.assertEqual(data["status"], "COMPLETED")
        self.assertEqual(data["score"], 2)
        self.assertEqual(data["end_reason"], "exhausted")
        self.assertEqual(
            data["result"], {"score": 2, "total": 2, "percentage": 100.0, "passed": True}
        )

    def test_start_is_idempotent(self):
        first = self.start()
        second = self.start()
        self.assertEqual(first, second)
        self.assertEqual(TestSession.objects.filter(student=self.student).count(), 1)

    def test_submit_only(self):
        session_id = self.start()
        response = self.post(
            f"/api/sessions/{session_id}/questions/{self.first.id}/submit/",
            {"selected_option": "4"},
        )
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.json()["data"], {"ok": True})

    def test_selected_option_is_compared_verbatim(self):
        session_id = self.start()
        response = self.post(
            f"/api/sessions/{session_id}/questions/{self.first.id}/submit/",
            {"selected_option": " 4 "},
        )
        self.assertEqual(response.status_code, status.HTTP_200_OK)

        answer = Answer.objects.get(session_id=session_id, question=self.first)
        self.assertEqual(answer.selected_option, " 4 ")
        self.assertFalse(answer.is_correct)

    def test_submit_and_previous(self):
        session_id = self.start()
        response = self.post(
            f"/api/sessions/{session_id}/answer/previous/",
            {"question_id": self.second.id, "selected_option": "3"},
        )
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        data = response.json()["data"]
        self.assertEqual(data["previous_question"]["id"], self.first.id)
        self.assertEqual(data["progress"], {"index": 1, "answered": 1, "total": 2})

    # --- Errors ---

    def test_unknown_test(self):
        response = self.post("/api/sessions/start/999999/")
        self.assertEqual(response.status_code, status.HTTP_404_NOT_FOUND)
        body = response.json()
        self.assertFalse(body["success"])
        self.assertEqual(body["message"], "Test not found")
        self.assertEqual(body["details"]["error_code"], "NotFound")

    def test_question_number_out_of_range(self):
        session_id = self.start()
        response = self.client.get(f"/api/sessions/{session_id}/questions/3/")
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertEqual(response.json()["details"]["error_code"], "ValidationError")

    def test_answer_after_finish(self):
        session_id = self.start()
        self.post(f"/api/sessions/{session_id}/finish/")

        response = self.post(
            f"/api/sessions/{session_id}/answer/next/",
            {"question_id": self.first.id, "selected_option": "4"},
        )
        self.assertEqual(response.status_code, status.HTTP_409_CONFLICT)
        self.assertEqual(response.json()["details"]["error_code"], "InvalidState")

    def test_invalid_body(self):
        session_id = self.start()
        response = self.post(f"/api/sessions/{session_id}/answer/next/", {"selected_option": "4"})
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        body = response.json()
        self.assertFalse(body["success"])
        self.assertIn("question_id", body["details"])

    def test_foreign_session(self):
        session_id = self.start()
        self.login(self.other_student)

        response = self.client.get(f"/api/sessions/{session_id}/questions/1/")
        self.assertEqual(response.status_code, status.HTTP_403_FORBIDDEN)
        response = self.post(f"/api/sessions/{session_id}/finish/")
        self.assertEqual(response.status_code, status.HTTP_403_FORBIDDEN)

    # --- Authentication and roles ---

    def test_requires_authentication(self):
        self.client.cookies.clear()
        response = self.post(f"/api/sessions/start/{self.exam.test.id}/")
        self.assertEqual(response.status_code, status.HTTP_401_UNAUTHORIZED)

    def test_authorization_header(self):
        self.client.cookies.clear()
        response = self.client.post(
            f"/api/sessions/start/{self.exam.test.id}/",
            HTTP_AUTHORIZATION=f"Bearer {access_token_for(self.student)}",
        )
        self.assertEqual(response.status_code, status.HTTP_201_CREATED)

    def test_teacher_cannot_start(self):
        self.login(self.teacher)
        response = self.post(f"/api/sessions/start/{self.exam.test.id}/")
        self.assertEqual(response.status_code, status.HTTP_403_FORBIDDEN)

    # --- Administration ---

    def test_admin_closes_all_sessions(self):
        session_id = self.start()
        self.login(self.admin)

        response = self.post("/api/sessions/close-expired/", {"close_all": True})
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.json()["data"], {"count": 1, "session_ids": [session_id]})
        self.assertEqual(
            TestSession.objects.get(pk=session_id).end_reason, TestSession.EndReason.CLOSED
        )

    def test_admin_close_expired_without_expired_sessions(self):
        self.start()
        self.login(self.admin)

        response = self.post("/api/sessions/close-expired/")
        self.assertEqual(response.json()["data"]["count"], 0)

    def test_student_cannot_close_sessions(self):
        response = self.post("/api/sessions/close-expired/", {"close_all": True})
        self.assertEqual(response.status_code, status.HTTP_403_FORBIDDEN)


class AnswerSerializerTests(SimpleTestCase):
    def test_selected_option_keeps_whitespace(self):
        serializer = SelectedOptionSerializer(data={"selected_option": "  Paris "})
        self.assertTrue(serializer.is_valid())
        self.assertEqual(serializer.validated_data["selected_option"], "  Paris ")

    def test_navigation_requires_question_id(self):
        serializer = AnswerNavigationSerializer(data={"selected_option": "4"})
        self.assertFalse(serializer.is_valid())
        self.assertIn("question_id", serializer.errors)
