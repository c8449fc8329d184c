"""
Answer Recorder Tests

Recording answers, navigation after a submission, completion on exhaustion
and the rejection of answers to closed or expired sessions.
"""

from django.test import TestCase
from django.utils import timezone

from assessment.exam_sessions.models import Answer, TestSession
from assessment.exam_sessions.services import (
    InvalidState,
    NotFound,
    SessionValidationError,
    build_engine,
)
from assessment.exam_sessions.services.clock import FixedClock
from assessment.models import Question, QuestionBank, Test
from assessment.tests.helpers import create_exam, create_user, reset_question_cache


class AnswerRecorderTests(TestCase):
    @classmethod
    def setUpTestData(cls):
        cls.student = create_user("student")
        cls.exam = create_exam(students=[cls.student])
        cls.first, cls.second = cls.exam.questions

        other_bank = QuestionBank.objects.create(name="Other bank")
        cls.foreign_question = Question.objects.create(
            bank=other_bank, text="Capital of France?", options=["Paris", "Rome"], answer="Paris"
        )

    def setUp(self):
        reset_question_cache()
        self.clock = FixedClock(timezone.now())
        self.engine = build_engine(clock=self.clock)
        self.recorder = self.engine.recorder
        self.session = self.engine.lifecycle.start(self.student.id, self.exam.test.id)

    # --- Submit only ---

    def test_submit_only_records_answer(self):
        result = self.recorder.submit_only(self.session.pk, self.first.id, "4")

        self.assertEqual(result, {"ok": True})
        answer = Answer.objects.get(session=self.session, question=self.first)
        self.assertEqual(answer.selected_option, "4")
        self.assertTrue(answer.is_correct)
        self.assertEqual(answer.answered_at, self.clock.now())

    def test_wrong_answer_is_recorded_as_incorrect(self):
        self.recorder.submit_only(self.session.pk, self.first.id, "5")
        answer = Answer.objects.get(session=self.session, question=self.first)
        self.assertFalse(answer.is_correct)

    def test_resubmission_overwrites_answer(self):
        self.recorder.submit_only(self.session.pk, self.first.id, "5")
        self.clock.advance(seconds=30)
        self.recorder.submit_only(self.session.pk, self.first.id, "4")

        answers = Answer.objects.filter(session=self.session, question=self.first)
        self.assertEqual(answers.count(), 1)
        self.assertEqual(answers.get().selected_option, "4")
        self.assertTrue(answers.get().is_correct)
        self.assertEqual(answers.get().answered_at, self.clock.now())

    def test_question_outside_test(self):
        with self.assertRaises(SessionValidationError):
            self.recorder.submit_only(self.session.pk, self.foreign_question.id, "Paris")
        self.assertFalse(Answer.objects.filter(session=self.session).exists())

    def test_unknown_session(self):
        with self.assertRaises(NotFound):
            self.recorder.submit_only(999999, self.first.id, "4")

    # --- Submit and advance ---

    def test_advance_returns_next_unanswered_question(self):
        result = self.recorder.submit_and_advance(self.session.pk, self.first.id, "4")

        self.assertFalse(result.finished)
        self.assertEqual(result.next_question["id"], self.second.id)
        self.assertNotIn("answer", result.next_question)
        self.assertEqual(result.progress, {"answered": 1, "total": 2})

    def test_advance_skips_answered_questions(self):
        self.recorder.submit_only(self.session.pk, self.first.id, "4")
        result = self.recorder.submit_and_advance(self.session.pk, self.first.id, "3")

        self.assertFalse(result.finished)
        self.assertEqual(result.next_question["id"], self.second.id)

    def test_advance_returns_earlier_question_left_open(self):
        result = self.recorder.submit_and_advance(self.session.pk, self.second.id, "3")
        self.assertEqual(result.next_question["id"], self.first.id)

    def test_last_answer_completes_session(self):
        self.recorder.submit_and_advance(self.session.pk, self.first.id, "4")
        result = self.recorder.submit_and_advance(self.session.pk, self.second.id, "2")

        self.assertTrue(result.finished)
        self.assertEqual(result.score, 1)
        self.assertEqual(result.to_dict()["score"], 1)
        self.assertNotIn("next_question", result.to_dict())

        self.session.refresh_from_db()
        self.assertFalse(self.session.is_open)
        self.assertEqual(self.session.score, 1)
        self.assertEqual(self.session.end_reason, TestSession.EndReason.EXHAUSTED)

    def test_finish_after_exhaustion_keeps_score(self):
        self.recorder.submit_and_advance(self.session.pk, self.first.id, "4")
        self.recorder.submit_and_advance(self.session.pk, self.second.id, "3")
        ended_at = TestSession.objects.get(pk=self.session.pk).ended_at

        self.clock.advance(minutes=1)
        finished = self.engine.lifecycle.finish(self.session.pk, self.student.id)
        self.assertEqual(finished.score, 2)
        self.assertEqual(finished.ended_at, ended_at)
        self.assertEqual(finished.end_reason, TestSession.EndReason.EXHAUSTED)

    # --- Closed sessions ---

    def test_closed_session_rejects_answers(self):
        self.engine.lifecycle.finish(self.session.pk, self.student.id)

        with self.assertRaises(InvalidState):
            self.recorder.submit_only(self.session.pk, self.first.id, "4")
        with self.assertRaises(InvalidState):
            self.recorder.submit_and_advance(self.session.pk, self.first.id, "4")
        self.assertFalse(Answer.objects.filter(session=self.session).exists())

    def test_answers_are_frozen_after_completion(self):
        self.recorder.submit_only(self.session.pk, self.first.id, "5")
        self.engine.lifecycle.finish(self.session.pk, self.student.id)

        with self.assertRaises(InvalidState):
            self.recorder.submit_only(self.session.pk, self.first.id, "4")
        answer = Answer.objects.get(session=self.session, question=self.first)
        self.assertEqual(answer.selected_option, "5")

    def test_expired_session_is_closed_on_submit(self):
        Test.objects.filter(pk=self.exam.test.pk).update(duration=10)
        self.recorder.submit_only(self.session.pk, self.first.id, "4")
        self.clock.advance(minutes=11)

        with self.assertRaises(InvalidState):
            self.recorder.submit_and_advance(self.session.pk, self.second.id, "3")

        self.session.refresh_from_db()
        self.assertEqual(self.session.end_reason, TestSession.EndReason.EXPIRED)
        self.assertEqual(self.session.score, 1)
        self.assertFalse(Answer.objects.filter(session=self.session, question=self.second).exists())

    # --- Submit and go back ---

    def test_go_back_returns_previous_question(self):
        result = self.recorder.submit_and_go_back(self.session.pk, self.second.id, "3")

        self.assertEqual(result.previous_question["id"], self.first.id)
        self.assertNotIn("answer", result.previous_question)
        self.assertEqual(result.progress, {"index": 1, "answered": 1, "total": 2})
        self.assertTrue(
            Answer.objects.filter(session=self.session, question=self.second).exists()
        )

    def test_go_back_without_answer_records_nothing(self):
        result = self.recorder.submit_and_go_back(self.session.pk, self.second.id)

        self.assertEqual(result.previous_question["id"], self.first.id)
        self.assertFalse(Answer.objects.filter(session=self.session).exists())

    def test_go_back_from_first_question(self):
        result = self.recorder.submit_and_go_back(self.session.pk, self.first.id, "4")

        self.assertIsNone(result.previous_question)
        self.assertEqual(result.to_dict()["message"], "Already at the first question.")
        self.assertEqual(result.progress["index"], 1)

    def test_go_back_does_not_complete_session(self):
        self.recorder.submit_only(self.session.pk, self.first.id, "4")
        self.recorder.submit_and_go_back(self.session.pk, self.second.id, "3")

        self.session.refresh_from_db()
        self.assertTrue(self.session.is_open)

    def test_go_back_with_question_outside_test(self):
        with self.assertRaises(SessionValidationError):
            self.recorder.submit_and_go_back(self.session.pk, self.foreign_question.id)
