from rest_framework import status

from ...users.permissions import CanTakeTests
from ..serializers import (
    AnswerNavigationSerializer,
    PreviousNavigationSerializer,
    SelectedOptionSerializer,
    TestSessionSerializer,
)
from .base import EngineAPIView, success

__all__ = [
    "StartSessionView",
    "FetchQuestionView",
    "SubmitAnswerOnlyView",
    "SubmitAndNextView",
    "SubmitAndPreviousView",
    "FinishSessionView",
]


class StudentSessionView(EngineAPIView):
    permission_classes = [CanTakeTests]

    def owned_session(self, session_id):
        return self.engine.lifecycle.get_owned(session_id, self.request.user.id)

    def session_data(self, session):
        return TestSessionSerializer(
            session, context={"request": self.request, "lifecycle": self.engine.lifecycle}
        ).data


class StartSessionView(StudentSessionView):
    def post(self, request, test_id):
        session = self.engine.lifecycle.start(request.user.id, test_id)
        total = len(self.engine.catalog.questions(session.test.bank_id))
        data = {**self.session_data(session), "total_questions": total}
        return success("Session started", data, status.HTTP_201_CREATED)


class FetchQuestionView(StudentSessionView):
    def get(self, request, session_id, question_number):
        self.owned_session(session_id)
        view = self.engine.sequencer.fetch_by_number(session_id, question_number)
        return success("Question fetched", view.to_dict())


class SubmitAnswerOnlyView(StudentSessionView):
    def post(self, request, session_id, question_id):
        self.owned_session(session_id)
        serializer = SelectedOptionSerializer(data=request.data)
        if not serializer.is_valid():
            return self.invalid(serializer)

        data = self.engine.recorder.submit_only(
            session_id, question_id, serializer.validated_data["selected_option"]
        )
        return success("Answer submitted", data)


class SubmitAndNextView(StudentSessionView):
    def post(self, request, session_id):
        self.owned_session(session_id)
        serializer = AnswerNavigationSerializer(data=request.data)
        if not serializer.is_valid():
            return self.invalid(serializer)

        result = self.engine.recorder.submit_and_advance(
            session_id,
            serializer.validated_data["question_id"],
            serializer.validated_data["selected_option"],
        )
        message = "Session completed" if result.finished else "Answer submitted"
        return success(message, result.to_dict())


class SubmitAndPreviousView(StudentSessionView):
    def post(self, request, session_id):
        self.owned_session(session_id)
        serializer = PreviousNavigationSerializer(data=request.data)
        if not serializer.is_valid():
            return self.invalid(serializer)

        result = self.engine.recorder.submit_and_go_back(
            session_id,
            serializer.validated_data["question_id"],
            serializer.validated_data.get("selected_option"),
        )
        return success("Answer submitted", result.to_dict())


class FinishSessionView(StudentSessionView):
    def post(self, request, session_id):
        session = self.engine.lifecycle.finish(session_id, request.user.id)
        return success("Session finished", self.session_data(session))
