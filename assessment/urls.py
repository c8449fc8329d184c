"""
Assessment Application URL Configuration

URL Structure:
- /api/sessions/start/<test_id>/: start or resume an attempt
- /api/sessions/<session_id>/questions/<number>/: fetch a question by position
- /api/sessions/<session_id>/questions/<question_id>/submit/: record an answer only
- /api/sessions/<session_id>/answer/next/: record an answer, get the next question
- /api/sessions/<session_id>/answer/previous/: record an answer, get the previous question
- /api/sessions/<session_id>/finish/: finish the attempt
- /api/sessions/close-expired/: administrative sweep of open sessions

Author: Assessment Backend Team
Version: 1.0.0
"""

from typing import List

from django.urls import URLPattern, include, path

from .exam_sessions import views as session_views

app_name = "assessment"

# --- Exam Session URL Patterns ---

sessions_urlpatterns: List[URLPattern] = [
    path("start/<int:test_id>/", session_views.StartSessionView.as_view(), name="session-start"),
    path(
        "<int:session_id>/questions/<int:question_number>/",
        session_views.FetchQuestionView.as_view(),
        name="session-question",
    ),
    path(
        "<int:session_id>/questions/<int:question_id>/submit/",
        session_views.SubmitAnswerOnlyView.as_view(),
        name="session-submit",
    ),
    path(
        "<int:session_id>/answer/next/",
        session_views.SubmitAndNextView.as_view(),
        name="session-answer-next",
    ),
    path(
        "<int:session_id>/answer/previous/",
        session_views.SubmitAndPreviousView.as_view(),
        name="session-answer-previous",
    ),
    path("<int:session_id>/finish/", session_views.FinishSessionView.as_view(), name="session-finish"),
    path("close-expired/", session_views.CloseSessionsView.as_view(), name="session-close-expired"),
]

urlpatterns: List[URLPattern] = [
    path("sessions/", include(sessions_urlpatterns)),
]
