from rest_framework import status
from rest_framework.response import Response
from rest_framework.views import APIView

from ..services import SessionError, get_engine


def success(message: str, data=None, status_code: int = status.HTTP_200_OK) -> Response:
    return Response({"success": True, "message": message, "data": data}, status=status_code)


def failure(message: str, details=None, status_code: int = status.HTTP_400_BAD_REQUEST) -> Response:
    return Response({"success": False, "message": message, "details": details}, status=status_code)


class EngineAPIView(APIView):
    """
    APIView with access to the exam session engine.

    Engine errors are turned into the standard error envelope with the
    status code the error class declares.
    """

    @property
    def engine(self):
        return get_engine()

    def handle_exception(self, exc):
        if isinstance(exc, SessionError):
            error = exc.to_dict()
            return failure(error["message"], error, exc.status_code)
        return super().handle_exception(exc)

    def invalid(self, serializer) -> Response:
        return failure("Invalid request body", serializer.errors)
