"""
Exam Session Exceptions

Typed errors raised by the exam session engine. Every precondition failure is
reported through one of these classes so that callers never see raw storage
exceptions. The presentation layer maps them to HTTP responses through
``status_code`` and ``to_dict``.

Hierarchy:
- SessionError
  - NotFound: test, session or question does not exist
  - Forbidden: caller is not allowed to act on the test or session
  - InvalidState: the test or session is not in a state that allows the action
  - SessionValidationError: request values are out of range or inconsistent

Author: Assessment Backend Team
Version: 1.0.0
"""

from typing import Any, Dict, Optional


class SessionError(Exception):
    """
    Base class for all exam session engine errors.

    Attributes:
        message (str): Human-readable error message
        status_code (int): HTTP status the presentation layer should use
        error_code (str): Stable machine-readable error identifier
        details (Dict[str, Any]): Additional context for the caller
    """

    status_code: int = 400
    error_code: str = "SessionError"

    def __init__(self, message: str, details: Optional[Dict[str, Any]] = None) -> None:
        self.message = message
        self.details = details or {}
        super().__init__(self.message)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "message": self.message,
            "error_code": self.error_code,
            "details": self.details,
        }


class NotFound(SessionError):
    status_code = 404
    error_code = "NotFound"


class Forbidden(SessionError):
    status_code = 403
    error_code = "Forbidden"


class InvalidState(SessionError):
    status_code = 409
    error_code = "InvalidState"


class SessionValidationError(SessionError):
    status_code = 400
    error_code = "ValidationError"
