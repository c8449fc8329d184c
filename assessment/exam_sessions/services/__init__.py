from .engine import ExamSessionEngine, build_engine, get_engine
from .exceptions import (
    Forbidden,
    InvalidState,
    NotFound,
    SessionError,
    SessionValidationError,
)
