from dataclasses import dataclass
from typing import Optional

from django.conf import settings

from .cache import TTLCache
from .catalog import TestCatalog
from .clock import Clock, SystemClock
from .enrollment import CourseEnrollmentCheck, EnrollmentCheck
from .lifecycle import SessionLifecycleManager
from .recorder import AnswerRecorder
from .sequencer import QuestionSequencer
from .store import SessionStore

DEFAULT_QUESTION_CACHE_TTL = 30 * 60
DEFAULT_QUESTION_CACHE_ALIAS = "default"


@dataclass
class ExamSessionEngine:
    catalog: TestCatalog
    lifecycle: SessionLifecycleManager
    sequencer: QuestionSequencer
    recorder: AnswerRecorder


def build_engine(
    clock: Optional[Clock] = None,
    enrollment: Optional[EnrollmentCheck] = None,
    cache_ttl: Optional[float] = None,
) -> ExamSessionEngine:
    """
    Wire the engine components together.

    Called once when the app starts (see ``AssessmentConfig.ready``); tests
    build their own engines with a fixed clock.
    """
    clock = clock or SystemClock()
    if cache_ttl is None:
        cache_ttl = getattr(settings, "EXAM_QUESTION_CACHE_TTL", DEFAULT_QUESTION_CACHE_TTL)

    store = SessionStore()
    cache_alias = getattr(settings, "EXAM_QUESTION_CACHE_ALIAS", DEFAULT_QUESTION_CACHE_ALIAS)
    catalog = TestCatalog(TTLCache(clock=clock, ttl=cache_ttl, alias=cache_alias))
    lifecycle = SessionLifecycleManager(
        store, catalog, enrollment or CourseEnrollmentCheck(), clock
    )
    sequencer = QuestionSequencer(store, catalog)
    recorder = AnswerRecorder(store, lifecycle, sequencer)
    return ExamSessionEngine(
        catalog=catalog, lifecycle=lifecycle, sequencer=sequencer, recorder=recorder
    )


def get_engine() -> ExamSessionEngine:
    """The engine constructed at application start."""
    from django.apps import apps

    return apps.get_app_config("assessment").engine
