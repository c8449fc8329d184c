"""
Assessment Application Configuration

Builds the exam session engine once at start-up and keeps it on the app
config, from where views and management commands fetch it.

Author: Assessment Backend Team
Version: 1.0.0
"""

from django.apps import AppConfig


class AssessmentConfig(AppConfig):
    """
    Configuration class for the assessment Django application.

    Attributes:
        default_auto_field: Default primary key field type for models
        name: Application name for Django registration
        verbose_name: Human-readable application name for admin interface
        engine: Exam session engine shared by every request handler
    """

    default_auto_field: str = "django.db.models.BigAutoField"
    name: str = "assessment"
    verbose_name: str = "Assessment"

    def ready(self) -> None:
        super().ready()

        from .exam_sessions.services import build_engine
        from . import signals

        self.engine = build_engine()
        signals.connect_catalog_invalidation(self.engine.catalog)
