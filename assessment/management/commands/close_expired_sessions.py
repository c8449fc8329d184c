"""
Close Expired Sessions Command

Finishes open exam sessions whose time limit or test end time has passed, so
that their scores are recorded even when the student never comes back. Can be
run manually or from a cron job.

Usage:
    python manage.py close_expired_sessions
    python manage.py close_expired_sessions --dry-run
    python manage.py close_expired_sessions --all

Author: Assessment Backend Team
Version: 1.0.0
"""

import logging

from django.core.management.base import BaseCommand, CommandError

from assessment.exam_sessions.services import get_engine

logger = logging.getLogger(__name__)


class Command(BaseCommand):
    help = "Closes open exam sessions whose deadline has passed"

    def add_arguments(self, parser):
        parser.add_argument(
            "--dry-run",
            action="store_true",
            help="Only list the sessions that would be closed",
        )
        parser.add_argument(
            "--all",
            action="store_true",
            dest="close_all",
            help="Close every open session, not only expired ones",
        )

    def handle(self, *args, **options):
        dry_run = options["dry_run"]
        close_all = options["close_all"]
        lifecycle = get_engine().lifecycle

        try:
            session_ids = lifecycle.close_expired(close_all=close_all, dry_run=dry_run)
        except Exception as e:
            logger.error(f"Error while closing sessions: {e}", exc_info=True)
            raise CommandError(f"Closing sessions failed: {e}")

        if not session_ids:
            self.stdout.write(self.style.SUCCESS("No sessions to close."))
            return

        if dry_run:
            self.stdout.write(
                self.style.WARNING(f"DRY RUN: would close {len(session_ids)} sessions")
            )
            for session_id in session_ids:
                self.stdout.write(f"  - session {session_id}")
            return

        self.stdout.write(self.style.SUCCESS(f"Closed {len(session_ids)} sessions."))
