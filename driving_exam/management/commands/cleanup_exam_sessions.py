"""
Cleanup Exam Sessions Management Command

Marks exam sessions that were started but never finished as ABANDONED once
their deadline lies more than a grace period in the past. Sessions inside the
grace period are left alone; they still expire lazily on their next access.

Features:
- Grace period from EXAM_ENGINE["STALE_SESSION_GRACE_HOURS"] or --grace-hours
- Dry-run mode that only reports what would change
- Summary output for monitoring

Usage:
    python manage.py cleanup_exam_sessions
    python manage.py cleanup_exam_sessions --grace-hours 48 --dry-run

Author: Prava Imtihon Development Team
Version: 1.0.0
"""

import logging
from datetime import timedelta

from django.core.management.base import BaseCommand, CommandError
from django.utils import timezone

from ...services import ExamService

logger = logging.getLogger(__name__)


class Command(BaseCommand):
    """
    Django management command that abandons stale open exam sessions.

    Intended to run periodically (cron or a scheduler).
    """

    help = "Marks STARTED/IN_PROGRESS exam sessions whose deadline passed more than the grace period ago as ABANDONED."

    def add_arguments(self, parser):
        parser.add_argument(
            "--grace-hours",
            type=int,
            default=None,
            help="Hours after the deadline before a session counts as stale (default from settings).",
        )
        parser.add_argument(
            "--dry-run",
            action="store_true",
            help="Only report how many sessions would be abandoned.",
        )

    def handle(self, *args, **options):
        """
        Main execution method of the management command.

        Raises:
            CommandError: On invalid options or errors during execution
        """
        grace_hours = options["grace_hours"]
        dry_run = options["dry_run"]
        if grace_hours is not None and grace_hours < 0:
            raise CommandError("--grace-hours must not be negative.")

        service = ExamService()
        if grace_hours is None:
            grace_hours = service.settings.stale_session_grace_hours

        now = timezone.now()
        self.stdout.write(
            f"Looking for open exam sessions that expired before "
            f"{(now - timedelta(hours=grace_hours)).strftime('%Y-%m-%d %H:%M:%S')}..."
        )

        try:
            count = service.abandon_stale_sessions(now=now, grace_hours=grace_hours, dry_run=dry_run)
        except Exception as e:
            logger.error(f"Error while running cleanup_exam_sessions: {e}", exc_info=True)
            raise CommandError(f"An error occurred: {e}")

        if count == 0:
            self.stdout.write(self.style.SUCCESS("No stale exam sessions found."))
        elif dry_run:
            self.stdout.write(self.style.WARNING(f"{count} stale exam sessions would be abandoned (dry run)."))
        else:
            self.stdout.write(self.style.SUCCESS(f"{count} stale exam sessions abandoned."))
