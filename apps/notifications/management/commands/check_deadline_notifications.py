"""
Management command to run the deadline notification scan once.

Usage:
    python manage.py check_deadline_notifications
    python manage.py check_deadline_notifications --date 2025-01-10

Prints the scan result as JSON. Exits with an error when the candidate
deadlines cannot be fetched, so an external scheduler can retry.
"""
import json

from django.core.management.base import BaseCommand, CommandError
from django.utils.dateparse import parse_date

from apps.notifications.services import ScanError, check_deadline_notifications


class Command(BaseCommand):
    help = 'Create notifications for deadlines due today, tomorrow and in 3 days'

    def add_arguments(self, parser):
        parser.add_argument(
            '--date',
            help='Scan as if today were this date (YYYY-MM-DD)',
        )

    def handle(self, *args, **options):
        today = None
        if options.get('date'):
            try:
                today = parse_date(options['date'])
            except ValueError:
                today = None
            if today is None:
                raise CommandError(f"Invalid date: {options['date']}")

        try:
            result = check_deadline_notifications(today=today)
        except ScanError as e:
            raise CommandError(f'Deadline scan failed: {e}')

        self.stdout.write(json.dumps(result.as_dict()))
