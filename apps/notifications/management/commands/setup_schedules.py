"""
Management command to set up Django-Q2 schedules for notification jobs.

This command creates/updates the scheduled task required for:
- Daily deadline notification scan (DEADLINE_SCAN_CRON, default 7:00 AM)

Usage:
    python manage.py setup_schedules

The command is idempotent - safe to run multiple times.
An existing schedule is updated if its configuration changes.
"""
from django.conf import settings
from django.core.management.base import BaseCommand
from django_q.models import Schedule

SCHEDULE_NAME = 'Deadline Notification Scan'


class Command(BaseCommand):
    help = 'Set up Django-Q2 schedules for notification jobs'

    def handle(self, *args, **options):
        self.stdout.write('\nSetting up Django-Q2 schedules...\n')

        cron = getattr(settings, 'DEADLINE_SCAN_CRON', '0 7 * * *')

        # Scans incomplete deadlines due today, tomorrow and in 3 days
        schedule, created = Schedule.objects.update_or_create(
            name=SCHEDULE_NAME,
            defaults={
                'func': 'apps.notifications.tasks.check_deadline_notifications',
                'schedule_type': Schedule.CRON,
                'cron': cron,
                'repeats': -1,  # Run forever
            }
        )
        if created:
            self.stdout.write(
                self.style.SUCCESS(f'✓ Created schedule: {SCHEDULE_NAME} (cron "{cron}")')
            )
        else:
            self.stdout.write(
                self.style.WARNING(f'↻ Updated schedule: {SCHEDULE_NAME} (cron "{cron}")')
            )

        self.stdout.write('')
        self.stdout.write('Schedule Summary:')
        self.stdout.write(f'  • {SCHEDULE_NAME}  → cron "{cron}"')
        self.stdout.write('')
        self.stdout.write(
            self.style.NOTICE(
                'Note: Ensure Django-Q cluster is running: python manage.py qcluster'
            )
        )
        self.stdout.write('')
