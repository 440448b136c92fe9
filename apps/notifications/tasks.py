"""
Scheduled tasks for notifications app.

Background jobs for:
- Deadline notification scan (daily, see setup_schedules)
"""

import logging

from .services import ScanError, check_deadline_notifications as run_scan

logger = logging.getLogger(__name__)


def check_deadline_notifications():
    """
    Scheduled job run by the django-q2 cluster.

    Returns the scan result dict so it is stored with the task in
    django-q's result table. A ScanError propagates so the task is
    recorded as failed and the next schedule retries.
    """
    try:
        result = run_scan()
    except ScanError:
        logger.exception('Scheduled deadline scan failed')
        raise
    return result.as_dict()
