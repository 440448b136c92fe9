"""
Client daily gate for the deadline scan.

DailyGate keeps the last calendar day (YYYY-MM-DD) on which the scan ran
from this client. DeadlineCheckBootstrap consults it once per session
bootstrap and runs the scan at most once per day.

In the browser the gate marker lives in a long-lived cookie and the
"already checked" flag in the Django session.
"""

import logging
from datetime import timedelta

from django.conf import settings

from .services import ScanError

logger = logging.getLogger(__name__)


class DailyGate:
    """Allows the scan once per calendar day."""

    KEY = 'lastDeadlineCheck'

    def __init__(self, storage, key=None):
        self.storage = storage
        self.key = key or self.KEY

    def should_run(self, today):
        return self.storage.get(self.key) != today.isoformat()

    def mark_ran(self, today):
        self.storage[self.key] = today.isoformat()


class CookieStorage:
    """
    Mapping view over request cookies that records writes for the response.

    Usage:
        storage = CookieStorage(request)
        storage['lastDeadlineCheck'] = '2025-01-10'
        storage.apply(response)
    """

    def __init__(self, request, max_age_days=None):
        self._values = dict(request.COOKIES)
        self._written = {}
        days = max_age_days or getattr(settings, 'DEADLINE_CHECK_COOKIE_DAYS', 365)
        self.max_age = int(timedelta(days=days).total_seconds())
        self.secure = getattr(settings, 'DEADLINE_CHECK_COOKIE_SECURE', False)

    def get(self, key, default=None):
        return self._values.get(key, default)

    def __getitem__(self, key):
        return self._values[key]

    def __setitem__(self, key, value):
        self._values[key] = value
        self._written[key] = value

    def apply(self, response):
        for key, value in self._written.items():
            response.set_cookie(
                key, value, max_age=self.max_age, samesite='Lax', secure=self.secure
            )
        return response


class DeadlineCheckBootstrap:
    """
    Runs the deadline scan on session bootstrap.

    Args:
        gate: DailyGate
        invoke: Callable returning a ScanResult (raises ScanError on failure)
        session: Mapping holding the "already checked" flag

    The session flag holds the day it was set, so a session that crosses
    midnight checks again. It is cleared when the scan fails and the gate
    is only advanced after a successful scan, so the next bootstrap retries.
    """

    CHECKED_KEY = 'deadline_check_started'

    def __init__(self, gate, invoke, session):
        self.gate = gate
        self.invoke = invoke
        self.session = session

    def checked(self, today):
        return self.session.get(self.CHECKED_KEY) == today.isoformat()

    def reset(self):
        self.session.pop(self.CHECKED_KEY, None)

    def run(self, today):
        """
        Returns the ScanResult, or None if the scan was skipped or failed.
        """
        if self.checked(today):
            return None

        if not self.gate.should_run(today):
            logger.debug('Deadline check already done today')
            return None

        self.session[self.CHECKED_KEY] = today.isoformat()

        try:
            logger.info('Checking deadlines automatically...')
            result = self.invoke()
        except ScanError as e:
            logger.error(f'Error checking deadlines: {e}')
            self.reset()
            return None

        self.gate.mark_ran(today)
        logger.info(f'Deadline check result: {result.message}')
        return result
