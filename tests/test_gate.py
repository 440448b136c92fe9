"""
Tests for the daily gate and the session bootstrap of the deadline scan.
"""

from datetime import date, timedelta

import pytest
from django.http import HttpResponse
from django.test import RequestFactory

from apps.notifications.gate import CookieStorage, DailyGate, DeadlineCheckBootstrap
from apps.notifications.services import ScanError, ScanResult

TODAY = date(2025, 1, 10)


class CountingScan:
    def __init__(self, result=None, error=None):
        self.calls = 0
        self.result = result or ScanResult()
        self.error = error

    def __call__(self):
        self.calls += 1
        if self.error:
            raise self.error
        return self.result


# =============================================================================
# DailyGate
# =============================================================================

def test_gate_runs_without_marker():
    assert DailyGate({}).should_run(TODAY) is True


def test_gate_blocks_after_marking_today():
    storage = {}
    gate = DailyGate(storage)

    gate.mark_ran(TODAY)

    assert storage == {'lastDeadlineCheck': '2025-01-10'}
    assert gate.should_run(TODAY) is False


def test_gate_runs_again_next_day():
    gate = DailyGate({'lastDeadlineCheck': '2025-01-09'})
    assert gate.should_run(TODAY) is True


def test_gate_custom_key():
    storage = {}
    DailyGate(storage, key='scan-day').mark_ran(TODAY)
    assert storage == {'scan-day': '2025-01-10'}


# =============================================================================
# CookieStorage
# =============================================================================

def test_cookie_storage_reads_request_cookies():
    request = RequestFactory().get('/')
    request.COOKIES['lastDeadlineCheck'] = '2025-01-10'

    storage = CookieStorage(request)

    assert storage.get('lastDeadlineCheck') == '2025-01-10'
    assert DailyGate(storage).should_run(TODAY) is False


def test_cookie_storage_writes_only_changed_keys():
    request = RequestFactory().get('/')
    request.COOKIES['sessionid'] = 'abc'
    storage = CookieStorage(request, max_age_days=2)

    storage['lastDeadlineCheck'] = '2025-01-10'
    response = storage.apply(HttpResponse())

    cookie = response.cookies['lastDeadlineCheck']
    assert cookie.value == '2025-01-10'
    assert cookie['max-age'] == 2 * 24 * 3600
    assert cookie['samesite'] == 'Lax'
    assert 'sessionid' not in response.cookies


# =============================================================================
# DeadlineCheckBootstrap
# =============================================================================

def test_bootstrap_runs_scan_and_marks_gate():
    storage, session = {}, {}
    scan = CountingScan(ScanResult(checked=2, notifications_created=[4, 5]))
    bootstrap = DeadlineCheckBootstrap(DailyGate(storage), scan, session)

    result = bootstrap.run(TODAY)

    assert result.notifications_created == [4, 5]
    assert scan.calls == 1
    assert storage['lastDeadlineCheck'] == '2025-01-10'
    assert bootstrap.checked(TODAY) is True


def test_bootstrap_marks_gate_even_when_nothing_created():
    storage = {}
    bootstrap = DeadlineCheckBootstrap(DailyGate(storage), CountingScan(), {})

    bootstrap.run(TODAY)

    assert storage['lastDeadlineCheck'] == '2025-01-10'


def test_bootstrap_runs_once_per_session():
    storage, session = {}, {}
    scan = CountingScan()
    gate = DailyGate(storage)

    DeadlineCheckBootstrap(gate, scan, session).run(TODAY)
    # Bootstrap logic re-runs in the same session, even with the gate cleared
    storage.clear()
    second = DeadlineCheckBootstrap(gate, scan, session).run(TODAY)

    assert second is None
    assert scan.calls == 1


def test_bootstrap_skips_when_gate_says_ran_today():
    scan = CountingScan()
    bootstrap = DeadlineCheckBootstrap(
        DailyGate({'lastDeadlineCheck': '2025-01-10'}), scan, {}
    )

    assert bootstrap.run(TODAY) is None
    assert scan.calls == 0
    assert bootstrap.checked(TODAY) is False


def test_failed_scan_leaves_gate_unchanged_and_next_bootstrap_retries():
    storage, session = {'lastDeadlineCheck': '2025-01-09'}, {}
    failing = CountingScan(error=ScanError('store unavailable'))

    result = DeadlineCheckBootstrap(DailyGate(storage), failing, session).run(TODAY)

    assert result is None
    assert storage['lastDeadlineCheck'] == '2025-01-09'
    assert 'deadline_check_started' not in session

    # Retried on the next page load of the same session
    healthy = CountingScan()
    DeadlineCheckBootstrap(DailyGate(storage), healthy, session).run(TODAY)
    assert healthy.calls == 1
    assert storage['lastDeadlineCheck'] == '2025-01-10'


def test_bootstrap_runs_again_when_session_crosses_midnight():
    storage, session = {}, {}
    scan = CountingScan()
    gate = DailyGate(storage)

    DeadlineCheckBootstrap(gate, scan, session).run(TODAY)
    DeadlineCheckBootstrap(gate, scan, session).run(TODAY + timedelta(days=1))

    assert scan.calls == 2
    assert session['deadline_check_started'] == '2025-01-11'
    assert storage['lastDeadlineCheck'] == '2025-01-11'


def test_bootstrap_reset_allows_another_run():
    session = {}
    scan = CountingScan()
    bootstrap = DeadlineCheckBootstrap(DailyGate({}), scan, session)
    bootstrap.run(TODAY)

    bootstrap.reset()
    bootstrap.gate = DailyGate({})
    bootstrap.run(TODAY)

    assert scan.calls == 2
    assert session == {'deadline_check_started': '2025-01-10'}


def test_bootstrap_does_not_swallow_unexpected_errors():
    bootstrap = DeadlineCheckBootstrap(DailyGate({}), CountingScan(error=RuntimeError('bug')), {})

    with pytest.raises(RuntimeError):
        bootstrap.run(TODAY)
