"""
Browser alerting for the notification feed.

Collects transient toasts and local push alerts during one request and
hands them to the browser:
- toasts become Django messages (rendered by the toast container)
- local alerts become the HTMX client event "notification-push", which
  static/js/notifications.js turns into `new Notification(title, {body, tag})`

The browser reports its Notification.permission in the
X-Notification-Permission header.
"""

from dataclasses import dataclass

from django.contrib import messages
from django_htmx.http import trigger_client_event

PERMISSION_HEADER = 'X-Notification-Permission'
PERMISSION_STATES = ('granted', 'denied', 'default')
PUSH_EVENT = 'notification-push'

LEVELS = {
    'info': messages.INFO,
    'success': messages.SUCCESS,
    'warning': messages.WARNING,
    'error': messages.ERROR,
}


@dataclass(frozen=True)
class Toast:
    level: str
    title: str
    message: str = ''

    @property
    def text(self):
        return f'{self.title}: {self.message}' if self.message else self.title


class BrowserAlerts:
    """Toast and local-push sink for a single request."""

    def __init__(self, permission='default'):
        self.permission = permission if permission in PERMISSION_STATES else 'default'
        self.toasts = []
        self.local_alerts = []

    @classmethod
    def from_request(cls, request):
        return cls(permission=request.headers.get(PERMISSION_HEADER, 'default'))

    def permission_state(self):
        return self.permission

    def toast(self, level, title, message=''):
        self.toasts.append(Toast(level, title, message))

    def error(self, message):
        self.toast('error', message)

    def show_local_alert(self, title, body='', tag=None):
        """
        Queue a local push alert.

        Returns the queued payload, or None when permission is not granted.
        Alerts sharing a tag replace each other in the browser.
        """
        if self.permission != 'granted':
            return None
        payload = {'title': title, 'body': body, 'tag': tag}
        self.local_alerts.append(payload)
        return payload

    def flush(self, request, response=None):
        """Move collected toasts into messages and push alerts into the response."""
        for toast in self.toasts:
            messages.add_message(request, LEVELS.get(toast.level, messages.INFO), toast.text)
        self.toasts = []

        if response is not None and self.local_alerts:
            trigger_client_event(response, PUSH_EVENT, {'alerts': self.local_alerts})
            self.local_alerts = []
        return response
