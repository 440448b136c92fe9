"""
WSGI config for lawdesk project.

Set DJANGO_SETTINGS_MODULE=config.settings.production in production.
"""

import os

from django.core.wsgi import get_wsgi_application

os.environ.setdefault('DJANGO_SETTINGS_MODULE', 'config.settings')

application = get_wsgi_application()
