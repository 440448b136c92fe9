"""
URL configuration for lawdesk project.
"""

from django.contrib import admin
from django.urls import path, include
from django.conf import settings
from django.views.generic import RedirectView

urlpatterns = [
    path('admin/', admin.site.urls),

    # App URLs
    path('', RedirectView.as_view(pattern_name='deadlines:calendar', permanent=False)),
    path('deadlines/', include('apps.deadlines.urls', namespace='deadlines')),
    path('notifications/', include('apps.notifications.urls', namespace='notifications')),
]

if settings.DEBUG and 'debug_toolbar' in settings.INSTALLED_APPS:
    # Debug toolbar
    import debug_toolbar
    urlpatterns = [
        path('__debug__/', include(debug_toolbar.urls)),
    ] + urlpatterns

# Admin site customization
admin.site.site_header = 'Lawdesk Administration'
admin.site.site_title = 'Lawdesk Admin'
admin.site.index_title = 'Cases, deadlines and notifications'
