"""
URL configuration for deadlines app.

Includes:
- Deadline list (notification deep-link target)
- Calendar with drag-and-drop reschedule
- HTMX partials
"""

from django.urls import path
from . import views

app_name = 'deadlines'

urlpatterns = [
    # Deadline list (/deadlines/?id=<pk>)
    path('', views.deadline_list, name='list'),

    # Calendar
    path('calendar/', views.calendar_view, name='calendar'),
    path('calendar/drop/', views.calendar_drop, name='calendar_drop'),

    # HTMX Partials
    path('calendar/day/<str:day>/', views.calendar_day, name='calendar_day'),
]
