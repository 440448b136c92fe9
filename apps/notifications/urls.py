"""
URL configuration for notifications app.

Includes:
- Notification history with bulk actions
- Popover feed and per-item actions (HTMX)
- Deadline check bootstrap and scheduler endpoint
"""

from django.urls import path
from . import views

app_name = 'notifications'

urlpatterns = [
    # History
    path('', views.notification_list, name='list'),

    # Popover feed (HTMX)
    path('feed/', views.notification_feed, name='feed'),
    path('read-all/', views.notification_mark_all_read, name='mark_all_read'),
    path('<int:pk>/read/', views.notification_mark_read, name='mark_read'),
    path('<int:pk>/delete/', views.notification_delete, name='delete'),
    path('<int:pk>/open/', views.notification_open, name='open'),

    # Deadline check
    path('bootstrap/', views.deadline_check_bootstrap, name='bootstrap'),
    path('check-deadlines/', views.check_deadlines, name='check_deadlines'),
]
