"""
Admin configuration for notifications app.
"""

from django.contrib import admin

from .models import Notification


@admin.register(Notification)
class NotificationAdmin(admin.ModelAdmin):
    """Admin for Notification model."""

    list_display = ('title', 'owner', 'kind', 'read', 'link', 'created_at')
    list_filter = ('kind', 'read', 'created_at')
    search_fields = ('title', 'message', 'link')
    ordering = ('-created_at',)
    date_hierarchy = 'created_at'
    list_select_related = ('owner',)
    actions = ['mark_as_read']

    def get_readonly_fields(self, request, obj=None):
        # Title and message are never edited after creation
        if obj is not None:
            return ('title', 'message', 'kind', 'link', 'created_at')
        return ('created_at',)

    @admin.action(description='Mark selected notifications as read')
    def mark_as_read(self, request, queryset):
        updated = queryset.update(read=True)
        self.message_user(request, f'{updated} notification(s) marked as read.')
