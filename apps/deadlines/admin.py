"""
Admin configuration for deadlines app.
"""

from django.contrib import admin
from django.utils.html import format_html

from .models import Case, Deadline


class DeadlineInline(admin.TabularInline):
    """Inline admin for deadlines on case detail."""
    model = Deadline
    extra = 0
    fields = ('title', 'due_date', 'category', 'priority', 'completed')


@admin.register(Case)
class CaseAdmin(admin.ModelAdmin):
    """Admin for Case model."""

    list_display = ('number', 'title', 'owner', 'created_at')
    search_fields = ('number', 'title')
    list_filter = ('created_at',)
    ordering = ('-created_at',)
    inlines = [DeadlineInline]


@admin.register(Deadline)
class DeadlineAdmin(admin.ModelAdmin):
    """Admin for Deadline model."""

    list_display = (
        'title', 'owner', 'case', 'due_date', 'category',
        'priority', 'completed', 'is_overdue_display',
    )
    list_filter = ('completed', 'priority', 'category', 'due_date')
    search_fields = ('title', 'description', 'case__number')
    ordering = ('due_date',)
    date_hierarchy = 'due_date'
    list_select_related = ('owner', 'case')
    readonly_fields = ('created_at', 'updated_at')

    fieldsets = (
        (None, {
            'fields': ('owner', 'title', 'description', 'case')
        }),
        ('Schedule', {
            'fields': ('due_date', 'category', 'priority', 'completed')
        }),
        ('Timestamps', {
            'fields': ('created_at', 'updated_at'),
            'classes': ('collapse',),
        }),
    )

    @admin.display(description='Overdue')
    def is_overdue_display(self, obj):
        if obj.is_overdue:
            return format_html('<span style="color: #dc2626; font-weight: 600;">{}</span>', 'Overdue')
        return ''
