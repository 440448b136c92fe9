"""
Template tags package for deadlines app.

Provides custom template tags and filters for deadline display:
- deadline_status: Classify a deadline relative to today
- status_class: Return CSS class for a deadline status
- priority_class: Return CSS class for deadline priority
- format_due_date: Format due date as 15/01/2025
- due_in: Relative day indication (Today, Tomorrow, In 3 days)
- notification_kind_class: Return CSS class for a notification kind
- priority_badge / status_badge: HTML badges
"""
