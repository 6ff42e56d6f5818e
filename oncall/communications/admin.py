"""
communications/admin.py
────────────────────────
Admin for Notification.
"""

from django.contrib import admin

from .models import Notification


@admin.register(Notification)
class NotificationAdmin(admin.ModelAdmin):
    list_display  = ('title', 'user', 'type', 'read', 'created_at')
    list_filter   = ('type', 'read', 'created_at')
    search_fields = ('user__username', 'user__full_name', 'title', 'message')
    readonly_fields = ('created_at', 'read_at')

    fieldsets = (
        (None, {
            'fields': ('user', 'type'),
        }),
        ('Content', {
            'fields': ('title', 'message'),
        }),
        ('Status', {
            'fields': ('read', 'read_at', 'created_at'),
        }),
    )
