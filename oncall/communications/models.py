"""
communications/models.py
─────────────────────────
In-app notifications.

Notification – a message shown in a user's notification bell, created as a
               side effect of booking, approval, rejection and cancellation
               events.  Purely informational; nothing reads it to enforce a
               rule.
"""

from django.conf import settings
from django.db import models
from django.utils import timezone


class Notification(models.Model):
    """
    One user-facing notification.

    Rows are written fire-and-forget by communications.services; a failed
    write is logged and never surfaces to the user who triggered it.
    """

    class Type(models.TextChoices):
        INFO    = 'info',    'Info'
        SUCCESS = 'success', 'Success'
        WARNING = 'warning', 'Warning'
        ERROR   = 'error',   'Error'

    user = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.CASCADE,
        related_name='notifications',
        help_text='The user who will see this notification.',
    )
    title = models.CharField(max_length=200)
    message = models.TextField(blank=True)
    type = models.CharField(
        max_length=10,
        choices=Type.choices,
        default=Type.INFO,
    )
    read = models.BooleanField(default=False)
    read_at = models.DateTimeField(null=True, blank=True)
    created_at = models.DateTimeField(default=timezone.now)

    class Meta:
        ordering = ['-created_at']
        verbose_name = 'Notification'
        verbose_name_plural = 'Notifications'

    def __str__(self):
        return (
            f"[{self.get_type_display()}] {self.title} "
            f"→ {self.user} ({self.created_at.strftime('%Y-%m-%d %H:%M')})"
        )
