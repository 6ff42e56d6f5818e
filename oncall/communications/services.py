"""
communications/services.py
──────────────────────────
The notification sink.  Every booking / approval / rejection / cancellation
calls in here after its primary write.

Delivery is at-most-once and fire-and-forget: each write runs in its own
savepoint so a failure cannot poison the caller's transaction, is logged,
and is reported back only as a False / 0 return value.

Functions
─────────
notify(user, title, message, type)
    Create one notification.  Returns True on success, False on failure.

notify_many(users, title, message, type)
    Create the same notification for several users.  Returns how many were written.

notify_admins(title, message, type)
    notify_many() addressed to every active admin.

mark_read(notification_id, user) / mark_all_read(user) / unread_count(user)
    Read-side helpers for the notification bell.
"""

import logging

from django.contrib.auth import get_user_model
from django.db import DatabaseError, transaction
from django.utils import timezone

from .models import Notification

logger = logging.getLogger(__name__)


def notify(user, title, message, type=Notification.Type.INFO):
    """
    Write a single notification for *user*.
    Returns True on success, False on failure.
    """
    try:
        with transaction.atomic():
            Notification.objects.create(
                user=user,
                title=title,
                message=message,
                type=type,
            )
        return True
    except DatabaseError as exc:
        logger.warning(
            'Failed to create notification "%s" for user %s: %s',
            title, getattr(user, 'pk', None), exc,
        )
        return False


def notify_many(users, title, message, type=Notification.Type.INFO):
    """Write one notification per user in a single insert.  Returns the count written."""
    users = [u for u in users if u is not None]
    if not users:
        return 0
    try:
        with transaction.atomic():
            created = Notification.objects.bulk_create([
                Notification(user=u, title=title, message=message, type=type)
                for u in users
            ])
        return len(created)
    except DatabaseError as exc:
        logger.warning(
            'Failed to create %d notification(s) "%s": %s', len(users), title, exc,
        )
        return 0


def notify_admins(title, message, type=Notification.Type.INFO):
    """Notify every active admin.  Returns the count written."""
    User = get_user_model()
    admins = list(User.objects.filter(role=User.Role.ADMIN, is_active=True))
    if not admins:
        logger.info('No admins to notify for "%s"', title)
        return 0
    return notify_many(admins, title, message, type)


# ── Read side ─────────────────────────────────────────────────────────────────

def mark_read(notification_id, user):
    """
    Mark one of *user*'s notifications as read.
    Raises Notification.DoesNotExist when the id is not theirs.
    """
    notification = Notification.objects.get(pk=notification_id, user=user)
    if not notification.read:
        notification.read = True
        notification.read_at = timezone.now()
        notification.save(update_fields=['read', 'read_at'])
    return notification


def mark_all_read(user):
    return (
        Notification.objects
        .filter(user=user, read=False)
        .update(read=True, read_at=timezone.now())
    )


def unread_count(user):
    if not user.is_authenticated:
        return 0
    return Notification.objects.filter(user=user, read=False).count()
