"""
duties/audit.py
───────────────
Best-effort writer for the DutyLog audit trail.

Each insert runs in its own savepoint so a failing audit write never rolls
back the state change it describes.
"""

import logging

from django.db import DatabaseError, transaction

from .models import DutyLog

logger = logging.getLogger(__name__)


def append(action, performed_by=None, target_user=None, schedule=None, booking=None, notes=''):
    """Insert one DutyLog row.  Returns it, or None if the write failed."""
    try:
        with transaction.atomic():
            return DutyLog.objects.create(
                action=action,
                performed_by=performed_by,
                target_user=target_user,
                schedule=schedule,
                booking=booking,
                notes=notes,
            )
    except DatabaseError as exc:
        logger.warning('Failed to write audit entry "%s": %s', action, exc)
        return None


def append_many(entries):
    """
    Insert several DutyLog rows at once.
    *entries* is an iterable of dicts with DutyLog field names.
    """
    rows = [DutyLog(**entry) for entry in entries]
    if not rows:
        return 0
    try:
        with transaction.atomic():
            DutyLog.objects.bulk_create(rows)
        return len(rows)
    except DatabaseError as exc:
        logger.warning('Failed to write %d audit entries: %s', len(rows), exc)
        return 0
