"""
accounts/services.py
────────────────────
Admin-side account management.  Every change is written to the duty log
so the admin log page shows who did what to which account.

update_profile(user, actor, **fields)
set_active(student, admin, active)
delete_student(student, admin)
create_admin(admin, username, password, full_name, email)
"""

import logging

from django.contrib.auth import get_user_model
from django.db import transaction

from duties import audit, selectors
from duties.exceptions import BookingAuthorizationError, BookingValidationError
from duties.models import DutyLog
from duties.services import cancel_all_for_student

logger = logging.getLogger(__name__)

PROFILE_FIELDS = (
    'full_name', 'email', 'student_number', 'year_level', 'phone_number', 'avatar_url',
)


def _require_admin(user):
    if not (user.is_active and user.is_admin_role):
        raise BookingAuthorizationError('Access denied – admin only.')


def update_profile(user, actor, **fields):
    """
    Change profile fields of *user*.  Users may edit themselves; admins may
    edit anyone.  Unknown field names are rejected.
    """
    if actor.pk != user.pk:
        _require_admin(actor)
    unknown = set(fields) - set(PROFILE_FIELDS)
    if unknown:
        raise BookingValidationError(f'Unknown profile field(s): {", ".join(sorted(unknown))}')

    changed = [name for name, value in fields.items() if getattr(user, name) != value]
    if not changed:
        return user
    for name in changed:
        setattr(user, name, fields[name])
    user.save(update_fields=changed + ['updated_at'])

    audit.append(
        DutyLog.Action.PROFILE_UPDATED,
        performed_by=actor,
        target_user=user,
        notes=f'Updated {", ".join(changed)}',
    )
    return user


def set_active(student, admin, active):
    """Activate or deactivate a student account.  Inactive students cannot book."""
    _require_admin(admin)
    if student.pk == admin.pk:
        raise BookingValidationError('You cannot deactivate your own account.')
    if student.is_active == active:
        return student
    student.is_active = active
    student.save(update_fields=['is_active', 'updated_at'])
    selectors.invalidate_on_commit()
    logger.info('Admin %s set user %s active=%s', admin.pk, student.pk, active)

    audit.append(
        DutyLog.Action.ACCOUNT_ACTIVATED if active else DutyLog.Action.ACCOUNT_DEACTIVATED,
        performed_by=admin,
        target_user=student,
        notes=f'{student.display_name} {"activated" if active else "deactivated"}',
    )
    return student


def delete_student(student, admin):
    """
    Remove a student account.  Their booked / approved duties are cancelled
    first so the schedules they held free up and get a fresh status.
    Returns the number of bookings cancelled.
    """
    _require_admin(admin)
    if not student.is_student:
        raise BookingValidationError('Only student accounts can be deleted here.')

    name = student.display_name
    with transaction.atomic():
        cancelled = cancel_all_for_student(student, admin, 'Student account deleted')
        audit.append(
            DutyLog.Action.ACCOUNT_DELETED,
            performed_by=admin,
            notes=f'Deleted student {name} ({cancelled} active duty/duties cancelled)',
        )
        student.delete()

    selectors.invalidate_on_commit()
    logger.info('Admin %s deleted student %s', admin.pk, name)
    return cancelled


def create_admin(admin, username, password, full_name='', email=''):
    """An existing admin creates a co-admin account."""
    _require_admin(admin)
    User = get_user_model()
    if User.objects.filter(username=username).exists():
        raise BookingValidationError('A user with that username already exists.')

    new_admin = User.objects.create_user(
        username=username,
        password=password,
        email=email,
        full_name=full_name,
        role=User.Role.ADMIN,
        is_staff=True,
    )
    logger.info('Admin %s created co-admin %s', admin.pk, new_admin.pk)
    audit.append(
        DutyLog.Action.ADMIN_CREATED,
        performed_by=admin,
        target_user=new_admin,
        notes=f'Co-admin {new_admin.display_name} created',
    )
    return new_admin
