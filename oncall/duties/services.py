"""
duties/services.py
──────────────────
The Approval Coordinator: every operation that changes a Schedule or a
Booking lives here, so views and the admin site share one set of rules.

Each operation
  1. checks the caller's role / ownership,
  2. performs the primary write inside transaction.atomic() on locked rows,
  3. appends audit entries and notifications (best-effort, never raises),
  4. invalidates the query cache once the transaction commits.

Storage errors from step 2 propagate unchanged, except unique-index
violations on Booking which become BookingConflictError.

Booking operations
──────────────────
book_duty(schedule_id, student)
approve_booking(booking_id, admin)        approve_all_bookings(schedule_id, admin)
reject_booking(booking_id, admin, reason) reject_all_bookings(schedule_id, admin, reason)
cancel_booking(booking_id, user)          complete_booking(booking_id, student)

Schedule operations
───────────────────
create_schedule(created_by, date, location, ...)
generate_schedules(created_by, start_date, end_date, weekdays)
delete_schedule(schedule_id, admin)
sync_schedule_status(schedule, actor)
"""

import logging
from datetime import time, timedelta

from django.conf import settings
from django.db import IntegrityError, transaction
from django.utils import timezone

from communications.models import Notification
from communications.services import notify, notify_admins, notify_many

from . import audit, selectors
from .exceptions import (
    BookingAuthorizationError,
    BookingConflictError,
    BookingValidationError,
    InvalidTransition,
)
from .locations import capacity_for, location_for_month
from .models import Booking, DutyLog, Schedule
from .validators import local_today, validate_booking

logger = logging.getLogger(__name__)

DEFAULT_REJECT_REASON = 'Rejected by admin'
DEFAULT_BULK_REJECT_REASON = 'Schedule rejected by admin'
MAX_GENERATE_DAYS = 366

_STATUS_ACTIONS = {
    Schedule.Status.PENDING:   DutyLog.Action.STATUS_PENDING,
    Schedule.Status.APPROVED:  DutyLog.Action.STATUS_APPROVED,
    Schedule.Status.CANCELLED: DutyLog.Action.STATUS_CANCELLED,
}


# ── Helpers ───────────────────────────────────────────────────────────────────

def _require_admin(user):
    if not (user.is_active and user.is_admin_role):
        raise BookingAuthorizationError('Access denied – admin only.')


def _locked_schedule(schedule_id):
    schedule = Schedule.objects.select_for_update().filter(pk=schedule_id).first()
    if schedule is None:
        raise BookingValidationError('Schedule not found.')
    return schedule


def _locked_booking(booking_id):
    booking = (
        Booking.objects
        .select_for_update()
        .select_related('schedule', 'student')
        .filter(pk=booking_id)
        .first()
    )
    if booking is None:
        raise BookingValidationError('Booking not found.')
    return booking


def _check_transition(booking, new_status, message=None):
    if not booking.can_transition_to(new_status):
        raise InvalidTransition(
            message or
            f'A {booking.get_status_display().lower()} booking cannot be '
            f'{Booking.Status(new_status).label.lower()}.'
        )


def _conflict_message(exc):
    text = str(exc)
    if 'one_active_duty_per_student_per_day' in text or 'duty_date' in text:
        return ('You already have a duty scheduled for this date. '
                'The page will refresh to show current status.')
    return 'You have already booked this duty. The page will refresh to show current status.'


def _when(schedule):
    return f'{schedule.date:%b %d, %Y} at {schedule.location}'


def _parse_time(value):
    if isinstance(value, time):
        return value
    return time.fromisoformat(value)


def _set_schedule_status(schedule, status, actor=None, now=None):
    """
    Move *schedule* to *status* if the transition table allows it.
    Returns True when the row changed.
    """
    if schedule.status == status or not schedule.can_transition_to(status):
        return False
    now = now or timezone.now()
    schedule.status = status
    update_fields = ['status', 'updated_at']
    if status == Schedule.Status.APPROVED:
        schedule.approved_by = actor
        schedule.approved_at = now
        update_fields += ['approved_by', 'approved_at']
    schedule.save(update_fields=update_fields)
    audit.append(
        _STATUS_ACTIONS[status],
        performed_by=actor,
        schedule=schedule,
        notes=f'Schedule status changed to {status}',
    )
    return True


def sync_schedule_status(schedule, actor=None, now=None):
    """
    Re-derive a schedule's status from its bookings after bookings were
    removed from under it: still waiting on someone → pending; otherwise
    approved if anyone holds an approved/completed seat, pending if empty.
    Cancelled schedules stay cancelled.
    """
    if schedule.status == Schedule.Status.CANCELLED:
        return False
    bookings = schedule.bookings.all()
    if bookings.awaiting_approval().exists():
        target = Schedule.Status.PENDING
    elif bookings.filter(status__in=[Booking.Status.APPROVED, Booking.Status.COMPLETED]).exists():
        target = Schedule.Status.APPROVED
    else:
        target = Schedule.Status.PENDING
    return _set_schedule_status(schedule, target, actor, now)


# ── Booking ───────────────────────────────────────────────────────────────────

def book_duty(schedule_id, student, now=None):
    """
    Reserve a seat on a schedule for *student*.

    Raises BookingValidationError / BookingAuthorizationError when a rule
    refuses the booking, BookingConflictError when a concurrent request won
    the race at the storage layer.
    """
    now = now or timezone.now()
    try:
        with transaction.atomic():
            schedule = Schedule.objects.select_for_update().filter(pk=schedule_id).first()
            validate_booking(schedule, student, now=now)
            booking = Booking.objects.create(
                schedule=schedule,
                student=student,
                duty_date=schedule.date,
                booking_time=now,
                status=Booking.Status.BOOKED,
            )
            # An approved slot has something to review again.
            _set_schedule_status(schedule, Schedule.Status.PENDING, student, now)
    except IntegrityError as exc:
        logger.info('Booking conflict for student %s on schedule %s: %s', student.pk, schedule_id, exc)
        selectors.invalidate()
        raise BookingConflictError(_conflict_message(exc)) from exc

    selectors.invalidate_on_commit()
    logger.info('Student %s booked schedule %s (booking %s)', student.pk, schedule.pk, booking.pk)

    audit.append(
        DutyLog.Action.BOOKED,
        performed_by=student,
        target_user=student,
        schedule=schedule,
        booking=booking,
        notes=f'Student booked duty for {schedule.date:%Y-%m-%d}',
    )
    notify_admins(
        'New Duty Booking',
        f'{student.display_name} has booked duty for {_when(schedule)}',
        Notification.Type.INFO,
    )
    return booking


def approve_booking(booking_id, admin, now=None):
    """
    booked → approved for one booking.  When it was the last booking
    awaiting approval, the schedule itself becomes approved.
    """
    _require_admin(admin)
    now = now or timezone.now()
    with transaction.atomic():
        booking = _locked_booking(booking_id)
        _check_transition(booking, Booking.Status.APPROVED, 'Only booked duties can be approved.')
        booking.status = Booking.Status.APPROVED
        booking.approved_by = admin
        booking.approved_at = now
        booking.save(update_fields=['status', 'approved_by', 'approved_at', 'updated_at'])

        schedule = Schedule.objects.select_for_update().get(pk=booking.schedule_id)
        if not schedule.bookings.awaiting_approval().exists():
            _set_schedule_status(schedule, Schedule.Status.APPROVED, admin, now)

    selectors.invalidate_on_commit()
    logger.info('Admin %s approved booking %s', admin.pk, booking.pk)

    audit.append(
        DutyLog.Action.APPROVED_INDIVIDUAL,
        performed_by=admin,
        target_user=booking.student,
        schedule=schedule,
        booking=booking,
        notes=f'Admin approved booking for {booking.student.display_name}',
    )
    notify(
        booking.student,
        'Duty Booking Approved',
        f'Your duty booking for {_when(schedule)} has been approved.',
        Notification.Type.SUCCESS,
    )
    return booking


def approve_all_bookings(schedule_id, admin, now=None):
    """
    Approve every booked record on a schedule in one pass; the schedule is
    set to approved afterwards regardless of how many there were.
    Returns the number of bookings approved.
    """
    _require_admin(admin)
    now = now or timezone.now()
    with transaction.atomic():
        schedule = _locked_schedule(schedule_id)
        if schedule.status == Schedule.Status.CANCELLED:
            raise InvalidTransition('This schedule has been cancelled.')
        waiting = schedule.bookings.awaiting_approval()
        bookings = list(waiting.select_related('student'))
        waiting.update(
            status=Booking.Status.APPROVED,
            approved_by=admin,
            approved_at=now,
            updated_at=now,
        )
        if not _set_schedule_status(schedule, Schedule.Status.APPROVED, admin, now):
            schedule.approved_by = admin
            schedule.approved_at = now
            schedule.save(update_fields=['approved_by', 'approved_at', 'updated_at'])

    selectors.invalidate_on_commit()
    logger.info('Admin %s approved %d booking(s) on schedule %s', admin.pk, len(bookings), schedule.pk)

    audit.append_many(
        {
            'action':       DutyLog.Action.APPROVED_ALL,
            'performed_by': admin,
            'target_user':  b.student,
            'schedule':     schedule,
            'booking':      b,
            'notes':        f'Admin approved booking for {b.student.display_name} (bulk approval)',
        }
        for b in bookings
    )
    notify_many(
        [b.student for b in bookings],
        'Duty Booking Approved',
        f'Your duty booking for {_when(schedule)} has been approved.',
        Notification.Type.SUCCESS,
    )
    return len(bookings)


def reject_booking(booking_id, admin, reason=None, now=None):
    """
    Reject one booking (→ cancelled).  When no booking on the schedule is
    left awaiting approval, the schedule reverts to pending.
    """
    _require_admin(admin)
    reason = reason or DEFAULT_REJECT_REASON
    now = now or timezone.now()
    with transaction.atomic():
        booking = _locked_booking(booking_id)
        _check_transition(booking, Booking.Status.CANCELLED)
        booking.status = Booking.Status.CANCELLED
        booking.cancelled_at = now
        booking.cancellation_reason = reason
        booking.cancellation_kind = Booking.CancellationKind.REJECTED
        booking.save(update_fields=[
            'status', 'cancelled_at', 'cancellation_reason', 'cancellation_kind', 'updated_at',
        ])

        schedule = Schedule.objects.select_for_update().get(pk=booking.schedule_id)
        if not schedule.bookings.awaiting_approval().exists():
            _set_schedule_status(schedule, Schedule.Status.PENDING, admin, now)

    selectors.invalidate_on_commit()
    logger.info('Admin %s rejected booking %s', admin.pk, booking.pk)

    audit.append(
        DutyLog.Action.REJECTED_INDIVIDUAL,
        performed_by=admin,
        target_user=booking.student,
        schedule=schedule,
        booking=booking,
        notes=f'Admin rejected booking for {booking.student.display_name}: {reason}',
    )
    notify(
        booking.student,
        'Duty Booking Rejected',
        f'Your duty booking for {_when(schedule)} has been rejected. Reason: {reason}',
        Notification.Type.ERROR,
    )
    return booking


def reject_all_bookings(schedule_id, admin, reason=None, now=None):
    """
    Reject the whole slot: every booked record is cancelled and the
    schedule itself becomes cancelled.  Returns the number rejected.
    """
    _require_admin(admin)
    reason = reason or DEFAULT_BULK_REJECT_REASON
    now = now or timezone.now()
    with transaction.atomic():
        schedule = _locked_schedule(schedule_id)
        if schedule.status == Schedule.Status.CANCELLED:
            raise InvalidTransition('This schedule has already been cancelled.')
        waiting = schedule.bookings.awaiting_approval()
        bookings = list(waiting.select_related('student'))
        waiting.update(
            status=Booking.Status.CANCELLED,
            cancelled_at=now,
            cancellation_reason=reason,
            cancellation_kind=Booking.CancellationKind.REJECTED,
            updated_at=now,
        )
        _set_schedule_status(schedule, Schedule.Status.CANCELLED, admin, now)

    selectors.invalidate_on_commit()
    logger.info('Admin %s rejected %d booking(s) on schedule %s', admin.pk, len(bookings), schedule.pk)

    audit.append_many(
        {
            'action':       DutyLog.Action.REJECTED_ALL,
            'performed_by': admin,
            'target_user':  b.student,
            'schedule':     schedule,
            'booking':      b,
            'notes':        f'Admin rejected booking for {b.student.display_name} (bulk rejection): {reason}',
        }
        for b in bookings
    )
    notify_many(
        [b.student for b in bookings],
        'Duty Schedule Rejected',
        f'The duty schedule for {_when(schedule)} has been rejected. '
        f'Your booking has been cancelled. Reason: {reason}',
        Notification.Type.ERROR,
    )
    return len(bookings)


def cancel_booking(booking_id, user, now=None):
    """
    Cancel a booking as its student or as an admin.

    Refused on the duty's own calendar day.  A cancellation locks the
    student out of booking the same date again until tomorrow, and the
    schedule status is re-derived from the bookings that remain.
    """
    now = now or timezone.now()
    with transaction.atomic():
        booking = _locked_booking(booking_id)

        if not user.is_active or not (user.is_admin_role or user.is_student):
            raise BookingAuthorizationError('You are not allowed to cancel duties.')
        if user.is_student and booking.student_id != user.pk:
            raise BookingAuthorizationError('You can only cancel your own duties.')

        if booking.duty_date == local_today(now):
            raise BookingValidationError(
                'Cannot cancel duties on the same day. Cancellations must be done in advance.'
            )
        _check_transition(booking, Booking.Status.CANCELLED, 'This duty can no longer be cancelled.')

        booking.status = Booking.Status.CANCELLED
        booking.cancelled_at = now
        booking.cancellation_reason = f'Cancelled by {user.role}'
        booking.cancellation_kind = Booking.CancellationKind.CANCELLED
        booking.save(update_fields=[
            'status', 'cancelled_at', 'cancellation_reason', 'cancellation_kind', 'updated_at',
        ])

        schedule = Schedule.objects.select_for_update().get(pk=booking.schedule_id)
        sync_schedule_status(schedule, user, now)

    selectors.invalidate_on_commit()
    logger.info('User %s cancelled booking %s', user.pk, booking.pk)

    audit.append(
        DutyLog.Action.CANCELLED,
        performed_by=user,
        target_user=booking.student,
        schedule=booking.schedule,
        booking=booking,
        notes=f'Duty cancelled by {user.role} on {now.isoformat()}',
    )
    if user.pk != booking.student_id:
        notify(
            booking.student,
            'Duty Booking Cancelled',
            f'Your duty booking for {_when(booking.schedule)} was cancelled by an administrator.',
            Notification.Type.WARNING,
        )
    return booking


def complete_booking(booking_id, student, now=None):
    """The owning student marks an approved duty as completed."""
    now = now or timezone.now()
    with transaction.atomic():
        booking = _locked_booking(booking_id)
        if booking.student_id != student.pk:
            raise BookingAuthorizationError('You can only complete your own duties.')
        _check_transition(booking, Booking.Status.COMPLETED, 'Only approved duties can be marked as completed.')
        booking.status = Booking.Status.COMPLETED
        booking.completed_at = now
        booking.save(update_fields=['status', 'completed_at', 'updated_at'])

    selectors.invalidate_on_commit()
    logger.info('Student %s completed booking %s', student.pk, booking.pk)

    audit.append(
        DutyLog.Action.COMPLETED,
        performed_by=student,
        target_user=student,
        schedule=booking.schedule,
        booking=booking,
        notes=f'Duty on {booking.duty_date:%Y-%m-%d} marked as completed',
    )
    return booking


def cancel_all_for_student(student, actor, reason, now=None):
    """
    Cancel every booked/approved duty of *student* (account removal) and
    re-derive the status of the schedules they sat on.  Returns the count.
    """
    now = now or timezone.now()
    with transaction.atomic():
        open_bookings = Booking.objects.select_for_update().filter(
            student=student,
            status__in=[Booking.Status.BOOKED, Booking.Status.APPROVED],
        )
        bookings = list(open_bookings.select_related('schedule'))
        open_bookings.update(
            status=Booking.Status.CANCELLED,
            cancelled_at=now,
            cancellation_reason=reason,
            cancellation_kind=Booking.CancellationKind.ACCOUNT_REMOVED,
            updated_at=now,
        )
        for schedule in {b.schedule for b in bookings}:
            sync_schedule_status(schedule, actor, now)

    selectors.invalidate_on_commit()
    audit.append_many(
        {
            'action':       DutyLog.Action.CANCELLED,
            'performed_by': actor,
            'target_user':  student,
            'schedule':     b.schedule,
            'booking':      b,
            'notes':        reason,
        }
        for b in bookings
    )
    return len(bookings)


# ── Schedules ─────────────────────────────────────────────────────────────────

def create_schedule(created_by, date, location, description=None, shift_start=None,
                    shift_end=None, max_students=None, now=None):
    """Publish one duty slot.  Capacity defaults to the location's capacity."""
    _require_admin(created_by)
    if date < local_today(now):
        raise BookingValidationError('Cannot create schedule for past dates.')

    default_start, default_end = settings.DUTY_DEFAULT_SHIFT
    shift_start = _parse_time(shift_start or default_start)
    shift_end = _parse_time(shift_end or default_end)
    if shift_end <= shift_start:
        raise BookingValidationError('The shift must end after it starts.')

    schedule = Schedule.objects.create(
        date=date,
        location=location,
        description=description or settings.DUTY_DEFAULT_DESCRIPTION,
        shift_start=shift_start,
        shift_end=shift_end,
        max_students=max_students or capacity_for(location),
        status=Schedule.Status.PENDING,
        created_by=created_by,
    )
    selectors.invalidate_on_commit()
    logger.info('Admin %s created schedule %s', created_by.pk, schedule.pk)
    audit.append(
        DutyLog.Action.SCHEDULE_CREATED,
        performed_by=created_by,
        schedule=schedule,
        notes=f'Schedule created for {_when(schedule)}',
    )
    return schedule


def generate_schedules(created_by, start_date, end_date, weekdays=(0, 1, 2, 3, 4), now=None):
    """
    Create one schedule per matching weekday in [start_date, end_date].

    weekdays uses Python's numbering (Monday = 0).  The location for each
    day comes from the month rotation in duties.locations.
    """
    _require_admin(created_by)
    if end_date < start_date:
        raise BookingValidationError('The end date must not be before the start date.')
    if start_date < local_today(now):
        raise BookingValidationError('Cannot create schedule for past dates.')
    if (end_date - start_date).days >= MAX_GENERATE_DAYS:
        raise BookingValidationError('Schedules can be generated for at most one year at a time.')

    weekdays = set(weekdays)
    shift_start, shift_end = (_parse_time(t) for t in settings.DUTY_DEFAULT_SHIFT)
    to_create = []
    day = start_date
    while day <= end_date:
        if day.weekday() in weekdays:
            location = location_for_month(day)
            to_create.append(Schedule(
                date=day,
                location=location.name,
                description=settings.DUTY_DEFAULT_DESCRIPTION,
                shift_start=shift_start,
                shift_end=shift_end,
                max_students=location.capacity,
                status=Schedule.Status.PENDING,
                created_by=created_by,
            ))
        day += timedelta(days=1)

    with transaction.atomic():
        created = Schedule.objects.bulk_create(to_create)

    selectors.invalidate_on_commit()
    logger.info('Admin %s generated %d schedule(s)', created_by.pk, len(created))
    audit.append(
        DutyLog.Action.SCHEDULE_CREATED,
        performed_by=created_by,
        notes=f'Generated {len(created)} schedule(s) from {start_date:%Y-%m-%d} to {end_date:%Y-%m-%d}',
    )
    return created


def delete_schedule(schedule_id, admin):
    """Remove a schedule and its bookings; students holding a seat are told."""
    _require_admin(admin)
    with transaction.atomic():
        schedule = _locked_schedule(schedule_id)
        affected = [
            b.student for b in
            schedule.bookings.filter(
                status__in=[Booking.Status.BOOKED, Booking.Status.APPROVED],
            ).select_related('student')
        ]
        label = _when(schedule)
        schedule.delete()

    selectors.invalidate_on_commit()
    logger.info('Admin %s deleted schedule %s', admin.pk, schedule_id)
    audit.append(
        DutyLog.Action.SCHEDULE_DELETED,
        performed_by=admin,
        notes=f'Schedule for {label} deleted ({len(affected)} active booking(s) removed)',
    )
    notify_many(
        affected,
        'Duty Schedule Removed',
        f'The duty schedule for {label} was removed by an administrator. Your booking no longer applies.',
        Notification.Type.WARNING,
    )
    return len(affected)
