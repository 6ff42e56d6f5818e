"""
duties/validators.py
────────────────────
The single Booking Validator.

validate_booking() runs the admission checks in a fixed order and raises on
the first one that fails.  The capacity / duplicate / one-per-day checks are
a fast path for a friendly message; the partial unique indexes on Booking
and the schedule row lock taken by duties.services.book_duty are what
actually hold under concurrent requests.
"""

from django.utils import timezone

from .exceptions import BookingAuthorizationError, BookingValidationError
from .models import Booking, Schedule


def local_today(now=None):
    """Calendar date in the site's time zone."""
    return timezone.localdate(now) if now is not None else timezone.localdate()


def lockout_exists(student, duty_date, today):
    """
    Same-day lockout: True when *student* cancelled a booking for *duty_date*
    earlier on *today*.  Admin rejections and account removals do not count.
    """
    return Booking.objects.filter(
        student=student,
        duty_date=duty_date,
        status=Booking.Status.CANCELLED,
        cancellation_kind=Booking.CancellationKind.CANCELLED,
        cancelled_at__date=today,
    ).exists()


def validate_booking(schedule, student, now=None):
    """
    Decide whether *student* may book *schedule*.

    Raises BookingValidationError (or BookingAuthorizationError for a
    non-student) with the message to show; returns None when admitted.
    """
    today = local_today(now)

    if schedule is None:
        raise BookingValidationError('Schedule not found.')

    if schedule.status == Schedule.Status.CANCELLED:
        raise BookingValidationError('This schedule has been cancelled and can no longer be booked.')
    if schedule.date < today:
        raise BookingValidationError('Cannot book duty for past dates.')
    if schedule.date == today:
        raise BookingValidationError('Cannot book duty for today. Please book in advance.')

    if not (student.is_active and student.is_student):
        raise BookingAuthorizationError('Only active student accounts can book duties.')

    active = Booking.objects.active()

    current = active.filter(schedule=schedule).count()
    if current >= schedule.max_students:
        raise BookingValidationError(
            f'This duty is already full ({current}/{schedule.max_students} students assigned).'
        )

    if active.filter(schedule=schedule, student=student).exists():
        raise BookingValidationError('You have already booked this duty.')

    if active.filter(student=student, duty_date=schedule.date).exists():
        raise BookingValidationError(
            'You already have a duty scheduled for this date at another location. '
            'Students can only have one duty per day.'
        )

    if lockout_exists(student, schedule.date, today):
        raise BookingValidationError(
            'You cannot book again today because you already cancelled a booking '
            'for this date today. Please try again tomorrow.'
        )
