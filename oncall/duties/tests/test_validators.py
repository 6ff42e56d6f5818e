"""Tests for the booking validator's admission checks."""

from datetime import datetime, timedelta, timezone as dt_timezone

import pytest

from accounts.models import CustomUser
from duties.exceptions import BookingAuthorizationError, BookingValidationError
from duties.models import Booking, Schedule
from duties.validators import local_today, lockout_exists, validate_booking


pytestmark = pytest.mark.django_db


def test_local_today_uses_site_time_zone(now, today):
    assert local_today(now) == today
    # 23:30 UTC on the 10th is already the 11th in Manila.
    assert local_today(datetime(2030, 3, 10, 23, 30, tzinfo=dt_timezone.utc)) == today


def test_admits_a_free_future_slot(schedule, student, now):
    assert validate_booking(schedule, student, now=now) is None


def test_missing_schedule(student, now):
    with pytest.raises(BookingValidationError, match='Schedule not found.'):
        validate_booking(None, student, now=now)


@pytest.mark.parametrize('role', [CustomUser.Role.ADMIN, CustomUser.Role.PARENT])
def test_only_students_may_book(schedule, make_user, now, role):
    with pytest.raises(BookingAuthorizationError):
        validate_booking(schedule, make_user(role), now=now)


def test_inactive_student_may_not_book(schedule, make_user, now):
    inactive = make_user(is_active=False)
    with pytest.raises(BookingAuthorizationError, match='Only active student accounts'):
        validate_booking(schedule, inactive, now=now)


def test_schedule_checks_come_before_the_account_check(make_schedule, make_user, today, now):
    inactive = make_user(is_active=False)
    cancelled = make_schedule(status=Schedule.Status.CANCELLED)
    past = make_schedule(on=today - timedelta(days=1), location='RHU - Santa')

    with pytest.raises(BookingValidationError, match='cancelled'):
        validate_booking(cancelled, inactive, now=now)
    with pytest.raises(BookingValidationError, match='past dates'):
        validate_booking(past, inactive, now=now)


def test_cancelled_schedule_is_not_bookable(make_schedule, student, now):
    schedule = make_schedule(status=Schedule.Status.CANCELLED)
    with pytest.raises(BookingValidationError, match='cancelled'):
        validate_booking(schedule, student, now=now)


def test_past_and_same_day_dates_are_refused(make_schedule, student, now, today):
    with pytest.raises(BookingValidationError, match='Cannot book duty for past dates.'):
        validate_booking(make_schedule(on=today - timedelta(days=1)), student, now=now)
    with pytest.raises(BookingValidationError, match='Please book in advance.'):
        validate_booking(make_schedule(on=today), student, now=now)


def test_full_schedule_reports_counts(schedule, make_user, make_booking, student, now):
    make_booking(schedule, make_user())
    make_booking(schedule, make_user(), status=Booking.Status.APPROVED)

    with pytest.raises(BookingValidationError) as excinfo:
        validate_booking(schedule, student, now=now)
    assert excinfo.value.message == 'This duty is already full (2/2 students assigned).'


def test_cancelled_bookings_free_their_seat(schedule, make_user, make_booking, student, now):
    make_booking(schedule, make_user())
    make_booking(schedule, make_user(), status=Booking.Status.CANCELLED,
                 cancellation_kind=Booking.CancellationKind.REJECTED, cancelled_at=now)

    assert validate_booking(schedule, student, now=now) is None


def test_duplicate_booking(make_schedule, make_booking, student, now):
    schedule = make_schedule(max_students=4)
    make_booking(schedule, student)
    with pytest.raises(BookingValidationError, match='You have already booked this duty.'):
        validate_booking(schedule, student, now=now)


def test_one_duty_per_day_across_locations(make_schedule, make_booking, student, now):
    make_booking(make_schedule(location='ISDH - Magsingal'), student)
    other = make_schedule(location='RHU - Santa')

    with pytest.raises(BookingValidationError, match='Students can only have one duty per day.'):
        validate_booking(other, student, now=now)


def test_capacity_is_checked_before_duplicate(make_schedule, make_booking, student, now):
    schedule = make_schedule(max_students=1)
    make_booking(schedule, student)
    with pytest.raises(BookingValidationError, match='already full'):
        validate_booking(schedule, student, now=now)


def test_same_day_lockout(schedule, make_schedule, make_booking, student, now, today, tomorrow):
    make_booking(
        schedule, student,
        status=Booking.Status.CANCELLED,
        cancellation_kind=Booking.CancellationKind.CANCELLED,
        cancelled_at=now,
    )
    assert lockout_exists(student, tomorrow, today)

    sibling = make_schedule(location='RHU - Bantay')
    with pytest.raises(BookingValidationError, match='Please try again tomorrow.'):
        validate_booking(sibling, student, now=now)

    assert not lockout_exists(student, tomorrow, today + timedelta(days=1))


def test_admin_rejection_does_not_lock_out(schedule, make_booking, student, now, today, tomorrow):
    make_booking(
        schedule, student,
        status=Booking.Status.CANCELLED,
        cancellation_kind=Booking.CancellationKind.REJECTED,
        cancelled_at=now,
    )
    assert not lockout_exists(student, tomorrow, today)
    assert validate_booking(schedule, student, now=now) is None
