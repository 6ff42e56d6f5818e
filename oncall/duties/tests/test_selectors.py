"""Tests for the read side: cached availability, pending filters and reports."""

from datetime import timedelta

import pytest

from duties import selectors, services
from duties.exceptions import BookingValidationError
from duties.models import Booking, Schedule


pytestmark = pytest.mark.django_db


def _ids(schedules):
    return [s.pk for s in schedules]


def test_available_schedules_hide_full_cancelled_and_past(make_schedule, make_booking, make_user, today):
    open_slot = make_schedule()
    full = make_schedule(location='RHU - Santa', max_students=1)
    make_booking(full, make_user())
    make_schedule(location='RHU - Bantay', status=Schedule.Status.CANCELLED)
    make_schedule(on=today - timedelta(days=1))

    available = selectors.available_schedules(today)
    assert _ids(available) == [open_slot.pk]
    assert available[0].active_bookings == 0


def test_available_schedules_are_cached_until_a_mutation(schedule, today):
    assert _ids(selectors.available_schedules(today)) == [schedule.pk]

    # A write that bypasses the services is not seen ...
    Schedule.objects.filter(pk=schedule.pk).update(status=Schedule.Status.CANCELLED)
    assert _ids(selectors.available_schedules(today)) == [schedule.pk]

    # ... until something invalidates the cache.
    selectors.invalidate()
    assert selectors.available_schedules(today) == []


def test_booking_invalidates_availability(schedule, make_user, today, now, django_capture_on_commit_callbacks):
    schedule.max_students = 1
    schedule.save()
    assert _ids(selectors.available_schedules(today)) == [schedule.pk]

    with django_capture_on_commit_callbacks(execute=True):
        services.book_duty(schedule.pk, make_user(), now=now)
    assert selectors.available_schedules(today) == []


def test_invalidation_waits_for_the_outer_commit(schedule, student, today, now,
                                                django_capture_on_commit_callbacks):
    services.book_duty(schedule.pk, student, now=now)
    schedule.max_students = 1
    schedule.save()
    selectors.invalidate()
    assert selectors.available_schedules(today) == []

    with django_capture_on_commit_callbacks(execute=False) as callbacks:
        services.cancel_booking(Booking.objects.get(student=student).pk, student, now=now)
        # Still inside the transaction: the cached list is untouched.
        assert selectors.available_schedules(today) == []

    assert callbacks
    for callback in callbacks:
        callback()
    assert _ids(selectors.available_schedules(today)) == [schedule.pk]


def test_schedules_in_month(make_schedule, tomorrow):
    make_schedule()
    make_schedule(on=tomorrow + timedelta(days=40))
    assert selectors.schedules_in_month(tomorrow.year, tomorrow.month).count() == 1


def test_student_duties_and_child_duties(schedule, student, parent, other_student, now):
    mine = services.book_duty(schedule.pk, student, now=now)
    services.book_duty(schedule.pk, other_student, now=now)

    assert list(selectors.student_duties(student)) == [mine]
    assert list(selectors.child_duties(parent)) == [mine]
    assert selectors.linked_student(parent) == student


def test_parent_without_link(make_user):
    orphan = make_user('parent')
    with pytest.raises(BookingValidationError, match='No linked student found'):
        selectors.child_duties(orphan)


def test_pending_bookings_filters(make_schedule, make_user, today, now):
    near = make_schedule(location='RHU - Santa')
    far = make_schedule(location='ISDH - Sinait', on=today + timedelta(days=20))
    maria = make_user(full_name='Maria Clara', student_number='2030-7777')
    services.book_duty(near.pk, maria, now=now)
    services.book_duty(far.pk, make_user(full_name='Juana Cruz'), now=now)

    assert selectors.pending_bookings(today=today).count() == 2
    assert selectors.pending_bookings(location='RHU - Santa', today=today).get().student == maria
    assert selectors.pending_bookings(period='week', today=today).get().schedule == near
    assert selectors.pending_bookings(period='today', today=today).count() == 0
    assert selectors.pending_bookings(search='7777', today=today).get().student == maria
    assert selectors.pending_bookings(search='  juana ', today=today).count() == 1


def test_pending_by_schedule_groups_bookings(schedule, student, other_student, admin, now):
    first = services.book_duty(schedule.pk, student, now=now)
    services.book_duty(schedule.pk, other_student, now=now)
    services.approve_booking(first.pk, admin, now=now)

    groups = selectors.pending_by_schedule()
    assert len(groups) == 1
    grouped_schedule, bookings = groups[0]
    assert grouped_schedule == schedule
    assert [b.student for b in bookings] == [other_student]


def test_booking_stats(schedule, student, other_student, admin, now):
    b1 = services.book_duty(schedule.pk, student, now=now)
    b2 = services.book_duty(schedule.pk, other_student, now=now)
    services.approve_booking(b1.pk, admin, now=now)
    services.reject_booking(b2.pk, admin, now=now)

    assert selectors.booking_stats() == {
        'total': 2, 'pending': 0, 'approved': 1, 'cancelled': 1, 'completed': 0,
    }


def test_duty_statistics(schedule, student, other_student, admin, today, now):
    b1 = services.book_duty(schedule.pk, student, now=now)
    services.book_duty(schedule.pk, other_student, now=now)
    services.approve_booking(b1.pk, admin, now=now)
    services.complete_booking(b1.pk, student, now=now)

    stats = selectors.duty_statistics(today, today + timedelta(days=30))
    assert stats['total_duties'] == 2
    assert stats['completed_duties'] == 1
    assert stats['pending_duties'] == 1
    assert stats['student_stats']['Maria Santos'] == {'total': 1, 'completed': 1, 'cancelled': 0}
    assert stats['daily_duties'] == {schedule.date: 2}

    assert selectors.duty_statistics(today - timedelta(days=30), today)['total_duties'] == 0


def test_dashboard_stats(schedule, student, admin, now, today):
    services.book_duty(schedule.pk, student, now=now)

    admin_stats = selectors.admin_dashboard_stats(today)
    assert admin_stats['pending_approvals'] == 1
    assert admin_stats['total_students'] == 1

    student_stats = selectors.student_dashboard_stats(student, today)
    assert student_stats == {'total_duties': 1, 'upcoming_duties': 1, 'completed_duties': 0}


def test_system_logs_newest_first(schedule, student, admin, now):
    booking = services.book_duty(schedule.pk, student, now=now)
    services.approve_booking(booking.pk, admin, now=now)

    logs = list(selectors.system_logs(limit=10))
    assert logs[0].created_at >= logs[-1].created_at
    assert {log.action for log in logs} >= {'booked', 'approved_individual'}
    assert Booking.objects.get(pk=booking.pk).logs.count() == 2
