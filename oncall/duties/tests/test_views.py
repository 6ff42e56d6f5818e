"""Request-level tests: access control, flash messages and redirects."""

from datetime import timedelta
from unittest import mock

import pytest
from django.contrib import messages
from django.contrib.messages import get_messages
from django.db import DatabaseError
from django.urls import reverse

from duties import services
from duties.models import Booking, Schedule


pytestmark = pytest.mark.django_db


def _messages(response):
    return [str(m) for m in get_messages(response.wsgi_request)]


@pytest.fixture
def future_schedule(make_schedule):
    """A slot far enough ahead that the real clock still treats it as bookable."""
    from django.utils import timezone
    return make_schedule(on=timezone.localdate() + timedelta(days=7))


# ── Routing / access ──────────────────────────────────────────────────────────

def test_dashboard_routes_by_role(client, admin, student, parent):
    expected = {
        admin:   'admin_dashboard',
        student: 'student_dashboard',
        parent:  'parent_dashboard',
    }
    for user, name in expected.items():
        client.force_login(user)
        response = client.get(reverse('dashboard'))
        assert response.status_code == 302
        assert response.url == reverse(name)


def test_anonymous_users_are_sent_to_login(client):
    response = client.get(reverse('pending_bookings'))
    assert response.status_code == 302
    assert response.url == reverse('login')


def test_students_cannot_open_admin_pages(client, student):
    client.force_login(student)
    response = client.get(reverse('pending_bookings'))
    assert response.url == reverse('dashboard')
    assert 'Access denied – admin only.' in _messages(response)


def test_write_endpoints_are_post_only(client, student, future_schedule):
    client.force_login(student)
    response = client.get(reverse('book_duty', args=[future_schedule.pk]))
    assert response.status_code == 405


# ── Student pages ─────────────────────────────────────────────────────────────

def test_student_dashboard_lists_open_slots(client, student, future_schedule):
    client.force_login(student)
    response = client.get(reverse('student_dashboard'))
    assert response.status_code == 200
    assert future_schedule in response.context['available']


def test_book_view_success_and_rule_message(client, student, future_schedule, make_schedule):
    client.force_login(student)

    response = client.post(reverse('book_duty', args=[future_schedule.pk]))
    assert response.status_code == 302
    assert Booking.objects.filter(student=student, schedule=future_schedule).exists()
    assert any('Waiting for admin approval' in m for m in _messages(response))

    same_day = make_schedule(on=future_schedule.date, location='RHU - Santa')
    response = client.post(reverse('book_duty', args=[same_day.pk]))
    assert any('one duty per day' in m for m in _messages(response))
    assert not Booking.objects.filter(schedule=same_day).exists()


def test_book_view_honours_local_next(client, student, future_schedule):
    client.force_login(student)
    calendar_url = reverse('calendar')
    response = client.post(reverse('book_duty', args=[future_schedule.pk]), {'next': calendar_url})
    assert response.url == calendar_url

    response = client.post(reverse('book_duty', args=[future_schedule.pk]),
                           {'next': 'https://evil.example.com/'})
    assert response.url == reverse('student_dashboard')


def test_booking_conflict_is_a_warning(client, student, future_schedule, make_booking):
    make_booking(future_schedule, student)
    client.force_login(student)

    with mock.patch('duties.services.validate_booking', return_value=None):
        response = client.post(reverse('book_duty', args=[future_schedule.pk]))

    assert response.status_code == 302
    assert response.url == reverse('student_dashboard')
    [message] = list(get_messages(response.wsgi_request))
    assert message.level == messages.WARNING
    assert 'page will refresh' in str(message)
    assert Booking.objects.filter(schedule=future_schedule, student=student).count() == 1


def test_storage_error_is_logged_and_reported(client, student, future_schedule, caplog):
    client.force_login(student)

    with mock.patch.object(Booking.objects, 'create', side_effect=DatabaseError('disk full')):
        response = client.post(reverse('book_duty', args=[future_schedule.pk]))

    assert response.status_code == 302
    [message] = list(get_messages(response.wsgi_request))
    assert message.level == messages.ERROR
    assert str(message) == 'Something went wrong while saving. Please try again.'
    record = next(r for r in caplog.records if r.name == 'duties.views.utils')
    assert record.getMessage() == 'Database error in book_duty'
    assert record.exc_info is not None
    assert not Booking.objects.exists()


def test_cancel_and_complete_views(client, student, admin, future_schedule):
    booking = services.book_duty(future_schedule.pk, student)
    client.force_login(student)

    response = client.post(reverse('complete_duty', args=[booking.pk]))
    assert any('Only approved duties' in m for m in _messages(response))

    response = client.post(reverse('cancel_duty', args=[booking.pk]))
    assert 'Duty cancelled.' in _messages(response)
    assert Booking.objects.get(pk=booking.pk).status == Booking.Status.CANCELLED


def test_calendar_view(client, student, future_schedule):
    client.force_login(student)
    day = future_schedule.date
    response = client.get(reverse('calendar_month', args=[day.year, day.month]))
    assert response.status_code == 200
    assert future_schedule in list(response.context['schedules'])

    assert client.get(reverse('calendar_month', args=[day.year, 13])).status_code == 302
    assert client.get(reverse('calendar_month', args=[10000, 12])).status_code == 302
    assert client.get(reverse('calendar_month', args=[9999, 12])).status_code == 302


def test_certificate_pages(client, student, admin, future_schedule):
    booking = services.book_duty(future_schedule.pk, student)
    services.approve_booking(booking.pk, admin)
    services.complete_booking(booking.pk, student)

    client.force_login(student)
    response = client.get(reverse('certificate', args=[booking.pk]))
    assert response.status_code == 200
    token = response.context['token']

    client.logout()
    response = client.get(reverse('verify_certificate', args=[booking.pk]), {'token': token})
    assert response.context['valid'] is True
    response = client.get(reverse('verify_certificate', args=[booking.pk]), {'token': 'forged'})
    assert response.context['valid'] is False


# ── Admin pages ───────────────────────────────────────────────────────────────

def test_pending_page_and_approve_all(client, admin, student, other_student, future_schedule):
    services.book_duty(future_schedule.pk, student)
    services.book_duty(future_schedule.pk, other_student)
    client.force_login(admin)

    response = client.get(reverse('pending_bookings'), {'location': 'all', 'period': 'all', 'search': ''})
    assert response.status_code == 200
    assert len(response.context['groups']) == 1

    response = client.post(reverse('approve_all', args=[future_schedule.pk]))
    assert response.url == reverse('pending_bookings')
    future_schedule.refresh_from_db()
    assert future_schedule.status == Schedule.Status.APPROVED


def test_reject_view_passes_reason(client, admin, student, future_schedule):
    booking = services.book_duty(future_schedule.pk, student)
    client.force_login(admin)

    client.post(reverse('reject_booking', args=[booking.pk]), {'reason': 'Incomplete requirements'})
    booking.refresh_from_db()
    assert booking.status == Booking.Status.CANCELLED
    assert booking.cancellation_reason == 'Incomplete requirements'


def test_create_schedule_view(client, admin, future_schedule):
    client.force_login(admin)
    day = future_schedule.date + timedelta(days=1)
    response = client.post(reverse('create_schedule'), {
        'date':     day.isoformat(),
        'location': 'RHU - Bantay',
    })
    assert response.status_code == 302
    created = Schedule.objects.get(date=day)
    assert created.max_students == 4
    assert created.created_by == admin


def test_reports_and_logs_render(client, admin, student, future_schedule):
    services.book_duty(future_schedule.pk, student)
    client.force_login(admin)

    response = client.get(reverse('reports'))
    assert response.status_code == 200
    assert 'statistics' in response.context
    assert client.get(reverse('duty_logs')).status_code == 200


# ── Parent page ───────────────────────────────────────────────────────────────

def test_parent_sees_linked_student_duties(client, parent, student, future_schedule):
    booking = services.book_duty(future_schedule.pk, student)
    client.force_login(parent)

    response = client.get(reverse('parent_dashboard'))
    assert response.status_code == 200
    assert list(response.context['duties']) == [booking]


def test_parent_cannot_cancel(client, parent, student, future_schedule):
    booking = services.book_duty(future_schedule.pk, student)
    client.force_login(parent)

    client.post(reverse('cancel_duty', args=[booking.pk]))
    assert Booking.objects.get(pk=booking.pk).status == Booking.Status.BOOKED
