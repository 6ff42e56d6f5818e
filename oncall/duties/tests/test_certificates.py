"""Tests for completion certificates and their verification QR code."""

import base64

import pytest

from duties import certificates, services
from duties.exceptions import BookingAuthorizationError, BookingValidationError


pytestmark = pytest.mark.django_db


@pytest.fixture
def completed(schedule, student, admin, now):
    booking = services.book_duty(schedule.pk, student, now=now)
    services.approve_booking(booking.pk, admin, now=now)
    return services.complete_booking(booking.pk, student, now=now)


def test_token_format(completed, student):
    token = certificates.verification_token(completed)
    assert token == f'ONCALL-CERT:{completed.pk}:{student.student_number}:{completed.duty_date:%Y%m%d}'


def test_certificate_context_has_png_qr(completed, student, settings):
    settings.SITE_URL = 'https://oncall.example.edu.ph'
    context = certificates.certificate_context(completed, student)

    assert context['student'] == student
    assert context['verify_url'].startswith('https://oncall.example.edu.ph/certificates/')
    assert base64.b64decode(context['qr_base64'])[:8] == b'\x89PNG\r\n\x1a\n'


def test_parent_and_admin_may_view(completed, parent, admin):
    assert certificates.certificate_context(completed, parent)['booking'] == completed
    assert certificates.certificate_context(completed, admin)['booking'] == completed


def test_other_students_may_not_view(completed, other_student):
    with pytest.raises(BookingAuthorizationError):
        certificates.certificate_context(completed, other_student)


def test_only_completed_duties_have_certificates(schedule, student, now):
    booking = services.book_duty(schedule.pk, student, now=now)
    with pytest.raises(BookingValidationError, match='completed duties'):
        certificates.certificate_context(booking, student)


def test_verify(completed, schedule, other_student, now):
    token = certificates.verification_token(completed)
    assert certificates.verify(completed.pk, token)
    assert not certificates.verify(completed.pk, token + 'x')

    open_booking = services.book_duty(schedule.pk, other_student, now=now)
    assert not certificates.verify(open_booking.pk, certificates.verification_token(open_booking))
