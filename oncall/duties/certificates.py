"""
duties/certificates.py
──────────────────────
Completion certificate for a finished duty, with a QR code that encodes a
verification token an admin can check against the booking.
"""

import base64
import io

import qrcode
from django.conf import settings
from django.urls import reverse
from django.utils.http import urlencode

from .exceptions import BookingAuthorizationError, BookingValidationError
from .models import Booking


def verification_token(booking):
    number = booking.student.student_number or booking.student.username
    return f'ONCALL-CERT:{booking.pk}:{number}:{booking.duty_date:%Y%m%d}'


def generate_qr_base64(data: str, box_size: int = 6):
    """Render *data* as a QR code and return it as a base64-encoded PNG string."""
    qr = qrcode.QRCode(
        version=None,
        error_correction=qrcode.constants.ERROR_CORRECT_M,
        box_size=box_size,
        border=4,
    )
    qr.add_data(data)
    qr.make(fit=True)

    img = qr.make_image(fill_color='#1a1a2e', back_color='white')
    buf = io.BytesIO()
    img.save(buf, format='PNG')
    return base64.b64encode(buf.getvalue()).decode('utf-8')


def certificate_context(booking, viewer):
    """
    Template context for the certificate page.

    Only completed duties have a certificate; students may see their own,
    parents their linked student's, admins any.
    """
    if booking.status != Booking.Status.COMPLETED:
        raise BookingValidationError('Certificates are only available for completed duties.')

    allowed = (
        viewer.is_admin_role
        or booking.student_id == viewer.pk
        or (viewer.is_parent and viewer.linked_student_id == booking.student_id)
    )
    if not allowed:
        raise BookingAuthorizationError('You cannot view this certificate.')

    token = verification_token(booking)
    verify_url = (
        settings.SITE_URL.rstrip('/')
        + reverse('verify_certificate', args=[booking.pk])
        + '?' + urlencode({'token': token})
    )
    return {
        'booking':    booking,
        'student':    booking.student,
        'schedule':   booking.schedule,
        'token':      token,
        'verify_url': verify_url,
        'qr_base64':  generate_qr_base64(f'{token}\n{verify_url}'),
    }


def verify(booking_id, token):
    """True when *token* matches a completed booking's certificate."""
    booking = (
        Booking.objects
        .select_related('student')
        .filter(pk=booking_id, status=Booking.Status.COMPLETED)
        .first()
    )
    return booking is not None and verification_token(booking) == token
