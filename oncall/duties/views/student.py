"""
duties/views/student.py
───────────────────────
Student-facing views: dashboard with bookable slots, duty history,
book / cancel / complete, the month calendar and completion certificates.

Every write goes through duties.services; these views only translate the
outcome into flash messages and redirects.
"""

from datetime import MAXYEAR, MINYEAR, date, timedelta

from django.contrib import messages
from django.contrib.auth.decorators import login_required
from django.shortcuts import get_object_or_404, redirect, render

from .. import selectors, services
from ..certificates import certificate_context, verify
from ..exceptions import DutyError
from ..models import Booking
from ..validators import local_today
from .utils import redirect_back, require_POST_or_405, run_service, student_required


@student_required
def student_dashboard_view(req):
    """Summary cards, bookable schedules and the five most recent bookings."""
    today = local_today()
    return render(req, 'duties/student_dashboard.html', {
        'stats':       selectors.student_dashboard_stats(req.user, today),
        'available':   selectors.available_schedules(today),
        'recent':      selectors.student_duties(req.user)[:5],
        'booked_ids':  set(
            selectors.student_duties(req.user)
            .exclude(status=Booking.Status.CANCELLED)
            .values_list('schedule_id', flat=True)
        ),
        'today':       today,
    })


@student_required
def my_duties_view(req):
    return render(req, 'duties/my_duties.html', {
        'duties': selectors.student_duties(req.user),
        'today':  local_today(),
    })


@login_required
def calendar_view(req, year=None, month=None):
    """Month grid of schedules.  Defaults to the current month."""
    today = local_today()
    year = year or today.year
    month = month or today.month
    if not (1 <= month <= 12 and MINYEAR < year < MAXYEAR):
        return redirect('calendar')

    first = date(year, month, 1)
    prev_month = (first - timedelta(days=1)).replace(day=1)
    next_month = date(year + (month == 12), month % 12 + 1, 1)

    return render(req, 'duties/calendar.html', {
        'schedules':  selectors.schedules_in_month(year, month),
        'month':      first,
        'prev_month': prev_month,
        'next_month': next_month,
        'today':      today,
    })


# ── Writes ────────────────────────────────────────────────────────────────────

@student_required
@require_POST_or_405
def book_duty_view(req, schedule_id):
    run_service(
        req, services.book_duty, schedule_id, req.user,
        success=lambda b: f'Duty booked for {b.duty_date:%b %d, %Y}. Waiting for admin approval.',
    )
    return redirect_back(req, 'student_dashboard')


@login_required
@require_POST_or_405
def cancel_duty_view(req, booking_id):
    """Students cancel their own duties; admins may cancel anyone's."""
    run_service(
        req, services.cancel_booking, booking_id, req.user,
        success='Duty cancelled.',
    )
    return redirect_back(req, 'dashboard')


@student_required
@require_POST_or_405
def complete_duty_view(req, booking_id):
    run_service(
        req, services.complete_booking, booking_id, req.user,
        success='Duty marked as completed. Your certificate is ready.',
    )
    return redirect_back(req, 'my_duties')


# ── Certificates ──────────────────────────────────────────────────────────────

@login_required
def certificate_view(req, booking_id):
    booking = get_object_or_404(
        Booking.objects.select_related('student', 'schedule'), pk=booking_id,
    )
    try:
        context = certificate_context(booking, req.user)
    except DutyError as exc:
        messages.error(req, exc.message)
        return redirect('dashboard')
    return render(req, 'duties/certificate.html', context)


def verify_certificate_view(req, booking_id):
    """Public page reached by scanning a certificate's QR code."""
    token = req.GET.get('token', '')
    booking = None
    valid = bool(token) and verify(booking_id, token)
    if valid:
        booking = Booking.objects.select_related('student', 'schedule').get(pk=booking_id)
    return render(req, 'duties/verify_certificate.html', {
        'valid':   valid,
        'booking': booking,
    })
