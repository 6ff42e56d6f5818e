"""
duties/selectors.py
───────────────────
Read side of the duty workflow.  Views query through here instead of
keeping their own copies of server state.

The availability list is cached; every mutation in duties.services and
accounts.services calls invalidate(), which bumps a generation counter so
all cached entries are dropped at once.
"""

import time
from collections import OrderedDict
from datetime import timedelta

from django.conf import settings
from django.contrib.auth import get_user_model
from django.core.cache import cache
from django.db import transaction
from django.db.models import Count, F, Q

from .exceptions import BookingValidationError
from .models import Booking, DutyLog, Schedule
from .validators import local_today

GENERATION_KEY = 'duties:generation'


# ── Cache bookkeeping ─────────────────────────────────────────────────────────

def _generation():
    gen = cache.get(GENERATION_KEY)
    if gen is None:
        gen = time.time_ns()
        cache.set(GENERATION_KEY, gen, None)
    return gen


def invalidate():
    """Drop every cached duty query.  Called after each committed mutation."""
    try:
        cache.incr(GENERATION_KEY)
    except ValueError:
        cache.set(GENERATION_KEY, time.time_ns(), None)


def invalidate_on_commit():
    """Schedule invalidate() for when the surrounding transaction commits (now, outside one)."""
    transaction.on_commit(invalidate)


def _with_active_count(queryset):
    return queryset.annotate(
        active_bookings=Count('bookings', filter=~Q(bookings__status=Booking.Status.CANCELLED)),
    )


# ── Schedules ─────────────────────────────────────────────────────────────────

def available_schedules(from_date=None):
    """
    Bookable schedules on or after *from_date*: not cancelled and with at
    least one free seat.  Cached until the next mutation.
    """
    from_date = from_date or local_today()
    key = f'duties:available:{_generation()}:{from_date.isoformat()}'
    schedules = cache.get(key)
    if schedules is None:
        schedules = list(
            _with_active_count(Schedule.objects.filter(date__gte=from_date))
            .exclude(status=Schedule.Status.CANCELLED)
            .filter(active_bookings__lt=F('max_students'))
            .order_by('date', 'location')
        )
        cache.set(key, schedules, settings.DUTY_CACHE_TIMEOUT)
    return schedules


def schedules_in_month(year, month):
    """Every schedule in a calendar month with its bookings, for the calendar view."""
    return (
        _with_active_count(Schedule.objects.filter(date__year=year, date__month=month))
        .prefetch_related('bookings__student')
        .order_by('date', 'location')
    )


def get_schedule(schedule_id):
    return _with_active_count(Schedule.objects.filter(pk=schedule_id)).first()


# ── Bookings ──────────────────────────────────────────────────────────────────

def student_duties(student):
    """A student's duty history, newest booking first."""
    return (
        Booking.objects
        .filter(student=student)
        .select_related('schedule')
        .order_by('-booking_time')
    )


def linked_student(parent):
    """The student a parent account may view.  Raises if none is linked."""
    if not parent.is_parent or parent.linked_student_id is None:
        raise BookingValidationError('No linked student found for this parent.')
    return parent.linked_student


def child_duties(parent):
    """Read-only duty history of the parent's linked student."""
    return student_duties(linked_student(parent))


def pending_bookings(location=None, period='all', search='', today=None):
    """
    Bookings awaiting approval, newest first.

    period  – 'all', 'today', 'week' (next seven days) or 'month' (this month)
    search  – matched against the student's name, student number and email
    """
    today = today or local_today()
    qs = (
        Booking.objects.awaiting_approval()
        .select_related('schedule', 'student')
        .order_by('-booking_time')
    )
    if location and location != 'all':
        qs = qs.filter(schedule__location=location)
    if period == 'today':
        qs = qs.filter(duty_date=today)
    elif period == 'week':
        qs = qs.filter(duty_date__gte=today, duty_date__lte=today + timedelta(days=7))
    elif period == 'month':
        qs = qs.filter(duty_date__year=today.year, duty_date__month=today.month)
    search = (search or '').strip()
    if search:
        qs = qs.filter(
            Q(student__full_name__icontains=search)
            | Q(student__student_number__icontains=search)
            | Q(student__email__icontains=search)
        )
    return qs


def pending_by_schedule(**filters):
    """pending_bookings() grouped into (schedule, [bookings]) pairs by duty date."""
    grouped = OrderedDict()
    for booking in pending_bookings(**filters).order_by('duty_date', 'booking_time'):
        grouped.setdefault(booking.schedule, []).append(booking)
    return list(grouped.items())


def bookings_for_schedule(schedule_id):
    return (
        Booking.objects
        .filter(schedule_id=schedule_id)
        .select_related('student')
        .order_by('booking_time')
    )


# ── Reporting ─────────────────────────────────────────────────────────────────

def booking_stats():
    """Counts of every booking by status."""
    S = Booking.Status
    return Booking.objects.aggregate(
        total=Count('id'),
        pending=Count('id', filter=Q(status=S.BOOKED)),
        approved=Count('id', filter=Q(status=S.APPROVED)),
        cancelled=Count('id', filter=Q(status=S.CANCELLED)),
        completed=Count('id', filter=Q(status=S.COMPLETED)),
    )


def admin_dashboard_stats(today=None):
    today = today or local_today()
    User = get_user_model()
    return {
        'total_students':    User.objects.filter(role=User.Role.STUDENT).count(),
        'active_students':   User.objects.filter(role=User.Role.STUDENT, is_active=True).count(),
        'pending_schedules': Schedule.objects.filter(status=Schedule.Status.PENDING).count(),
        'pending_approvals': Booking.objects.awaiting_approval().count(),
        'today_duties':      Booking.objects.filter(
            duty_date=today,
            status__in=[Booking.Status.BOOKED, Booking.Status.APPROVED],
        ).count(),
    }


def student_dashboard_stats(student, today=None):
    today = today or local_today()
    duties = Booking.objects.filter(student=student)
    return {
        'total_duties':     duties.count(),
        'upcoming_duties':  duties.filter(
            duty_date__gte=today,
            status__in=[Booking.Status.BOOKED, Booking.Status.APPROVED],
        ).count(),
        'completed_duties': duties.filter(status=Booking.Status.COMPLETED).count(),
    }


def duty_statistics(start_date, end_date):
    """
    Totals for every booking whose duty date falls in [start_date, end_date],
    plus a per-student breakdown keyed by display name.
    """
    duties = list(
        Booking.objects
        .filter(duty_date__gte=start_date, duty_date__lte=end_date)
        .select_related('student', 'schedule')
    )

    student_stats = {}
    daily = {}
    for duty in duties:
        name = duty.student.display_name if duty.student else 'Unknown'
        row = student_stats.setdefault(name, {'total': 0, 'completed': 0, 'cancelled': 0})
        row['total'] += 1
        if duty.status == Booking.Status.COMPLETED:
            row['completed'] += 1
        elif duty.status == Booking.Status.CANCELLED:
            row['cancelled'] += 1
        daily[duty.duty_date] = daily.get(duty.duty_date, 0) + 1

    def _count(status):
        return sum(1 for d in duties if d.status == status)

    return {
        'total_duties':     len(duties),
        'completed_duties': _count(Booking.Status.COMPLETED),
        'cancelled_duties': _count(Booking.Status.CANCELLED),
        'approved_duties':  _count(Booking.Status.APPROVED),
        'pending_duties':   _count(Booking.Status.BOOKED),
        'student_stats':    student_stats,
        'daily_duties':     dict(sorted(daily.items())),
    }


def system_logs(limit=100):
    """Most recent audit entries for the admin log page."""
    return (
        DutyLog.objects
        .select_related('performed_by', 'target_user', 'schedule', 'booking')
        .order_by('-created_at')[:limit]
    )
