"""
duties/views/admin.py
─────────────────────
Admin-only views: overview dashboard, the pending-approvals queue with
approve / reject (one or all), schedule management, the audit log and
duty reports.
"""

from calendar import monthrange

from django.contrib import messages
from django.shortcuts import redirect, render

from .. import selectors, services
from ..forms import GenerateSchedulesForm, PendingFilterForm, RejectForm, ReportRangeForm, ScheduleForm
from ..locations import duty_locations
from ..validators import local_today
from .utils import add_form_control_class, admin_required, redirect_back, require_POST_or_405, run_service


# ── Overview ──────────────────────────────────────────────────────────────────

@admin_required
def admin_dashboard_view(req):
    today = local_today()
    return render(req, 'duties/admin_dashboard.html', {
        'stats':         selectors.admin_dashboard_stats(today),
        'booking_stats': selectors.booking_stats(),
        'pending':       selectors.pending_by_schedule(period='week', today=today),
        'today':         today,
    })


# ── Approvals ─────────────────────────────────────────────────────────────────

@admin_required
def pending_bookings_view(req):
    """
    Bookings awaiting approval grouped by schedule, filterable by location,
    period and a free-text student search.
    """
    filter_form = PendingFilterForm(req.GET or None)
    filters = filter_form.filters() if req.GET else {}
    return render(req, 'duties/pending_bookings.html', {
        'groups':      selectors.pending_by_schedule(**filters),
        'filter_form': filter_form,
        'reject_form': RejectForm(),
    })


@admin_required
@require_POST_or_405
def approve_booking_view(req, booking_id):
    run_service(
        req, services.approve_booking, booking_id, req.user,
        success=lambda b: f'Approved {b.student.display_name} for {b.duty_date:%b %d, %Y}.',
    )
    return redirect_back(req, 'pending_bookings')


@admin_required
@require_POST_or_405
def approve_all_view(req, schedule_id):
    run_service(
        req, services.approve_all_bookings, schedule_id, req.user,
        success=lambda n: f'Approved {n} booking(s); the schedule is now approved.',
    )
    return redirect_back(req, 'pending_bookings')


@admin_required
@require_POST_or_405
def reject_booking_view(req, booking_id):
    form = RejectForm(req.POST)
    reason = form.cleaned_data['reason'] if form.is_valid() else ''
    run_service(
        req, services.reject_booking, booking_id, req.user, reason or None,
        success=lambda b: f'Rejected booking of {b.student.display_name}.',
    )
    return redirect_back(req, 'pending_bookings')


@admin_required
@require_POST_or_405
def reject_all_view(req, schedule_id):
    form = RejectForm(req.POST)
    reason = form.cleaned_data['reason'] if form.is_valid() else ''
    run_service(
        req, services.reject_all_bookings, schedule_id, req.user, reason or None,
        success=lambda n: f'Rejected {n} booking(s); the schedule has been cancelled.',
    )
    return redirect_back(req, 'pending_bookings')


# ── Schedules ─────────────────────────────────────────────────────────────────

@admin_required
def schedule_detail_view(req, schedule_id):
    schedule = selectors.get_schedule(schedule_id)
    if schedule is None:
        messages.error(req, 'Schedule not found.')
        return redirect('calendar')
    return render(req, 'duties/schedule_detail.html', {
        'schedule':    schedule,
        'bookings':    selectors.bookings_for_schedule(schedule_id),
        'reject_form': RejectForm(),
        'today':       local_today(),
    })


@admin_required
def create_schedule_view(req):
    if req.method == 'POST':
        form = ScheduleForm(req.POST)
        if form.is_valid():
            cd = form.cleaned_data
            schedule = run_service(
                req, services.create_schedule, req.user,
                date=cd['date'],
                location=cd['location'],
                description=cd['description'] or None,
                shift_start=cd['shift_start'],
                shift_end=cd['shift_end'],
                max_students=cd['max_students'],
                success=lambda s: f'Schedule created for {s.date:%b %d, %Y} at {s.location}.',
            )
            if schedule is not None:
                return redirect('calendar_month', year=schedule.date.year, month=schedule.date.month)
        else:
            messages.error(req, 'Please fix the errors below.')
    else:
        form = ScheduleForm(initial={'date': req.GET.get('date')})

    add_form_control_class(form)
    return render(req, 'duties/schedule_form.html', {
        'form':      form,
        'locations': duty_locations(),
    })


@admin_required
def generate_schedules_view(req):
    if req.method == 'POST':
        form = GenerateSchedulesForm(req.POST)
        if form.is_valid():
            cd = form.cleaned_data
            created = run_service(
                req, services.generate_schedules, req.user,
                cd['start_date'], cd['end_date'], weekdays=cd['weekdays'],
                success=lambda rows: f'Generated {len(rows)} schedule(s).',
            )
            if created is not None:
                return redirect('calendar_month', year=cd['start_date'].year, month=cd['start_date'].month)
        else:
            messages.error(req, 'Please fix the errors below.')
    else:
        form = GenerateSchedulesForm()

    return render(req, 'duties/generate_schedules.html', {
        'form':      form,
        'locations': duty_locations(),
    })


@admin_required
@require_POST_or_405
def delete_schedule_view(req, schedule_id):
    run_service(
        req, services.delete_schedule, schedule_id, req.user,
        success='Schedule deleted.',
    )
    return redirect_back(req, 'calendar')


# ── Logs / reports ────────────────────────────────────────────────────────────

@admin_required
def logs_view(req):
    return render(req, 'duties/logs.html', {'logs': selectors.system_logs()})


@admin_required
def reports_view(req):
    """Duty statistics for a date range; defaults to the current month."""
    today = local_today()
    start = today.replace(day=1)
    end = today.replace(day=monthrange(today.year, today.month)[1])

    form = ReportRangeForm(req.GET or None, initial={'start_date': start, 'end_date': end})
    if req.GET and form.is_valid():
        start, end = form.cleaned_data['start_date'], form.cleaned_data['end_date']
        if end < start:
            start, end = end, start

    return render(req, 'duties/reports.html', {
        'form':          form,
        'start_date':    start,
        'end_date':      end,
        'statistics':    selectors.duty_statistics(start, end),
        'booking_stats': selectors.booking_stats(),
    })
