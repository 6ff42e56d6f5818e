"""
duties/models.py
────────────────
The duty-booking engine's tables.

Schedule – one (date, location, shift) slot with a capacity of students.
Booking  – a student's reservation against a schedule, with its own
           approval lifecycle independent of sibling bookings.
DutyLog  – append-only audit trail of every booking / approval mutation.

Status fields carry explicit transition tables (SCHEDULE_TRANSITIONS,
BOOKING_TRANSITIONS); services refuse any change that is not listed.
"""

from django.conf import settings
from django.db import models
from django.db.models import Q
from django.utils import timezone


class Schedule(models.Model):
    """
    A duty slot published by an admin.

    `status` is derived from the aggregate state of the schedule's bookings
    (see duties.services): it flips to APPROVED once nothing is left to
    approve and to CANCELLED when an admin rejects the whole slot.
    """

    class Status(models.TextChoices):
        PENDING   = 'pending',   'Pending'
        APPROVED  = 'approved',  'Approved'
        CANCELLED = 'cancelled', 'Cancelled'

    date = models.DateField(help_text='Calendar day of the duty.')
    description = models.CharField(
        max_length=200,
        blank=True,
        default='Community Health Center Duty',
    )
    location = models.CharField(
        max_length=100,
        help_text='Hospital / health unit, e.g. "ISDH - Magsingal".',
    )
    shift_start = models.TimeField()
    shift_end = models.TimeField()
    max_students = models.PositiveSmallIntegerField(
        default=2,
        help_text='How many students may hold an active booking on this slot.',
    )
    status = models.CharField(
        max_length=20,
        choices=Status.choices,
        default=Status.PENDING,
    )
    created_by = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name='created_schedules',
    )
    approved_by = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name='approved_schedules',
    )
    approved_at = models.DateTimeField(null=True, blank=True)
    created_at = models.DateTimeField(default=timezone.now)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ['date', 'location']
        verbose_name = 'Schedule'
        verbose_name_plural = 'Schedules'
        constraints = [
            models.CheckConstraint(
                condition=Q(max_students__gte=1),
                name='schedule_capacity_at_least_one',
            ),
        ]

    def __str__(self):
        return f"{self.date:%Y-%m-%d} – {self.location} ({self.get_status_display()})"

    def can_transition_to(self, new_status):
        return new_status in SCHEDULE_TRANSITIONS[self.status]

    @property
    def active_count(self):
        """Bookings that occupy a seat (anything not cancelled)."""
        return self.bookings.active().count()

    @property
    def is_full(self):
        return self.active_count >= self.max_students

    @property
    def spots_left(self):
        return max(0, self.max_students - self.active_count)


class BookingQuerySet(models.QuerySet):

    def active(self):
        return self.exclude(status=Booking.Status.CANCELLED)

    def awaiting_approval(self):
        return self.filter(status=Booking.Status.BOOKED)


class Booking(models.Model):
    """
    A student's reservation on a Schedule (the `schedule_students` rows).

    Storage constraints are the authoritative guard against races:
      • one active booking per (schedule, student)
      • one active booking per (student, duty_date) across all schedules
    `duty_date` mirrors schedule.date so the second rule can be a plain
    partial unique index.
    """

    class Status(models.TextChoices):
        BOOKED    = 'booked',    'Booked'
        APPROVED  = 'approved',  'Approved'
        CANCELLED = 'cancelled', 'Cancelled'
        COMPLETED = 'completed', 'Completed'

    class CancellationKind(models.TextChoices):
        CANCELLED       = 'cancelled',       'Cancelled'
        REJECTED        = 'rejected',        'Rejected by admin'
        ACCOUNT_REMOVED = 'account_removed', 'Account removed'

    ACTIVE_STATUSES = (Status.BOOKED, Status.APPROVED, Status.COMPLETED)
    TERMINAL_STATUSES = (Status.CANCELLED, Status.COMPLETED)

    schedule = models.ForeignKey(
        Schedule,
        on_delete=models.CASCADE,
        related_name='bookings',
    )
    student = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.CASCADE,
        related_name='bookings',
    )
    duty_date = models.DateField(editable=False)
    booking_time = models.DateTimeField(default=timezone.now)
    status = models.CharField(
        max_length=20,
        choices=Status.choices,
        default=Status.BOOKED,
    )
    approved_by = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name='approved_bookings',
    )
    approved_at = models.DateTimeField(null=True, blank=True)
    cancelled_at = models.DateTimeField(null=True, blank=True)
    cancellation_reason = models.TextField(blank=True)
    cancellation_kind = models.CharField(
        max_length=20,
        choices=CancellationKind.choices,
        blank=True,
        help_text='Only student/admin cancellations lock the student out of '
                  'rebooking the same date for the rest of the day.',
    )
    completed_at = models.DateTimeField(null=True, blank=True)
    updated_at = models.DateTimeField(auto_now=True)

    objects = BookingQuerySet.as_manager()

    class Meta:
        ordering = ['booking_time']
        verbose_name = 'Booking'
        verbose_name_plural = 'Bookings'
        constraints = [
            models.UniqueConstraint(
                fields=['schedule', 'student'],
                condition=~Q(status='cancelled'),
                name='unique_active_booking_per_schedule',
            ),
            models.UniqueConstraint(
                fields=['student', 'duty_date'],
                condition=~Q(status='cancelled'),
                name='one_active_duty_per_student_per_day',
            ),
        ]

    def __str__(self):
        return f"{self.student} → {self.schedule} ({self.get_status_display()})"

    def save(self, *args, **kwargs):
        if self.duty_date is None:
            self.duty_date = self.schedule.date
        super().save(*args, **kwargs)

    def can_transition_to(self, new_status):
        return new_status in BOOKING_TRANSITIONS[self.status]

    @property
    def is_terminal(self):
        return self.status in self.TERMINAL_STATUSES


SCHEDULE_TRANSITIONS = {
    Schedule.Status.PENDING:   frozenset({Schedule.Status.APPROVED, Schedule.Status.CANCELLED}),
    Schedule.Status.APPROVED:  frozenset({Schedule.Status.PENDING, Schedule.Status.CANCELLED}),
    Schedule.Status.CANCELLED: frozenset(),
}

BOOKING_TRANSITIONS = {
    Booking.Status.BOOKED:    frozenset({Booking.Status.APPROVED, Booking.Status.CANCELLED}),
    Booking.Status.APPROVED:  frozenset({Booking.Status.COMPLETED, Booking.Status.CANCELLED}),
    Booking.Status.CANCELLED: frozenset(),
    Booking.Status.COMPLETED: frozenset(),
}


class DutyLog(models.Model):
    """
    Append-only audit record.  Rows are inserted by duties.audit and never
    updated or deleted afterwards.
    """

    class Action(models.TextChoices):
        BOOKED              = 'booked',              'Booked'
        APPROVED_INDIVIDUAL = 'approved_individual', 'Approved (individual)'
        APPROVED_ALL        = 'approved_all',        'Approved (bulk)'
        REJECTED_INDIVIDUAL = 'rejected_individual', 'Rejected (individual)'
        REJECTED_ALL        = 'rejected_all',        'Rejected (bulk)'
        CANCELLED           = 'cancelled',           'Cancelled'
        COMPLETED           = 'completed',           'Completed'
        SCHEDULE_CREATED    = 'schedule_created',    'Schedule created'
        SCHEDULE_DELETED    = 'schedule_deleted',    'Schedule deleted'
        STATUS_PENDING      = 'status_pending',      'Schedule → pending'
        STATUS_APPROVED     = 'status_approved',     'Schedule → approved'
        STATUS_CANCELLED    = 'status_cancelled',    'Schedule → cancelled'
        PROFILE_UPDATED     = 'profile_updated',     'Profile updated'
        ACCOUNT_ACTIVATED   = 'account_activated',   'Account activated'
        ACCOUNT_DEACTIVATED = 'account_deactivated', 'Account deactivated'
        ACCOUNT_DELETED     = 'account_deleted',     'Account deleted'
        ADMIN_CREATED       = 'admin_created',       'Co-admin created'

    action = models.CharField(max_length=40, choices=Action.choices)
    performed_by = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name='duty_actions',
    )
    target_user = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name='duty_log_entries',
    )
    schedule = models.ForeignKey(
        Schedule,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name='logs',
    )
    booking = models.ForeignKey(
        Booking,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name='logs',
    )
    notes = models.TextField(blank=True)
    created_at = models.DateTimeField(default=timezone.now)

    class Meta:
        ordering = ['-created_at']
        verbose_name = 'Duty Log'
        verbose_name_plural = 'Duty Logs'

    def __str__(self):
        return f"[{self.action}] by {self.performed_by} ({self.created_at:%Y-%m-%d %H:%M})"

    def save(self, *args, **kwargs):
        if not self._state.adding:
            raise ValueError('DutyLog entries are append-only.')
        super().save(*args, **kwargs)

    def delete(self, *args, **kwargs):
        raise ValueError('DutyLog entries are append-only.')
