# duties/migrations/0001_initial.py
#
# Creates Schedule, Booking and DutyLog.  The two partial unique indexes on
# Booking are the storage-level guard against double booking.

import django.db.models.deletion
import django.utils.timezone
from django.conf import settings
from django.db import migrations, models


class Migration(migrations.Migration):

    initial = True

    dependencies = [
        migrations.swappable_dependency(settings.AUTH_USER_MODEL),
    ]

    operations = [
        migrations.CreateModel(
            name='Schedule',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('date', models.DateField(help_text='Calendar day of the duty.')),
                ('description', models.CharField(blank=True, default='Community Health Center Duty', max_length=200)),
                ('location', models.CharField(
                    help_text='Hospital / health unit, e.g. "ISDH - Magsingal".',
                    max_length=100,
                )),
                ('shift_start', models.TimeField()),
                ('shift_end', models.TimeField()),
                ('max_students', models.PositiveSmallIntegerField(
                    default=2,
                    help_text='How many students may hold an active booking on this slot.',
                )),
                ('status', models.CharField(
                    choices=[('pending', 'Pending'), ('approved', 'Approved'), ('cancelled', 'Cancelled')],
                    default='pending',
                    max_length=20,
                )),
                ('approved_at', models.DateTimeField(blank=True, null=True)),
                ('created_at', models.DateTimeField(default=django.utils.timezone.now)),
                ('updated_at', models.DateTimeField(auto_now=True)),
                ('approved_by', models.ForeignKey(
                    blank=True,
                    null=True,
                    on_delete=django.db.models.deletion.SET_NULL,
                    related_name='approved_schedules',
                    to=settings.AUTH_USER_MODEL,
                )),
                ('created_by', models.ForeignKey(
                    blank=True,
                    null=True,
                    on_delete=django.db.models.deletion.SET_NULL,
                    related_name='created_schedules',
                    to=settings.AUTH_USER_MODEL,
                )),
            ],
            options={
                'verbose_name': 'Schedule',
                'verbose_name_plural': 'Schedules',
                'ordering': ['date', 'location'],
                'constraints': [
                    models.CheckConstraint(
                        condition=models.Q(('max_students__gte', 1)),
                        name='schedule_capacity_at_least_one',
                    ),
                ],
            },
        ),
        migrations.CreateModel(
            name='Booking',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('duty_date', models.DateField(editable=False)),
                ('booking_time', models.DateTimeField(default=django.utils.timezone.now)),
                ('status', models.CharField(
                    choices=[
                        ('booked', 'Booked'),
                        ('approved', 'Approved'),
                        ('cancelled', 'Cancelled'),
                        ('completed', 'Completed'),
                    ],
                    default='booked',
                    max_length=20,
                )),
                ('approved_at', models.DateTimeField(blank=True, null=True)),
                ('cancelled_at', models.DateTimeField(blank=True, null=True)),
                ('cancellation_reason', models.TextField(blank=True)),
                ('cancellation_kind', models.CharField(
                    blank=True,
                    choices=[
                        ('cancelled', 'Cancelled'),
                        ('rejected', 'Rejected by admin'),
                        ('account_removed', 'Account removed'),
                    ],
                    help_text='Only student/admin cancellations lock the student out of '
                              'rebooking the same date for the rest of the day.',
                    max_length=20,
                )),
                ('completed_at', models.DateTimeField(blank=True, null=True)),
                ('updated_at', models.DateTimeField(auto_now=True)),
                ('approved_by', models.ForeignKey(
                    blank=True,
                    null=True,
                    on_delete=django.db.models.deletion.SET_NULL,
                    related_name='approved_bookings',
                    to=settings.AUTH_USER_MODEL,
                )),
                ('schedule', models.ForeignKey(
                    on_delete=django.db.models.deletion.CASCADE,
                    related_name='bookings',
                    to='duties.schedule',
                )),
                ('student', models.ForeignKey(
                    on_delete=django.db.models.deletion.CASCADE,
                    related_name='bookings',
                    to=settings.AUTH_USER_MODEL,
                )),
            ],
            options={
                'verbose_name': 'Booking',
                'verbose_name_plural': 'Bookings',
                'ordering': ['booking_time'],
                'constraints': [
                    models.UniqueConstraint(
                        condition=models.Q(('status', 'cancelled'), _negated=True),
                        fields=('schedule', 'student'),
                        name='unique_active_booking_per_schedule',
                    ),
                    models.UniqueConstraint(
                        condition=models.Q(('status', 'cancelled'), _negated=True),
                        fields=('student', 'duty_date'),
                        name='one_active_duty_per_student_per_day',
                    ),
                ],
            },
        ),
        migrations.CreateModel(
            name='DutyLog',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('action', models.CharField(
                    choices=[
                        ('booked', 'Booked'),
                        ('approved_individual', 'Approved (individual)'),
                        ('approved_all', 'Approved (bulk)'),
                        ('rejected_individual', 'Rejected (individual)'),
                        ('rejected_all', 'Rejected (bulk)'),
                        ('cancelled', 'Cancelled'),
                        ('completed', 'Completed'),
                        ('schedule_created', 'Schedule created'),
                        ('schedule_deleted', 'Schedule deleted'),
                        ('status_pending', 'Schedule → pending'),
                        ('status_approved', 'Schedule → approved'),
                        ('status_cancelled', 'Schedule → cancelled'),
                        ('profile_updated', 'Profile updated'),
                        ('account_activated', 'Account activated'),
                        ('account_deactivated', 'Account deactivated'),
                        ('account_deleted', 'Account deleted'),
                        ('admin_created', 'Co-admin created'),
                    ],
                    max_length=40,
                )),
                ('notes', models.TextField(blank=True)),
                ('created_at', models.DateTimeField(default=django.utils.timezone.now)),
                ('booking', models.ForeignKey(
                    blank=True,
                    null=True,
                    on_delete=django.db.models.deletion.SET_NULL,
                    related_name='logs',
                    to='duties.booking',
                )),
                ('performed_by', models.ForeignKey(
                    blank=True,
                    null=True,
                    on_delete=django.db.models.deletion.SET_NULL,
                    related_name='duty_actions',
                    to=settings.AUTH_USER_MODEL,
                )),
                ('schedule', models.ForeignKey(
                    blank=True,
                    null=True,
                    on_delete=django.db.models.deletion.SET_NULL,
                    related_name='logs',
                    to='duties.schedule',
                )),
                ('target_user', models.ForeignKey(
                    blank=True,
                    null=True,
                    on_delete=django.db.models.deletion.SET_NULL,
                    related_name='duty_log_entries',
                    to=settings.AUTH_USER_MODEL,
                )),
            ],
            options={
                'verbose_name': 'Duty Log',
                'verbose_name_plural': 'Duty Logs',
                'ordering': ['-created_at'],
            },
        ),
    ]
