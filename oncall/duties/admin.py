"""
duties/admin.py
───────────────
Admin registrations for Schedule, Booking and DutyLog.

Bookings are read-only here: status changes must go through the
approval pages so the schedule status, audit trail and notifications
stay consistent.  DutyLog is append-only and cannot be edited or deleted.
"""

from django.contrib import admin

from .models import Booking, DutyLog, Schedule


class BookingInline(admin.TabularInline):
    model           = Booking
    extra           = 0
    can_delete      = False
    fields          = ('student', 'status', 'booking_time', 'approved_by', 'cancellation_reason')
    readonly_fields = fields

    def has_add_permission(self, request, obj=None):
        return False


@admin.register(Schedule)
class ScheduleAdmin(admin.ModelAdmin):
    list_display  = ('date', 'location', 'shift_start', 'shift_end', 'max_students', 'active_count', 'status')
    list_filter   = ('status', 'location', 'date')
    search_fields = ('location', 'description')
    readonly_fields = ('status', 'approved_by', 'approved_at', 'created_at', 'updated_at')
    inlines       = [BookingInline]

    fieldsets = (
        (None, {
            'fields': ('date', 'location', 'description', 'shift_start', 'shift_end', 'max_students'),
        }),
        ('Approval', {
            'fields': ('status', 'approved_by', 'approved_at'),
        }),
        ('Metadata', {
            'fields': ('created_by', 'created_at', 'updated_at'),
            'classes': ('collapse',),
        }),
    )

    @admin.display(description='Booked')
    def active_count(self, obj):
        return obj.active_count


@admin.register(Booking)
class BookingAdmin(admin.ModelAdmin):
    list_display  = ('student', 'duty_date', 'schedule', 'status', 'booking_time', 'approved_by')
    list_filter   = ('status', 'cancellation_kind', 'duty_date')
    search_fields = ('student__username', 'student__full_name', 'student__student_number',
                     'schedule__location')

    def has_add_permission(self, request):
        return False

    def has_change_permission(self, request, obj=None):
        return False


@admin.register(DutyLog)
class DutyLogAdmin(admin.ModelAdmin):
    list_display  = ('created_at', 'action', 'performed_by', 'target_user', 'schedule')
    list_filter   = ('action', 'created_at')
    search_fields = ('notes', 'performed_by__full_name', 'target_user__full_name')

    def has_add_permission(self, request):
        return False

    def has_change_permission(self, request, obj=None):
        return False

    def has_delete_permission(self, request, obj=None):
        return False
