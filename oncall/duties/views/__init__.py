"""
duties/views/
─────────────
Split into sub-modules for clarity:
  utils.py   – shared helpers (decorators, service-call wrapper)
  student.py – student dashboard, book / cancel / complete, calendar, certificates
  admin.py   – admin dashboard, approvals, schedule management, logs, reports
  parent.py  – read-only view of the linked student's duties
"""
from .admin import (
    admin_dashboard_view,
    approve_all_view,
    approve_booking_view,
    create_schedule_view,
    delete_schedule_view,
    generate_schedules_view,
    logs_view,
    pending_bookings_view,
    reject_all_view,
    reject_booking_view,
    reports_view,
    schedule_detail_view,
)
from .parent import parent_dashboard_view
from .student import (
    book_duty_view,
    calendar_view,
    cancel_duty_view,
    certificate_view,
    complete_duty_view,
    my_duties_view,
    student_dashboard_view,
    verify_certificate_view,
)

__all__ = [
    # student
    'student_dashboard_view',
    'my_duties_view',
    'calendar_view',
    'book_duty_view',
    'cancel_duty_view',
    'complete_duty_view',
    'certificate_view',
    'verify_certificate_view',
    # admin
    'admin_dashboard_view',
    'pending_bookings_view',
    'approve_booking_view',
    'approve_all_view',
    'reject_booking_view',
    'reject_all_view',
    'schedule_detail_view',
    'create_schedule_view',
    'generate_schedules_view',
    'delete_schedule_view',
    'logs_view',
    'reports_view',
    # parent
    'parent_dashboard_view',
]
