"""
duties/urls.py
──────────────
URL patterns for the duties app (student, admin and parent views).
Include in the root urls.py with:
    path('', include('duties.urls')),
"""

from django.urls import path

from . import views

urlpatterns = [
    # Student views
    path('student/',                                 views.student_dashboard_view,  name='student_dashboard'),
    path('student/duties/',                          views.my_duties_view,          name='my_duties'),
    path('schedules/<int:schedule_id>/book/',        views.book_duty_view,          name='book_duty'),
    path('bookings/<int:booking_id>/cancel/',        views.cancel_duty_view,        name='cancel_duty'),
    path('bookings/<int:booking_id>/complete/',      views.complete_duty_view,      name='complete_duty'),
    path('bookings/<int:booking_id>/certificate/',   views.certificate_view,        name='certificate'),
    path('certificates/<int:booking_id>/verify/',    views.verify_certificate_view, name='verify_certificate'),
    path('calendar/',                                views.calendar_view,           name='calendar'),
    path('calendar/<int:year>/<int:month>/',         views.calendar_view,           name='calendar_month'),

    # Parent views
    path('parent/',                                  views.parent_dashboard_view,   name='parent_dashboard'),

    # Admin views
    path('manage/',                                          views.admin_dashboard_view,    name='admin_dashboard'),
    path('manage/pending/',                                  views.pending_bookings_view,   name='pending_bookings'),
    path('manage/bookings/<int:booking_id>/approve/',        views.approve_booking_view,    name='approve_booking'),
    path('manage/bookings/<int:booking_id>/reject/',         views.reject_booking_view,     name='reject_booking'),
    path('manage/schedules/<int:schedule_id>/',              views.schedule_detail_view,    name='schedule_detail'),
    path('manage/schedules/<int:schedule_id>/approve-all/',  views.approve_all_view,        name='approve_all'),
    path('manage/schedules/<int:schedule_id>/reject-all/',   views.reject_all_view,         name='reject_all'),
    path('manage/schedules/<int:schedule_id>/delete/',       views.delete_schedule_view,    name='delete_schedule'),
    path('manage/schedules/new/',                            views.create_schedule_view,    name='create_schedule'),
    path('manage/schedules/generate/',                       views.generate_schedules_view, name='generate_schedules'),
    path('manage/logs/',                                     views.logs_view,               name='duty_logs'),
    path('manage/reports/',                                  views.reports_view,            name='reports'),
]
