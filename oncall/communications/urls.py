"""
communications/urls.py
───────────────────────
URL patterns for the communications app.
Include in root urls.py with:
    path('notifications/', include('communications.urls')),
"""

from django.urls import path

from . import views

urlpatterns = [
    path('',                               views.notification_list_view, name='notification_list'),
    path('<int:notification_id>/read/',    views.mark_read_view,         name='notification_read'),
    path('read-all/',                      views.mark_all_read_view,     name='notification_read_all'),
]
