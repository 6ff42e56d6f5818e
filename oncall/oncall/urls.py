"""
URL configuration for the on-call duty scheduler.

  path('', include('core.urls')),            # landing page + dashboard router
  path('', include('accounts.urls')),        # login / logout / profile / students
  path('', include('duties.urls')),          # schedules, bookings, approvals
  path('notifications/', include('communications.urls')),
"""

from django.contrib import admin
from django.urls import include, path

urlpatterns = [
    path('admin/', admin.site.urls),
    path('', include('core.urls')),
    path('', include('accounts.urls')),
    path('', include('duties.urls')),
    path('notifications/', include('communications.urls')),
]

handler404 = 'core.views.handler404'
handler500 = 'core.views.handler500'
