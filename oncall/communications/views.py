"""
communications/views.py
────────────────────────
The notification list and the mark-as-read actions behind the bell icon.
"""

from django.contrib import messages
from django.contrib.auth.decorators import login_required
from django.shortcuts import redirect, render

from duties.views.utils import redirect_back, require_POST_or_405

from . import services
from .models import Notification


@login_required
def notification_list_view(req):
    """The signed-in user's notifications, newest first."""
    notifications = Notification.objects.filter(user=req.user)
    return render(req, 'communications/notification_list.html', {
        'notifications': notifications[:100],
        'unread':        services.unread_count(req.user),
    })


@login_required
@require_POST_or_405
def mark_read_view(req, notification_id):
    try:
        services.mark_read(notification_id, req.user)
    except Notification.DoesNotExist:
        messages.error(req, 'Notification not found.')
        return redirect('notification_list')
    return redirect_back(req, 'notification_list')


@login_required
@require_POST_or_405
def mark_all_read_view(req):
    count = services.mark_all_read(req.user)
    if count:
        messages.success(req, f'Marked {count} notification(s) as read.')
    return redirect_back(req, 'notification_list')
