"""
duties/views/parent.py
──────────────────────
Read-only view of the linked student's duties for parent accounts.
"""

from django.shortcuts import render

from .. import selectors
from ..exceptions import BookingValidationError
from ..validators import local_today
from .utils import parent_required


@parent_required
def parent_dashboard_view(req):
    try:
        student = selectors.linked_student(req.user)
    except BookingValidationError as exc:
        return render(req, 'duties/parent_dashboard.html', {'error': exc.message})

    today = local_today()
    return render(req, 'duties/parent_dashboard.html', {
        'student': student,
        'stats':   selectors.student_dashboard_stats(student, today),
        'duties':  selectors.child_duties(req.user),
        'today':   today,
    })
