"""
core/views.py
─────────────
Public pages: landing page, about page, and the role-based dashboard
router.  Custom error handlers (404 / 500) are registered in urls.py.
"""

from django.contrib.auth.decorators import login_required
from django.shortcuts import redirect, render


def home_view(req):
    """Landing page – authenticated users go straight to their dashboard."""
    if req.user.is_authenticated:
        return redirect('dashboard')
    return render(req, 'core/home.html')


def about_view(req):
    """Public about / help page."""
    return render(req, 'core/about.html')


@login_required
def dashboard_view(req):
    """Send each role to its own dashboard."""
    if req.user.is_admin_role:
        return redirect('admin_dashboard')
    if req.user.is_parent:
        return redirect('parent_dashboard')
    return redirect('student_dashboard')


# ── Custom error pages ────────────────────────────────────────────────────────

def handler404(req, exception):
    return render(req, 'core/404.html', status=404)


def handler500(req):
    return render(req, 'core/500.html', status=500)
