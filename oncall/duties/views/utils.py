"""
duties/views/utils.py
─────────────────────
Shared helpers used by the student, admin and parent view modules (and by
accounts.views).  Nothing here imports from other view modules.
"""

import logging
from functools import wraps

from django.contrib import messages
from django.db import DatabaseError
from django.http import HttpResponseNotAllowed
from django.shortcuts import redirect
from django.utils.http import url_has_allowed_host_and_scheme

from ..exceptions import BookingConflictError, DutyError

logger = logging.getLogger(__name__)


# ── Form styling ──────────────────────────────────────────────────────────────

def add_form_control_class(form):
    """Inject a uniform CSS class onto every visible widget."""
    for field in form.fields.values():
        field.widget.attrs.setdefault('class', 'form-control-input')
    return form


# ── Access control ────────────────────────────────────────────────────────────

def _role_required(check, label):
    """
    Build a decorator: unauthenticated users → login, users failing *check*
    → dashboard with an error message.
    """
    def decorator(view_fn):
        @wraps(view_fn)
        def wrapper(req, *args, **kwargs):
            if not req.user.is_authenticated:
                return redirect('login')
            if not check(req.user):
                messages.error(req, f'Access denied – {label} only.')
                return redirect('dashboard')
            return view_fn(req, *args, **kwargs)
        return wrapper
    return decorator


admin_required = _role_required(lambda u: u.is_admin_role, 'admin')
student_required = _role_required(lambda u: u.is_student, 'student')
parent_required = _role_required(lambda u: u.is_parent, 'parent')


def require_POST_or_405(view_fn):
    """Decorator: return 405 for any non-POST request."""
    @wraps(view_fn)
    def wrapper(req, *args, **kwargs):
        if req.method != 'POST':
            return HttpResponseNotAllowed(['POST'])
        return view_fn(req, *args, **kwargs)
    return wrapper


# ── Running a service call from a view ────────────────────────────────────────

def run_service(req, fn, *args, success=None, **kwargs):
    """
    Call a duties/accounts service and turn its outcome into a flash message.

    DutyError subclasses carry the user-facing text; a BookingConflictError
    is shown as a warning because the page refresh shows the real state.
    Storage failures are logged and shown as a generic error.
    Returns the service result, or None when it failed.
    """
    try:
        result = fn(*args, **kwargs)
    except BookingConflictError as exc:
        messages.warning(req, exc.message)
        return None
    except DutyError as exc:
        messages.error(req, exc.message)
        return None
    except DatabaseError:
        logger.exception('Database error in %s', fn.__name__)
        messages.error(req, 'Something went wrong while saving. Please try again.')
        return None
    if success:
        messages.success(req, success(result) if callable(success) else success)
    return result


def redirect_back(req, default):
    """Redirect to the posted `next` URL when it is local, else to *default*."""
    next_url = req.POST.get('next') or req.GET.get('next')
    if next_url and url_has_allowed_host_and_scheme(
        next_url, allowed_hosts={req.get_host()}, require_https=req.is_secure(),
    ):
        return redirect(next_url)
    return redirect(default)
