"""
accounts/views.py
─────────────────
Authentication views: signup, login, logout, password change.
Profile settings for every role, and admin-side student management
(list, edit, activate / deactivate, delete) plus co-admin creation.

All templates are resolved from accounts/templates/accounts/.
"""

from django.contrib import messages
from django.contrib.auth import authenticate, get_user_model, login, logout, update_session_auth_hash
from django.contrib.auth.decorators import login_required
from django.contrib.auth.forms import PasswordChangeForm
from django.db.models import Count, Q
from django.http import HttpResponseNotAllowed
from django.shortcuts import get_object_or_404, redirect, render

from duties.models import Booking
from duties.views.utils import (
    add_form_control_class, admin_required, redirect_back, require_POST_or_405, run_service,
)

from . import services
from .forms import CreateAdminForm, ProfileForm, SignupForm, StudentEditForm


# ── Signup / Login / Logout ───────────────────────────────────────────────────

def signup_view(req):
    """Self-registration for students and parents."""
    if req.user.is_authenticated:
        return redirect('dashboard')

    if req.method == 'POST':
        form = SignupForm(req.POST)
        if form.is_valid():
            user = form.save()
            login(req, user)
            messages.success(req, f'Welcome {user.display_name}! Your account has been created successfully.')
            return redirect('dashboard')
        messages.error(req, 'Please fix the errors below.')
    else:
        form = SignupForm()

    add_form_control_class(form)
    return render(req, 'accounts/signup.html', {'form': form})


def login_view(req):
    """Show the login form (GET) or authenticate and redirect (POST)."""
    if req.user.is_authenticated:
        return redirect('dashboard')

    if req.method == 'POST':
        username = req.POST.get('username', '').strip()
        password = req.POST.get('password', '')
        user = authenticate(req, username=username, password=password)
        if user is not None:
            login(req, user)
            messages.success(req, f'Welcome back, {user.display_name}!')
            return redirect_back(req, 'dashboard')
        else:
            messages.error(req, 'Invalid username or password. Please try again.')

    return render(req, 'accounts/login.html', {'next': req.GET.get('next', '')})


def logout_view(req):
    """Log the current user out – POST only for CSRF safety."""
    if req.method != 'POST':
        return HttpResponseNotAllowed(['POST'])
    logout(req)
    messages.info(req, 'You have been logged out.')
    return redirect('login')


# ── Password / profile ────────────────────────────────────────────────────────

@login_required
def password_change_view(req):
    """Allow a logged-in user to change their own password."""
    if req.method == 'POST':
        form = PasswordChangeForm(req.user, req.POST)
        if form.is_valid():
            user = form.save()
            update_session_auth_hash(req, user)
            messages.success(req, 'Your password was updated successfully.')
            return redirect('password_change_done')
        else:
            messages.error(req, 'Please fix the errors below.')
    else:
        form = PasswordChangeForm(req.user)

    add_form_control_class(form)
    return render(req, 'accounts/password_change.html', {'form': form})


@login_required
def password_change_done_view(req):
    """Confirmation page shown after a successful password change."""
    return render(req, 'accounts/password_change_done.html')


@login_required
def profile_view(req):
    """Profile settings.  Saved through accounts.services so the change is logged."""
    if req.method == 'POST':
        form = ProfileForm(req.POST, instance=get_user_model().objects.get(pk=req.user.pk))
        if form.is_valid():
            updated = run_service(
                req, services.update_profile, req.user, req.user,
                success='Profile updated successfully.',
                **form.cleaned_data,
            )
            if updated is not None:
                return redirect('profile')
        else:
            messages.error(req, 'Please fix the errors below.')
    else:
        form = ProfileForm(instance=req.user)

    add_form_control_class(form)
    return render(req, 'accounts/profile.html', {'form': form})


# ── Student management (admin) ────────────────────────────────────────────────

@admin_required
def student_list_view(req):
    """All student accounts with their duty counts; searchable by name / number."""
    User = get_user_model()
    students = (
        User.objects
        .filter(role=User.Role.STUDENT)
        .annotate(
            total_duties=Count('bookings'),
            completed_duties=Count('bookings', filter=Q(bookings__status=Booking.Status.COMPLETED)),
        )
        .order_by('full_name', 'username')
    )
    search = req.GET.get('q', '').strip()
    if search:
        students = students.filter(
            Q(full_name__icontains=search)
            | Q(student_number__icontains=search)
            | Q(email__icontains=search)
        )
    return render(req, 'accounts/student_list.html', {
        'students': students,
        'search':   search,
    })


@admin_required
def student_edit_view(req, student_id):
    User = get_user_model()
    student = get_object_or_404(User, pk=student_id, role=User.Role.STUDENT)

    if req.method == 'POST':
        form = StudentEditForm(req.POST, instance=User.objects.get(pk=student.pk))
        if form.is_valid():
            updated = run_service(
                req, services.update_profile, student, req.user,
                success=f'Saved changes to {student.display_name}.',
                **form.cleaned_data,
            )
            if updated is not None:
                return redirect('student_list')
        else:
            messages.error(req, 'Please fix the errors below.')
    else:
        form = StudentEditForm(instance=student)

    add_form_control_class(form)
    return render(req, 'accounts/student_edit.html', {'form': form, 'student': student})


@admin_required
@require_POST_or_405
def student_toggle_active_view(req, student_id):
    User = get_user_model()
    student = get_object_or_404(User, pk=student_id, role=User.Role.STUDENT)
    active = not student.is_active
    run_service(
        req, services.set_active, student, req.user, active,
        success=f'{student.display_name} has been {"activated" if active else "deactivated"}.',
    )
    return redirect('student_list')


@admin_required
@require_POST_or_405
def student_delete_view(req, student_id):
    User = get_user_model()
    student = get_object_or_404(User, pk=student_id, role=User.Role.STUDENT)
    name = student.display_name
    run_service(
        req, services.delete_student, student, req.user,
        success=lambda n: f'Deleted {name}; {n} active duty booking(s) were cancelled.',
    )
    return redirect('student_list')


@admin_required
def create_admin_view(req):
    if req.method == 'POST':
        form = CreateAdminForm(req.POST)
        if form.is_valid():
            cd = form.cleaned_data
            created = run_service(
                req, services.create_admin, req.user,
                cd['username'], cd['password'],
                full_name=cd['full_name'],
                email=cd['email'],
                success=lambda u: f'Co-admin {u.display_name} created.',
            )
            if created is not None:
                return redirect('admin_dashboard')
        else:
            messages.error(req, 'Please fix the errors below.')
    else:
        form = CreateAdminForm()

    add_form_control_class(form)
    return render(req, 'accounts/create_admin.html', {'form': form})
