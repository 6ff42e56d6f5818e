"""Tests for signup, login and the admin student-management pages."""

import pytest
from django.urls import reverse

from accounts.models import CustomUser


pytestmark = pytest.mark.django_db

PASSWORD = 'Tr1cky-passphrase'


def _signup_data(**overrides):
    data = {
        'username':       'juana',
        'email':          'juana@example.com',
        'full_name':      'Juana Dela Cruz',
        'role':           CustomUser.Role.STUDENT,
        'student_number': '2030-0500',
        'year_level':     '2nd Year',
        'phone_number':   '',
        'password1':      PASSWORD,
        'password2':      PASSWORD,
    }
    data.update(overrides)
    return data


# ── Signup ────────────────────────────────────────────────────────────────────

def test_student_signup_logs_in(client):
    response = client.post(reverse('signup'), _signup_data())

    assert response.status_code == 302
    assert response.url == reverse('dashboard')
    user = CustomUser.objects.get(username='juana')
    assert user.is_student
    assert user.student_number == '2030-0500'
    assert int(client.session['_auth_user_id']) == user.pk


def test_student_signup_requires_unique_number(client, student):
    response = client.post(reverse('signup'), _signup_data(student_number=student.student_number.upper()))
    assert response.status_code == 200
    assert 'student_number' in response.context['form'].errors
    assert not CustomUser.objects.filter(username='juana').exists()


def test_parent_signup_links_child(client, student):
    response = client.post(reverse('signup'), _signup_data(
        username='rosa',
        role=CustomUser.Role.PARENT,
        student_number='',
        child_student_number=f'  {student.student_number}  ',
    ))

    assert response.status_code == 302
    rosa = CustomUser.objects.get(username='rosa')
    assert rosa.is_parent
    assert rosa.linked_student == student
    assert rosa.student_number == ''


def test_parent_signup_with_unknown_child(client):
    response = client.post(reverse('signup'), _signup_data(
        role=CustomUser.Role.PARENT, child_student_number='0000-0000',
    ))
    assert response.status_code == 200
    assert 'No student found' in str(response.context['form'].errors['child_student_number'])


# ── Login / logout ────────────────────────────────────────────────────────────

def test_login_and_logout(client, student):
    response = client.post(reverse('login'), {'username': student.username, 'password': 's3cure-pass!'})
    assert response.url == reverse('dashboard')

    assert client.get(reverse('logout')).status_code == 405
    response = client.post(reverse('logout'))
    assert response.url == reverse('login')
    assert '_auth_user_id' not in client.session


def test_login_ignores_external_next(client, student):
    response = client.post(reverse('login'), {
        'username': student.username,
        'password': 's3cure-pass!',
        'next':     'https://evil.example.com/',
    })
    assert response.url == reverse('dashboard')


def test_bad_credentials(client, student):
    response = client.post(reverse('login'), {'username': student.username, 'password': 'nope'})
    assert response.status_code == 200
    assert '_auth_user_id' not in client.session


# ── Profile ───────────────────────────────────────────────────────────────────

def test_profile_update(client, parent):
    client.force_login(parent)
    response = client.post(reverse('profile'), {
        'full_name':    'Rosa M. Santos',
        'email':        'rosa@example.com',
        'phone_number': '0917 000 1111',
        'avatar_url':   '',
    })
    assert response.url == reverse('profile')
    parent.refresh_from_db()
    assert parent.full_name == 'Rosa M. Santos'


# ── Student management ────────────────────────────────────────────────────────

def test_student_list_is_admin_only(client, student, admin):
    client.force_login(student)
    assert client.get(reverse('student_list')).url == reverse('dashboard')

    client.force_login(admin)
    response = client.get(reverse('student_list'), {'q': 'maria'})
    assert response.status_code == 200
    assert [s.pk for s in response.context['students']] == [student.pk]
    assert response.context['students'][0].total_duties == 0


def test_toggle_and_delete_student(client, student, admin):
    client.force_login(admin)

    client.post(reverse('student_toggle_active', args=[student.pk]))
    student.refresh_from_db()
    assert not student.is_active

    client.post(reverse('student_delete', args=[student.pk]))
    assert not CustomUser.objects.filter(pk=student.pk).exists()


def test_create_admin_view(client, admin):
    client.force_login(admin)
    response = client.post(reverse('create_admin'), {
        'username':         'coadmin',
        'full_name':        'Second Instructor',
        'email':            'ci2@example.com',
        'password':         PASSWORD,
        'password_confirm': PASSWORD,
    })
    assert response.url == reverse('admin_dashboard')
    assert CustomUser.objects.get(username='coadmin').is_admin_role


def test_create_admin_password_mismatch(client, admin):
    client.force_login(admin)
    response = client.post(reverse('create_admin'), {
        'username':         'coadmin',
        'full_name':        'Second Instructor',
        'email':            'ci2@example.com',
        'password':         PASSWORD,
        'password_confirm': PASSWORD + 'x',
    })
    assert response.status_code == 200
    assert not CustomUser.objects.filter(username='coadmin').exists()
