"""
Test configuration and fixtures.

Provides:
- A fixed clock (`now`, `today`, `tomorrow`) in the site time zone
- Users for every role (admin, student, other_student, parent)
- A `make_schedule` factory that writes Schedule rows directly
- A clean query cache for every test
"""
from datetime import date, datetime, time, timedelta
from zoneinfo import ZoneInfo

import pytest
from django.core.cache import cache

from accounts.models import CustomUser
from duties.models import Booking, Schedule

MANILA = ZoneInfo('Asia/Manila')

NOW = datetime(2030, 3, 11, 9, 30, tzinfo=MANILA)   # a Monday
TODAY = date(2030, 3, 11)


# =============================================================================
# Environment
# =============================================================================

@pytest.fixture(autouse=True)
def _clean_cache():
    cache.clear()
    yield
    cache.clear()


@pytest.fixture(autouse=True)
def _plain_static_storage(settings):
    """Manifest storage needs collectstatic; tests render without it."""
    settings.STORAGES = {
        'default':     {'BACKEND': 'django.core.files.storage.FileSystemStorage'},
        'staticfiles': {'BACKEND': 'django.contrib.staticfiles.storage.StaticFilesStorage'},
    }


# =============================================================================
# Clock
# =============================================================================

@pytest.fixture
def now():
    return NOW


@pytest.fixture
def today():
    return TODAY


@pytest.fixture
def tomorrow():
    return TODAY + timedelta(days=1)


# =============================================================================
# Users
# =============================================================================

@pytest.fixture
def make_user(db):
    counter = {'n': 0}

    def _make(role=CustomUser.Role.STUDENT, **extra):
        counter['n'] += 1
        n = counter['n']
        defaults = {
            'username':  f'{role}{n}',
            'email':     f'{role}{n}@example.edu.ph',
            'full_name': f'{role.title()} Number {n}',
            'role':      role,
        }
        if role == CustomUser.Role.STUDENT:
            defaults['student_number'] = f'2030-{n:04d}'
            defaults['year_level'] = '3rd Year'
        defaults.update(extra)
        return CustomUser.objects.create_user(password='s3cure-pass!', **defaults)

    return _make


@pytest.fixture
def admin(make_user):
    return make_user(CustomUser.Role.ADMIN, full_name='Clinical Instructor', is_staff=True)


@pytest.fixture
def student(make_user):
    return make_user(CustomUser.Role.STUDENT, full_name='Maria Santos')


@pytest.fixture
def other_student(make_user):
    return make_user(CustomUser.Role.STUDENT, full_name='Ana Reyes')


@pytest.fixture
def parent(make_user, student):
    return make_user(CustomUser.Role.PARENT, full_name='Rosa Santos', linked_student=student)


# =============================================================================
# Schedules / bookings
# =============================================================================

@pytest.fixture
def make_schedule(db, admin, tomorrow):
    def _make(on=None, location='ISDH - Magsingal', max_students=2, status=Schedule.Status.PENDING):
        return Schedule.objects.create(
            date=on or tomorrow,
            location=location,
            shift_start=time(8, 0),
            shift_end=time(20, 0),
            max_students=max_students,
            status=status,
            created_by=admin,
        )
    return _make


@pytest.fixture
def schedule(make_schedule):
    return make_schedule()


@pytest.fixture
def make_booking(db, now):
    """Write a Booking row directly, bypassing the validator."""
    def _make(schedule, student, status=Booking.Status.BOOKED, **extra):
        return Booking.objects.create(
            schedule=schedule,
            student=student,
            booking_time=now,
            status=status,
            **extra,
        )
    return _make
