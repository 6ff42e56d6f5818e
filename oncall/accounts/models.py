"""
accounts/models.py
──────────────────
Identity and role model.

CustomUser – the profile of everyone who signs in: students who book duties,
             parents who follow their child's duties, and admins who run the
             schedule.  Extends AbstractUser so Django's auth keeps working.
"""

from django.contrib.auth.models import AbstractUser
from django.db import models


class CustomUser(AbstractUser):
    """
    Profile for the On-Call Duty Scheduler.

    Roles
    -----
    STUDENT  – books duty slots, cancels and completes their own duties.
    PARENT   – read-only view of one linked student's duties.
    ADMIN    – creates schedules, approves / rejects bookings.
    """

    class Role(models.TextChoices):
        STUDENT = 'student', 'Student'
        PARENT  = 'parent',  'Parent / Guardian'
        ADMIN   = 'admin',   'Administrator'

    role = models.CharField(
        max_length=20,
        choices=Role.choices,
        default=Role.STUDENT,
        verbose_name='Role',
    )
    full_name = models.CharField(
        max_length=200,
        blank=True,
        help_text='Name shown on schedules, notifications and certificates.',
    )
    student_number = models.CharField(
        max_length=30,
        blank=True,
        help_text='College-issued student number (students only).',
    )
    year_level = models.CharField(
        max_length=20,
        blank=True,
        help_text='e.g. "3rd Year".',
    )
    phone_number = models.CharField(max_length=30, blank=True)
    avatar_url = models.URLField(
        blank=True,
        help_text='Public URL of the uploaded avatar image.',
    )
    linked_student = models.ForeignKey(
        'self',
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        limit_choices_to={'role': Role.STUDENT},
        related_name='parents',
        help_text='For parent accounts: the student whose duties they can view.',
    )
    updated_at = models.DateTimeField(auto_now=True)

    @property
    def is_student(self):
        return self.role == self.Role.STUDENT

    @property
    def is_parent(self):
        return self.role == self.Role.PARENT

    @property
    def is_admin_role(self):
        return self.role == self.Role.ADMIN

    @property
    def display_name(self):
        return self.full_name or self.get_full_name() or self.username

    def __str__(self):
        return f"{self.display_name} ({self.get_role_display()})"

    class Meta:
        verbose_name = 'User'
        verbose_name_plural = 'Users'
        ordering = ['full_name', 'username']
