"""
accounts/admin.py
─────────────────
Admin registration for CustomUser.
"""

from django.contrib import admin
from django.contrib.auth.admin import UserAdmin as BaseUserAdmin

from .models import CustomUser


@admin.register(CustomUser)
class CustomUserAdmin(BaseUserAdmin):
    """
    Extends the default UserAdmin to surface the role, the student record
    and a parent's linked student.
    """

    list_display  = ('username', 'full_name', 'email', 'role', 'student_number', 'is_active')
    list_filter   = BaseUserAdmin.list_filter + ('role', 'year_level')
    search_fields = ('username', 'full_name', 'email', 'student_number')
    raw_id_fields = ('linked_student',)

    fieldsets = BaseUserAdmin.fieldsets + (
        ('On-Call Profile', {'fields': (
            'role', 'full_name', 'student_number', 'year_level',
            'phone_number', 'avatar_url', 'linked_student',
        )}),
    )
    add_fieldsets = BaseUserAdmin.add_fieldsets + (
        ('On-Call Profile', {'fields': ('role', 'full_name', 'student_number', 'year_level')}),
    )
