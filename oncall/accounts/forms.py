"""
accounts/forms.py
─────────────────
Forms for self-registration, profile editing and admin-side account
management.
"""

from django import forms
from django.contrib.auth.forms import UserCreationForm

from .models import CustomUser

YEAR_LEVELS = [
    ('1st Year', '1st Year'),
    ('2nd Year', '2nd Year'),
    ('3rd Year', '3rd Year'),
    ('4th Year', '4th Year'),
]


class SignupForm(UserCreationForm):
    """
    Public registration for students and parents.

    Students must give their student number; parents give their child's
    student number, which is matched case-insensitively against existing
    student accounts.  Admin accounts are only created by other admins.
    """

    role = forms.ChoiceField(
        choices=[
            (CustomUser.Role.STUDENT, 'Student'),
            (CustomUser.Role.PARENT,  'Parent'),
        ],
        initial=CustomUser.Role.STUDENT,
    )
    year_level = forms.ChoiceField(choices=[('', '---------')] + YEAR_LEVELS, required=False)
    child_student_number = forms.CharField(
        max_length=30,
        required=False,
        label="Child's student number",
    )

    class Meta(UserCreationForm.Meta):
        model  = CustomUser
        fields = ('username', 'email', 'full_name', 'role', 'student_number', 'year_level', 'phone_number')

    def __init__(self, *args, **kwargs):
        super().__init__(*args, **kwargs)
        self.fields['email'].required = True
        self.fields['full_name'].required = True

    def clean(self):
        cleaned = super().clean()
        role = cleaned.get('role')
        if role == CustomUser.Role.STUDENT:
            number = (cleaned.get('student_number') or '').strip()
            if not number:
                self.add_error('student_number', 'Student number is required for student accounts.')
            elif CustomUser.objects.filter(
                role=CustomUser.Role.STUDENT, student_number__iexact=number,
            ).exists():
                self.add_error('student_number', 'A student with this number is already registered.')
            cleaned['student_number'] = number
        elif role == CustomUser.Role.PARENT:
            number = (cleaned.get('child_student_number') or '').strip()
            if not number:
                self.add_error('child_student_number', 'Student ID is required for parent accounts.')
            else:
                child = CustomUser.objects.filter(
                    role=CustomUser.Role.STUDENT, student_number__iexact=number,
                ).first()
                if child is None:
                    self.add_error(
                        'child_student_number',
                        'No student found with that student number. Please check with your child.',
                    )
                cleaned['linked_student'] = child
            cleaned['student_number'] = ''
            cleaned['year_level'] = ''
        return cleaned

    def save(self, commit=True):
        user = super().save(commit=False)
        user.role = self.cleaned_data['role']
        user.linked_student = self.cleaned_data.get('linked_student')
        if commit:
            user.save()
        return user


class ProfileForm(forms.ModelForm):
    """A user's own profile settings."""

    class Meta:
        model  = CustomUser
        fields = ['full_name', 'email', 'phone_number', 'avatar_url', 'student_number', 'year_level']
        widgets = {
            'avatar_url': forms.URLInput(attrs={'placeholder': 'https://…'}),
        }

    def __init__(self, *args, **kwargs):
        super().__init__(*args, **kwargs)
        self.fields['full_name'].required = True
        if not self.instance.is_student:
            del self.fields['student_number']
            del self.fields['year_level']


class StudentEditForm(forms.ModelForm):
    """Admin edit of a student's record."""

    class Meta:
        model  = CustomUser
        fields = ['full_name', 'email', 'student_number', 'year_level', 'phone_number']


class CreateAdminForm(forms.Form):
    username  = forms.CharField(max_length=150)
    full_name = forms.CharField(max_length=200)
    email     = forms.EmailField()
    password  = forms.CharField(
        widget=forms.PasswordInput,
        min_length=8,
        help_text='At least 8 characters.',
    )
    password_confirm = forms.CharField(widget=forms.PasswordInput, label='Confirm password')

    def clean(self):
        cleaned = super().clean()
        if cleaned.get('password') != cleaned.get('password_confirm'):
            raise forms.ValidationError('Passwords do not match.')
        return cleaned
