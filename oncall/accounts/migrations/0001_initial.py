# accounts/migrations/0001_initial.py
#
# Creates the CustomUser profile table (students, parents and admins).

import django.contrib.auth.models
import django.contrib.auth.validators
import django.db.models.deletion
import django.utils.timezone
from django.conf import settings
from django.db import migrations, models


class Migration(migrations.Migration):

    initial = True

    dependencies = [
        ('auth', '0012_alter_user_first_name_max_length'),
    ]

    operations = [
        migrations.CreateModel(
            name='CustomUser',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('password', models.CharField(max_length=128, verbose_name='password')),
                ('last_login', models.DateTimeField(blank=True, null=True, verbose_name='last login')),
                ('is_superuser', models.BooleanField(
                    default=False,
                    help_text='Designates that this user has all permissions without explicitly assigning them.',
                    verbose_name='superuser status',
                )),
                ('username', models.CharField(
                    error_messages={'unique': 'A user with that username already exists.'},
                    help_text='Required. 150 characters or fewer. Letters, digits and @/./+/-/_ only.',
                    max_length=150,
                    unique=True,
                    validators=[django.contrib.auth.validators.UnicodeUsernameValidator()],
                    verbose_name='username',
                )),
                ('first_name', models.CharField(blank=True, max_length=150, verbose_name='first name')),
                ('last_name', models.CharField(blank=True, max_length=150, verbose_name='last name')),
                ('email', models.EmailField(blank=True, max_length=254, verbose_name='email address')),
                ('is_staff', models.BooleanField(
                    default=False,
                    help_text='Designates whether the user can log into this admin site.',
                    verbose_name='staff status',
                )),
                ('is_active', models.BooleanField(
                    default=True,
                    help_text='Designates whether this user should be treated as active. '
                              'Unselect this instead of deleting accounts.',
                    verbose_name='active',
                )),
                ('date_joined', models.DateTimeField(default=django.utils.timezone.now, verbose_name='date joined')),
                ('role', models.CharField(
                    choices=[('student', 'Student'), ('parent', 'Parent / Guardian'), ('admin', 'Administrator')],
                    default='student',
                    max_length=20,
                    verbose_name='Role',
                )),
                ('full_name', models.CharField(
                    blank=True,
                    help_text='Name shown on schedules, notifications and certificates.',
                    max_length=200,
                )),
                ('student_number', models.CharField(
                    blank=True,
                    help_text='College-issued student number (students only).',
                    max_length=30,
                )),
                ('year_level', models.CharField(blank=True, help_text='e.g. "3rd Year".', max_length=20)),
                ('phone_number', models.CharField(blank=True, max_length=30)),
                ('avatar_url', models.URLField(blank=True, help_text='Public URL of the uploaded avatar image.')),
                ('updated_at', models.DateTimeField(auto_now=True)),
                ('linked_student', models.ForeignKey(
                    blank=True,
                    help_text="For parent accounts: the student whose duties they can view.",
                    limit_choices_to={'role': 'student'},
                    null=True,
                    on_delete=django.db.models.deletion.SET_NULL,
                    related_name='parents',
                    to=settings.AUTH_USER_MODEL,
                )),
                ('groups', models.ManyToManyField(
                    blank=True,
                    help_text='The groups this user belongs to. A user will get all permissions '
                              'granted to each of their groups.',
                    related_name='user_set',
                    related_query_name='user',
                    to='auth.group',
                    verbose_name='groups',
                )),
                ('user_permissions', models.ManyToManyField(
                    blank=True,
                    help_text='Specific permissions for this user.',
                    related_name='user_set',
                    related_query_name='user',
                    to='auth.permission',
                    verbose_name='user permissions',
                )),
            ],
            options={
                'verbose_name': 'User',
                'verbose_name_plural': 'Users',
                'ordering': ['full_name', 'username'],
            },
            managers=[
                ('objects', django.contrib.auth.models.UserManager()),
            ],
        ),
    ]
