"""
accounts/urls.py
────────────────
URL patterns for authentication, profile settings and student management.
Include in the root urls.py with:
    path('', include('accounts.urls')),
"""

from django.urls import path

from . import views

urlpatterns = [
    path('signup/', views.signup_view, name='signup'),
    path('login/',  views.login_view,  name='login'),
    path('logout/', views.logout_view, name='logout'),
    path('password-change/',       views.password_change_view,      name='password_change'),
    path('password-change/done/',  views.password_change_done_view, name='password_change_done'),
    path('profile/',               views.profile_view,              name='profile'),

    # Admin: student management
    path('manage/students/',                            views.student_list_view,          name='student_list'),
    path('manage/students/<int:student_id>/edit/',      views.student_edit_view,          name='student_edit'),
    path('manage/students/<int:student_id>/toggle/',    views.student_toggle_active_view, name='student_toggle_active'),
    path('manage/students/<int:student_id>/delete/',    views.student_delete_view,        name='student_delete'),
    path('manage/admins/new/',                          views.create_admin_view,          name='create_admin'),
]
