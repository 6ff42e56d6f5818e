"""
core/context_processors.py
──────────────────────────
Global template context injected into every request.

Registered in settings.py → TEMPLATES[0]['OPTIONS']['context_processors'].
"""

from communications.services import unread_count


def notifications(request):
    """
    Injects the notification-bell figure into every template context:

        unread_notifications – unread count for the signed-in user (0 otherwise)
    """
    user = getattr(request, 'user', None)
    if user is None or not user.is_authenticated:
        return {'unread_notifications': 0}
    return {'unread_notifications': unread_count(user)}
