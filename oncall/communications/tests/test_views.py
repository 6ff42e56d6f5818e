"""Tests for the notification list and mark-as-read endpoints."""

import pytest
from django.urls import reverse

from communications import services
from communications.models import Notification


pytestmark = pytest.mark.django_db


def test_list_shows_only_own_notifications(client, student, other_student):
    services.notify(student, 'Mine', 'for Maria')
    services.notify(other_student, 'Theirs', 'for Ana')
    client.force_login(student)

    response = client.get(reverse('notification_list'))
    assert response.status_code == 200
    assert [n.title for n in response.context['notifications']] == ['Mine']
    assert response.context['unread_notifications'] == 1


def test_mark_read_endpoints(client, student, other_student):
    services.notify(student, 'One', '1')
    services.notify(student, 'Two', '2')
    foreign = Notification.objects.create(user=other_student, title='X', message='x')
    client.force_login(student)

    mine = Notification.objects.filter(user=student).first()
    assert client.get(reverse('notification_read', args=[mine.pk])).status_code == 405
    client.post(reverse('notification_read', args=[mine.pk]))
    assert Notification.objects.get(pk=mine.pk).read

    response = client.post(reverse('notification_read', args=[foreign.pk]))
    assert response.url == reverse('notification_list')
    assert not Notification.objects.get(pk=foreign.pk).read

    client.post(reverse('notification_read_all'))
    assert services.unread_count(student) == 0


def test_anonymous_is_redirected(client):
    response = client.get(reverse('notification_list'))
    assert response.status_code == 302
    assert reverse('login') in response.url
