"""
duties/locations.py
───────────────────
The hospital / health-unit catalogue from settings.DUTY_LOCATIONS, plus the
month-based rotation used when schedules are generated in bulk.
"""

from collections import namedtuple

from django.conf import settings

Location = namedtuple('Location', ['name', 'capacity', 'description'])

DEFAULT_CAPACITY = 2


def duty_locations():
    return [Location(*row) for row in settings.DUTY_LOCATIONS]


def location_names():
    return [loc.name for loc in duty_locations()]


def capacity_for(name):
    """Default max_students for *name*; DEFAULT_CAPACITY for unknown locations."""
    for loc in duty_locations():
        if loc.name == name:
            return loc.capacity
    return DEFAULT_CAPACITY


def location_for_month(day):
    """Each calendar month is assigned one location, cycling through the list."""
    locations = duty_locations()
    return locations[(day.month - 1) % len(locations)]
