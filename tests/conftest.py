from datetime import datetime, timedelta, timezone as dt_timezone
from itertools import count

import pytest
from django.contrib.auth import get_user_model
from django.utils import timezone

from apps.accounts.models import Club, ClubMembership
from apps.matches.models import Match

NOW = datetime(2030, 3, 10, 12, 0, tzinfo=dt_timezone.utc)


@pytest.fixture
def now():
    return NOW


@pytest.fixture
def user_factory(db):
    def _create(username):
        return get_user_model().objects.create_user(username=username, password="password123")

    return _create


@pytest.fixture
def club(db):
    return Club.objects.create(pk="club_north", name="North League")


@pytest.fixture
def other_club(db):
    return Club.objects.create(pk="club_south", name="South League")


@pytest.fixture
def membership_factory(db):
    def _join(user, club, role=ClubMembership.Role.REFEREE):
        ClubMembership.objects.get_or_create(user=user, club=club, role=role)
        return user

    return _join


@pytest.fixture
def admin_user(user_factory, membership_factory, club):
    user = user_factory("admin")
    membership_factory(user, club, ClubMembership.Role.ADMIN)
    return membership_factory(user, club)


@pytest.fixture
def referee(user_factory, membership_factory, club):
    return membership_factory(user_factory("referee"), club)


@pytest.fixture
def other_referee(user_factory, membership_factory, club):
    return membership_factory(user_factory("referee2"), club)


@pytest.fixture
def match_factory(db, club, now):
    """Create a match starting ``hours`` after the ``now`` fixture (or at ``at``)."""
    sequence = count(1)

    def _create(hours=48, *, at=None, club=club, status=Match.Status.SCHEDULED, **extra):
        start = timezone.localtime(at or now + timedelta(hours=hours))
        number = next(sequence)
        values = {
            "club": club,
            "description": f"Match {number}",
            "date": start.date(),
            "time": start.time().replace(microsecond=0),
            "location": "Main field",
            "status": status,
        }
        values.update(extra)
        return Match.objects.create(pk=f"m{number}_{club.pk}", **values)

    return _create


@pytest.fixture
def admin_client(client, django_user_model):
    """Django-admin client logged in as a superuser.

    pytest-django's ``admin_client`` depends on ``admin_user``, which this
    conftest redefines as a club admin, so wire it to a real superuser here.
    """
    superuser = django_user_model.objects.create_superuser(
        username="django_admin", email="django_admin@example.com", password="password123"
    )
    client.force_login(superuser)
    return client
