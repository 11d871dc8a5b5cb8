import datetime

import pytest
from django.contrib.auth import get_user_model
from django.core.exceptions import PermissionDenied, ValidationError
from django.urls import reverse

from apps.matches.models import Match, MatchAssignment
from apps.matches.services import assign_referee, get_club_schedule, save_club_matches
from apps.postulations.services import submit_postulation


def _payload(match, **changes):
    values = {
        "id": match.pk,
        "description": match.description,
        "date": match.date,
        "time": match.time,
        "location": match.location,
        "status": match.status,
    }
    values.update(changes)
    return values


@pytest.mark.django_db
def test_save_club_matches_updates_creates_and_deletes(
    club, admin_user, referee, match_factory, now
):
    kept = match_factory(hours=48)
    dropped = match_factory(hours=72)
    assign_referee(match=dropped, referee=referee, actor=admin_user, now=now)

    saved = save_club_matches(
        club=club,
        actor=admin_user,
        matches=[
            _payload(kept, location="Annex", status=Match.Status.POSTPONED),
            {
                "description": "Derby",
                "date": "2030-04-01",
                "time": "15:00",
                "location": "Stadium",
            },
        ],
    )

    assert len(saved) == 2
    kept.refresh_from_db()
    assert kept.location == "Annex"
    assert kept.status == Match.Status.POSTPONED
    derby = Match.objects.get(club=club, description="Derby")
    assert derby.date == datetime.date(2030, 4, 1)
    assert derby.time == datetime.time(15, 0)
    assert derby.status == Match.Status.SCHEDULED
    assert not Match.objects.filter(pk=dropped.pk).exists()
    assert not MatchAssignment.objects.filter(match_id=dropped.pk).exists()


@pytest.mark.django_db
def test_save_club_matches_is_admin_only(club, referee, match_factory):
    match = match_factory(hours=48)
    with pytest.raises(PermissionDenied):
        save_club_matches(club=club, actor=referee, matches=[])
    assert Match.objects.filter(pk=match.pk).exists()


@pytest.mark.django_db
def test_save_club_matches_rolls_back_on_bad_entry(club, admin_user, match_factory):
    match = match_factory(hours=48)

    with pytest.raises(ValidationError):
        save_club_matches(
            club=club,
            actor=admin_user,
            matches=[{"description": "No date", "time": "10:00", "location": "Field"}],
        )

    assert Match.objects.filter(pk=match.pk).exists()


@pytest.mark.django_db
def test_save_club_matches_rejects_unknown_status(club, admin_user, match_factory):
    match = match_factory(hours=48)
    with pytest.raises(ValidationError):
        save_club_matches(club=club, actor=admin_user, matches=[_payload(match, status="abandoned")])


@pytest.mark.django_db
def test_save_club_matches_cannot_take_over_other_clubs_ids(
    club, other_club, admin_user, match_factory
):
    foreign = match_factory(hours=48, club=other_club)
    with pytest.raises(ValidationError):
        save_club_matches(club=club, actor=admin_user, matches=[_payload(foreign)])
    foreign.refresh_from_db()
    assert foreign.club == other_club


@pytest.mark.django_db
def test_club_schedule_lists_assignments_and_postulations(
    club, admin_user, referee, match_factory, now
):
    first = match_factory(hours=48)
    second = match_factory(hours=72)
    submit_postulation(user=referee, club=club, match_ids=[first.pk, second.pk], now=now)
    assign_referee(match=first, referee=referee, actor=admin_user, now=now)

    schedule = get_club_schedule(club)

    assert [row.match.pk for row in schedule.matches] == [first.pk, second.pk]
    assert schedule.matches[0].assignment.referee == referee
    assert schedule.matches[1].assignment is None
    assert len(schedule.postulations) == 1
    assert {match.pk for match in schedule.postulations[0].matches.all()} == {first.pk, second.pk}


@pytest.mark.django_db
def test_save_club_matches_accepts_stored_timestamp_dates(club, admin_user):
    save_club_matches(
        club=club,
        actor=admin_user,
        matches=[
            {
                "id": "imported",
                "description": "Imported match",
                "date": "2024-07-28T00:00:00.000Z",
                "time": "15:00",
                "location": "Field",
            }
        ],
    )

    assert Match.objects.get(pk="imported").date == datetime.date(2024, 7, 28)


@pytest.mark.parametrize("bad_date", ["2024-07-28garbage", "2024-13-01", "tomorrow"])
@pytest.mark.django_db
def test_save_club_matches_rejects_malformed_dates(club, admin_user, bad_date):
    with pytest.raises(ValidationError):
        save_club_matches(
            club=club,
            actor=admin_user,
            matches=[
                {"description": "Bad", "date": bad_date, "time": "15:00", "location": "Field"}
            ],
        )
    assert not Match.objects.filter(club=club).exists()


@pytest.mark.django_db
def test_assignments_are_read_only_in_django_admin(admin_client, club, match_factory):
    match = match_factory(hours=48)
    assignee = get_user_model().objects.create_user(username="assignee", password="password123")
    assignment = MatchAssignment.objects.create(club=club, match=match, referee=assignee)

    assert admin_client.get(reverse("admin:matches_matchassignment_add")).status_code == 403
    response = admin_client.post(
        reverse("admin:matches_matchassignment_change", args=[assignment.pk]),
        {"match": match.pk, "referee": assignee.pk, "club": club.pk},
    )
    assert response.status_code == 403
    assignment.refresh_from_db()
    assert assignment.referee == assignee
