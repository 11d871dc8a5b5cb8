from datetime import timedelta

import pytest
from django.core.exceptions import PermissionDenied, ValidationError
from django.db import DatabaseError

from apps.matches.models import Match
from apps.matches.services import assign_referee
from apps.postulations import services
from apps.postulations.exceptions import (
    DuplicatePendingPostulation,
    PostulationLocked,
    PostulationNotFound,
    PostulationSaveError,
)
from apps.postulations.models import Postulation, PostulationMatch
from apps.postulations.rules import is_postulation_editable
from apps.postulations.services import (
    complete_postulation,
    get_availability_data,
    submit_postulation,
    update_postulation,
)


def _selected_ids(postulation):
    return set(
        PostulationMatch.objects.filter(postulation=postulation).values_list("match_id", flat=True)
    )


@pytest.mark.django_db
def test_submit_creates_pending_postulation_with_links(club, referee, match_factory, now):
    a = match_factory(hours=48)
    b = match_factory(hours=72)

    postulation = submit_postulation(
        user=referee, club=club, match_ids=[a.pk, b.pk], has_car=True, notes="Late", now=now
    )

    postulation.refresh_from_db()
    assert postulation.status == Postulation.Status.PENDING
    assert postulation.has_car is True
    assert postulation.notes == "Late"
    assert postulation.submitted_at == now
    assert postulation.pk.startswith("req_")
    assert _selected_ids(postulation) == {a.pk, b.pk}


@pytest.mark.django_db
def test_empty_selection_is_rejected_before_storage(club, referee, now, django_assert_num_queries):
    with django_assert_num_queries(0):
        with pytest.raises(ValidationError):
            submit_postulation(user=referee, club=club, match_ids=[], now=now)
    assert Postulation.objects.count() == 0


@pytest.mark.django_db
def test_notes_are_bounded(club, referee, match_factory, now, settings):
    match = match_factory(hours=48)
    with pytest.raises(ValidationError):
        submit_postulation(
            user=referee,
            club=club,
            match_ids=[match.pk],
            notes="x" * (settings.REFDESK_NOTES_MAX_LENGTH + 1),
            now=now,
        )


@pytest.mark.django_db
def test_second_pending_postulation_for_same_club_is_rejected(club, referee, match_factory, now):
    match = match_factory(hours=48)
    submit_postulation(user=referee, club=club, match_ids=[match.pk], now=now)

    with pytest.raises(DuplicatePendingPostulation):
        submit_postulation(user=referee, club=club, match_ids=[match.pk], now=now)
    assert Postulation.objects.filter(user=referee, club=club).count() == 1


@pytest.mark.django_db
def test_pending_postulation_in_another_club_does_not_block(
    club, other_club, referee, membership_factory, match_factory, now
):
    membership_factory(referee, other_club)
    home = match_factory(hours=48)
    away = match_factory(hours=48, club=other_club)
    submit_postulation(user=referee, club=club, match_ids=[home.pk], now=now)

    postulation = submit_postulation(user=referee, club=other_club, match_ids=[away.pk], now=now)

    assert postulation.club == other_club


@pytest.mark.django_db
def test_new_postulation_allowed_once_previous_is_completed(
    club, referee, admin_user, match_factory, now
):
    match = match_factory(hours=48)
    first = submit_postulation(user=referee, club=club, match_ids=[match.pk], now=now)
    complete_postulation(postulation=first, actor=admin_user)

    second = submit_postulation(user=referee, club=club, match_ids=[match.pk], now=now)

    assert second.pk != first.pk
    assert Postulation.objects.filter(user=referee, club=club).count() == 2


@pytest.mark.django_db
def test_storage_constraint_backs_up_pending_check(club, referee, match_factory, now, monkeypatch):
    match = match_factory(hours=48)
    submit_postulation(user=referee, club=club, match_ids=[match.pk], now=now)
    real_check = services._pending_exists
    calls = []

    # The first check sees nothing, as if the other request had not committed yet.
    def racing_check(*args):
        calls.append(args)
        return len(calls) > 1 and real_check(*args)

    monkeypatch.setattr(services, "_pending_exists", racing_check)

    with pytest.raises(DuplicatePendingPostulation):
        submit_postulation(user=referee, club=club, match_ids=[match.pk], now=now)
    assert Postulation.objects.filter(user=referee, club=club).count() == 1


@pytest.mark.django_db
def test_non_members_cannot_submit(club, user_factory, match_factory, now):
    match = match_factory(hours=48)
    with pytest.raises(PermissionDenied):
        submit_postulation(user=user_factory("stranger"), club=club, match_ids=[match.pk], now=now)


@pytest.mark.django_db
def test_unknown_and_foreign_matches_are_rejected(club, other_club, referee, match_factory, now):
    away = match_factory(hours=48, club=other_club)

    with pytest.raises(ValidationError):
        submit_postulation(user=referee, club=club, match_ids=["nope"], now=now)
    with pytest.raises(ValidationError):
        submit_postulation(user=referee, club=club, match_ids=[away.pk], now=now)
    assert Postulation.objects.count() == 0


@pytest.mark.django_db
def test_submit_requires_open_window_and_scheduled_matches(club, referee, match_factory, now):
    soon = match_factory(hours=3)
    cancelled = match_factory(hours=48, status=Match.Status.CANCELLED)

    with pytest.raises(ValidationError):
        submit_postulation(user=referee, club=club, match_ids=[soon.pk], now=now)
    with pytest.raises(ValidationError):
        submit_postulation(user=referee, club=club, match_ids=[cancelled.pk], now=now)
    assert Postulation.objects.count() == 0


@pytest.mark.django_db
def test_duplicate_ids_are_not_deduplicated(club, referee, match_factory, now):
    match = match_factory(hours=48)

    with pytest.raises(PostulationSaveError):
        submit_postulation(user=referee, club=club, match_ids=[match.pk, match.pk], now=now)
    assert Postulation.objects.count() == 0
    assert PostulationMatch.objects.count() == 0


@pytest.mark.django_db
def test_update_replaces_selection_and_scalars(club, referee, match_factory, now):
    a = match_factory(hours=48)
    b = match_factory(hours=72)
    c = match_factory(hours=96)
    postulation = submit_postulation(user=referee, club=club, match_ids=[a.pk, b.pk], now=now)
    later = now + timedelta(hours=1)

    updated = update_postulation(
        postulation_id=postulation.pk,
        user=referee,
        match_ids=[c.pk],
        has_car=True,
        notes="Changed",
        now=later,
    )

    updated.refresh_from_db()
    assert _selected_ids(updated) == {c.pk}
    assert updated.has_car is True
    assert updated.notes == "Changed"
    assert updated.submitted_at == later
    assert updated.status == Postulation.Status.PENDING


@pytest.mark.django_db
def test_update_of_someone_elses_postulation_looks_missing(
    club, referee, other_referee, match_factory, now
):
    match = match_factory(hours=48)
    postulation = submit_postulation(user=referee, club=club, match_ids=[match.pk], now=now)

    with pytest.raises(PostulationNotFound) as foreign:
        update_postulation(
            postulation_id=postulation.pk, user=other_referee, match_ids=[match.pk], now=now
        )
    with pytest.raises(PostulationNotFound) as missing:
        update_postulation(postulation_id="req_missing", user=other_referee, match_ids=[match.pk], now=now)

    assert str(foreign.value) == str(missing.value)


@pytest.mark.django_db
def test_update_rejected_when_existing_selection_enters_window(club, referee, match_factory, now):
    soon = match_factory(hours=20)
    later_match = match_factory(hours=96)
    postulation = submit_postulation(user=referee, club=club, match_ids=[soon.pk], now=now)

    with pytest.raises(PostulationLocked) as excinfo:
        update_postulation(
            postulation_id=postulation.pk,
            user=referee,
            match_ids=[later_match.pk],
            now=now + timedelta(hours=10),
        )

    assert excinfo.value.reason == "window_closed"
    assert _selected_ids(postulation) == {soon.pk}


@pytest.mark.django_db
def test_editability_is_judged_on_existing_selection_not_new_one(
    club, referee, admin_user, match_factory, now
):
    assigned = match_factory(hours=48)
    fresh = match_factory(hours=96)
    postulation = submit_postulation(user=referee, club=club, match_ids=[assigned.pk], now=now)
    assign_referee(match=assigned, referee=referee, actor=admin_user, now=now)

    with pytest.raises(PostulationLocked) as excinfo:
        update_postulation(postulation_id=postulation.pk, user=referee, match_ids=[fresh.pk], now=now)

    assert excinfo.value.reason == "assigned"
    assert _selected_ids(postulation) == {assigned.pk}


@pytest.mark.django_db
def test_update_rejects_new_matches_inside_window(club, referee, match_factory, now):
    far = match_factory(hours=96)
    soon = match_factory(hours=5)
    postulation = submit_postulation(user=referee, club=club, match_ids=[far.pk], now=now)

    with pytest.raises(ValidationError):
        update_postulation(postulation_id=postulation.pk, user=referee, match_ids=[soon.pk], now=now)
    assert _selected_ids(postulation) == {far.pk}


@pytest.mark.django_db
def test_update_rolls_back_when_link_write_fails(club, referee, match_factory, now, monkeypatch):
    a = match_factory(hours=48)
    b = match_factory(hours=72)
    postulation = submit_postulation(user=referee, club=club, match_ids=[a.pk], notes="Before", now=now)

    def broken_bulk_create(*args, **kwargs):
        raise DatabaseError("disk full")

    monkeypatch.setattr(PostulationMatch.objects, "bulk_create", broken_bulk_create)

    with pytest.raises(PostulationSaveError) as excinfo:
        update_postulation(
            postulation_id=postulation.pk, user=referee, match_ids=[b.pk], notes="After", now=now
        )

    assert "disk full" not in str(excinfo.value)
    postulation.refresh_from_db()
    assert postulation.notes == "Before"
    assert _selected_ids(postulation) == {a.pk}


@pytest.mark.django_db
def test_submit_rolls_back_header_when_links_fail(club, referee, match_factory, now, monkeypatch):
    match = match_factory(hours=48)

    def broken_bulk_create(*args, **kwargs):
        raise DatabaseError("connection reset")

    monkeypatch.setattr(PostulationMatch.objects, "bulk_create", broken_bulk_create)

    with pytest.raises(PostulationSaveError):
        submit_postulation(user=referee, club=club, match_ids=[match.pk], now=now)
    assert Postulation.objects.count() == 0


@pytest.mark.django_db
def test_completed_postulations_are_not_status_checked_on_update(
    club, referee, admin_user, match_factory, now
):
    match = match_factory(hours=48)
    postulation = submit_postulation(user=referee, club=club, match_ids=[match.pk], now=now)
    complete_postulation(postulation=postulation, actor=admin_user)

    updated = update_postulation(
        postulation_id=postulation.pk, user=referee, match_ids=[match.pk], notes="again", now=now
    )

    assert updated.status == Postulation.Status.COMPLETED


@pytest.mark.django_db
def test_only_admins_complete_and_only_once(club, referee, admin_user, match_factory, now):
    match = match_factory(hours=48)
    postulation = submit_postulation(user=referee, club=club, match_ids=[match.pk], now=now)

    with pytest.raises(PermissionDenied):
        complete_postulation(postulation=postulation, actor=referee)
    complete_postulation(postulation=postulation, actor=admin_user)
    with pytest.raises(ValidationError):
        complete_postulation(postulation=postulation, actor=admin_user)


@pytest.mark.django_db
def test_deleted_matches_drop_out_of_selection(club, referee, match_factory, now):
    a = match_factory(hours=48)
    b = match_factory(hours=72)
    postulation = submit_postulation(user=referee, club=club, match_ids=[a.pk, b.pk], now=now)
    b.delete()

    data = get_availability_data(referee, now=now)

    entry = data.clubs[club.pk]
    assert [match.pk for match in entry.selected_matches] == [a.pk]
    assert entry.editable is True
    update_postulation(postulation_id=postulation.pk, user=referee, match_ids=[a.pk], now=now)


@pytest.mark.django_db
def test_assignment_freezes_postulation_end_to_end(club, referee, admin_user, match_factory, now):
    a = match_factory(hours=48)
    b = match_factory(hours=24 * 14)
    postulation = submit_postulation(user=referee, club=club, match_ids=[a.pk, b.pk], now=now)
    assert postulation.status == Postulation.Status.PENDING
    assert get_availability_data(referee, now=now).clubs[club.pk].editable is True

    assign_referee(match=a, referee=referee, actor=admin_user, now=now)

    entry = get_availability_data(referee, now=now).clubs[club.pk]
    assert entry.editable is False
    assert is_postulation_editable(entry.selected_matches, entry.assignments, now=now) is False
    with pytest.raises(PostulationLocked):
        update_postulation(postulation_id=postulation.pk, user=referee, match_ids=[b.pk], now=now)
    postulation.refresh_from_db()
    assert postulation.status == Postulation.Status.PENDING
    assert _selected_ids(postulation) == {a.pk, b.pk}
