from datetime import timedelta
from types import SimpleNamespace

from django.utils import timezone

from apps.postulations.rules import (
    ASSIGNED,
    WINDOW_CLOSED,
    is_postulation_editable,
    postulation_lock_reason,
)


def _match(pk, now, hours):
    start = timezone.localtime(now + timedelta(hours=hours))
    return SimpleNamespace(pk=pk, date=start.date(), time=start.time())


def _assignment(match_id):
    return SimpleNamespace(match_id=match_id)


def test_empty_selection_is_editable(now):
    assert is_postulation_editable([], [], now=now) is True
    assert is_postulation_editable([], [_assignment("a")], now=now) is True


def test_all_matches_outside_window_and_unassigned_is_editable(now):
    matches = [_match("a", now, 20), _match("b", now, 72)]
    assert is_postulation_editable(matches, [], now=now) is True


def test_one_match_inside_window_freezes_everything(now):
    matches = [_match("a", now, 20), _match("b", now, 2)]
    assert is_postulation_editable(matches, [], now=now) is False
    assert postulation_lock_reason(matches, [], now=now) == WINDOW_CLOSED


def test_past_match_freezes_postulation(now):
    matches = [_match("a", now, 20), _match("b", now, -5)]
    assert is_postulation_editable(matches, [], now=now) is False


def test_assignment_on_any_selected_match_freezes_regardless_of_time(now):
    matches = [_match("a", now, 100), _match("b", now, 200)]
    assert is_postulation_editable(matches, [_assignment("b")], now=now) is False
    assert postulation_lock_reason(matches, [_assignment("b")], now=now) == ASSIGNED


def test_assignment_outranks_closed_window(now):
    matches = [_match("a", now, 1)]
    assert postulation_lock_reason(matches, [_assignment("a")], now=now) == ASSIGNED


def test_assignments_on_other_matches_do_not_matter(now):
    matches = [_match("a", now, 30)]
    assert is_postulation_editable(matches, [_assignment("zzz")], now=now) is True


def test_accepts_generators(now):
    matches = (m for m in [_match("a", now, 30)])
    assert is_postulation_editable(matches, iter([]), now=now) is True
