from django.utils import timezone

from apps.matches.editability import is_editable

ASSIGNED = "assigned"
WINDOW_CLOSED = "window_closed"


def postulation_lock_reason(matches, assignments, now=None) -> str | None:
    """Why a postulation over ``matches`` is frozen, or ``None`` when it is not.

    ``assignments`` are the user's assignments in the postulation's club. A
    confirmed assignment on any selected match wins over the time window, and
    a single match inside the window freezes the whole selection.
    """
    matches = list(matches)
    if not matches:
        return None

    assigned_ids = {assignment.match_id for assignment in assignments}
    if any(match.pk in assigned_ids for match in matches):
        return ASSIGNED

    now = now or timezone.now()
    if not all(is_editable(match, now=now) for match in matches):
        return WINDOW_CLOSED
    return None


def is_postulation_editable(matches, assignments, now=None) -> bool:
    return postulation_lock_reason(matches, assignments, now=now) is None
