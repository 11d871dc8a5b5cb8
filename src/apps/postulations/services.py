import logging
from dataclasses import dataclass, field

from django.conf import settings
from django.core.exceptions import PermissionDenied, ValidationError
from django.db import DatabaseError, IntegrityError, transaction
from django.utils import timezone

from apps.accounts.models import Club
from apps.accounts.utils import is_club_admin, is_club_member
from apps.matches.editability import is_editable
from apps.matches.models import Match, MatchAssignment
from .exceptions import (
    DuplicatePendingPostulation,
    PostulationLocked,
    PostulationNotFound,
    PostulationSaveError,
)
from .models import Postulation, PostulationMatch
from .rules import postulation_lock_reason

logger = logging.getLogger(__name__)


def _clean_payload(match_ids, notes) -> tuple[list[str], str]:
    match_ids = list(match_ids or [])
    if not match_ids:
        raise ValidationError("Select at least one match.", code="empty_selection")
    notes = notes or ""
    limit = settings.REFDESK_NOTES_MAX_LENGTH
    if len(notes) > limit:
        raise ValidationError(f"Notes cannot exceed {limit} characters.", code="notes_too_long")
    return match_ids, notes


def _load_selection(club_id: str, match_ids: list[str]) -> list[Match]:
    matches = list(Match.objects.filter(pk__in=match_ids))
    if len(matches) != len(set(match_ids)):
        raise ValidationError("One or more of the selected matches do not exist.", code="unknown_match")
    if any(match.club_id != club_id for match in matches):
        raise ValidationError(
            "Selected matches must belong to the club you are applying to.", code="foreign_match"
        )
    return matches


def _require_open_window(matches: list[Match], now) -> None:
    if not all(is_editable(match, now=now) for match in matches):
        raise ValidationError(
            "The deadline for one or more of the selected matches has passed "
            f"(less than {settings.REFDESK_EDIT_WINDOW_HOURS} hours left).",
            code="window_closed",
        )


def _pending_exists(user, club_id: str) -> bool:
    return Postulation.objects.filter(
        user=user, club_id=club_id, status=Postulation.Status.PENDING
    ).exists()


def get_pending_postulation(user, club) -> Postulation | None:
    return (
        Postulation.objects.filter(user=user, club=club, status=Postulation.Status.PENDING)
        .prefetch_related("matches")
        .first()
    )


def submit_postulation(
    *, user, club: Club, match_ids, has_car: bool = False, notes: str = "", now=None
) -> Postulation:
    match_ids, notes = _clean_payload(match_ids, notes)
    now = now or timezone.now()

    if not is_club_member(user, club):
        raise PermissionDenied("You are not a member of this club.")
    # Friendly pre-check; the partial unique constraint catches the race.
    if _pending_exists(user, club.pk):
        raise DuplicatePendingPostulation()

    matches = _load_selection(club.pk, match_ids)
    _require_open_window(matches, now)
    if any(match.status != Match.Status.SCHEDULED for match in matches):
        raise ValidationError(
            "You can only apply to matches that are scheduled.", code="not_scheduled"
        )

    try:
        with transaction.atomic():
            postulation = Postulation.objects.create(
                user=user,
                club=club,
                has_car=bool(has_car),
                notes=notes,
                status=Postulation.Status.PENDING,
                submitted_at=now,
            )
            PostulationMatch.objects.bulk_create(
                [PostulationMatch(postulation=postulation, match_id=match_id) for match_id in match_ids]
            )
    except IntegrityError as exc:
        if _pending_exists(user, club.pk):
            raise DuplicatePendingPostulation() from exc
        logger.exception("submit_postulation failed for user %s club %s", user.pk, club.pk)
        raise PostulationSaveError() from exc
    except DatabaseError as exc:
        logger.exception("submit_postulation failed for user %s club %s", user.pk, club.pk)
        raise PostulationSaveError() from exc

    logger.info(
        "postulation %s submitted by user %s for %s matches", postulation.pk, user.pk, len(match_ids)
    )
    return postulation


def update_postulation(
    *, postulation_id: str, user, match_ids, has_car: bool = False, notes: str = "", now=None
) -> Postulation:
    match_ids, notes = _clean_payload(match_ids, notes)
    now = now or timezone.now()

    postulation = Postulation.objects.filter(pk=postulation_id, user=user).first()
    if postulation is None:
        raise PostulationNotFound()

    # Editability is judged on what is currently selected, not on the new selection.
    current = Match.objects.filter(postulation_links__postulation=postulation)
    assignments = MatchAssignment.objects.filter(club_id=postulation.club_id, referee=user)
    reason = postulation_lock_reason(current, assignments, now=now)
    if reason is not None:
        raise PostulationLocked(reason, hours=settings.REFDESK_EDIT_WINDOW_HOURS)

    matches = _load_selection(postulation.club_id, match_ids)
    _require_open_window(matches, now)

    try:
        with transaction.atomic():
            locked = Postulation.objects.select_for_update().get(pk=postulation.pk)
            locked.has_car = bool(has_car)
            locked.notes = notes
            locked.submitted_at = now
            locked.save(update_fields=["has_car", "notes", "submitted_at"])
            PostulationMatch.objects.filter(postulation=locked).delete()
            PostulationMatch.objects.bulk_create(
                [PostulationMatch(postulation=locked, match_id=match_id) for match_id in match_ids]
            )
    except DatabaseError as exc:
        logger.exception("update_postulation failed for postulation %s", postulation.pk)
        raise PostulationSaveError("The postulation could not be updated. Please try again.") from exc

    logger.info("postulation %s updated by user %s", locked.pk, user.pk)
    return locked


@transaction.atomic
def complete_postulation(*, postulation: Postulation, actor) -> Postulation:
    if not is_club_admin(actor, postulation.club_id):
        raise PermissionDenied("You do not have permission to manage this club.")
    postulation = Postulation.objects.select_for_update().get(pk=postulation.pk)
    if postulation.status != Postulation.Status.PENDING:
        raise ValidationError("Only pending postulations can be completed.")
    postulation.status = Postulation.Status.COMPLETED
    postulation.save(update_fields=["status"])
    logger.info("postulation %s completed by %s", postulation.pk, actor.pk)
    return postulation


def postulations_with_matches(club: Club) -> list[Postulation]:
    return list(
        Postulation.objects.filter(club=club)
        .select_related("user")
        .prefetch_related("matches")
    )


@dataclass
class ClubAvailability:
    club: Club
    matches: list[Match] = field(default_factory=list)
    assignments: list[MatchAssignment] = field(default_factory=list)
    postulation: Postulation | None = None
    selected_matches: list[Match] = field(default_factory=list)
    editable: bool = True

    @property
    def assigned_match_ids(self) -> set[str]:
        return {assignment.match_id for assignment in self.assignments}


@dataclass
class AvailabilityData:
    active_club_id: str | None = None
    clubs: dict[str, ClubAvailability] = field(default_factory=dict)


def get_availability_data(user, now=None) -> AvailabilityData:
    """Everything the availability page shows, for every club the user belongs to."""
    now = now or timezone.now()
    clubs = list(Club.objects.filter(memberships__user=user).distinct().order_by("name"))
    data = AvailabilityData(active_club_id=clubs[0].pk if clubs else None)

    for club in clubs:
        entry = ClubAvailability(
            club=club,
            matches=list(Match.objects.filter(club=club)),
            assignments=list(MatchAssignment.objects.filter(club=club, referee=user)),
            postulation=get_pending_postulation(user, club),
        )
        if entry.postulation is not None:
            entry.selected_matches = list(entry.postulation.matches.all())
        entry.editable = (
            postulation_lock_reason(entry.selected_matches, entry.assignments, now=now) is None
        )
        data.clubs[club.pk] = entry
    return data
