import logging
from dataclasses import dataclass, field

from django.core.exceptions import PermissionDenied, ValidationError
from django.db import DatabaseError, transaction
from django.utils import timezone

from apps.accounts.models import Club, ClubMembership
from apps.accounts.utils import is_club_admin, is_club_member
from .editability import to_date
from .exceptions import AssignmentConflict, MatchSaveError
from .models import Match, MatchAssignment

logger = logging.getLogger(__name__)

MATCH_FIELDS = ("description", "date", "time", "location", "status")


def _require_admin(actor, club) -> None:
    if not is_club_admin(actor, club):
        raise PermissionDenied("You do not have permission to manage this club.")


def find_conflicting_assignment(match: Match, referee) -> MatchAssignment | None:
    """Another assignment of ``referee`` in the match's club at the same date and time.

    Only exact equality of the stored date and time counts; durations and
    overlapping intervals are deliberately ignored.
    """
    return (
        MatchAssignment.objects.select_related("match")
        .filter(
            club_id=match.club_id,
            referee=referee,
            match__date=match.date,
            match__time=match.time,
        )
        .exclude(match_id=match.pk)
        .first()
    )


def assign_referee(*, match: Match, referee, actor, now=None) -> MatchAssignment:
    _require_admin(actor, match.club_id)
    if not is_club_member(referee, match.club_id):
        raise ValidationError("Only club members can be assigned to its matches.")

    conflicting = find_conflicting_assignment(match, referee)
    if conflicting is not None:
        raise AssignmentConflict(conflicting)

    try:
        # One assignee per match: reassigning replaces the holder.
        with transaction.atomic():
            assignment, created = MatchAssignment.objects.update_or_create(
                match=match,
                defaults={
                    "club_id": match.club_id,
                    "referee": referee,
                    "assigned_at": now or timezone.now(),
                },
            )
    except DatabaseError as exc:
        logger.exception("assign_referee failed for match %s referee %s", match.pk, referee.pk)
        raise MatchSaveError("The assignment could not be saved. Please try again.") from exc
    logger.info(
        "match %s %s to referee %s by %s",
        match.pk,
        "assigned" if created else "reassigned",
        referee.pk,
        actor.pk,
    )
    return assignment


def unassign_referee(*, match: Match, actor) -> bool:
    """Drop the match's assignment. Returns False when there was none."""
    _require_admin(actor, match.club_id)
    deleted, _ = MatchAssignment.objects.filter(club_id=match.club_id, match_id=match.pk).delete()
    if deleted:
        logger.info("match %s unassigned by %s", match.pk, actor.pk)
    return bool(deleted)


def _clean_match_payload(payload: dict) -> dict:
    missing = [name for name in MATCH_FIELDS if name != "status" and not payload.get(name)]
    if missing:
        raise ValidationError(f"Match is missing required fields: {', '.join(missing)}.")
    status = payload.get("status") or Match.Status.SCHEDULED
    if status not in Match.Status.values:
        raise ValidationError(f"Unknown match status: {status}.")
    values = {name: payload[name] for name in MATCH_FIELDS if name != "status"}
    try:
        values["date"] = to_date(values["date"])
    except ValueError as exc:
        raise ValidationError(f"Invalid match date: {values['date']}.") from exc
    values["status"] = status
    return values


@transaction.atomic
def save_club_matches(*, club: Club, matches: list[dict], actor) -> list[Match]:
    """Make the club's match list equal to ``matches``.

    Entries carrying a known ``id`` are updated, the rest are created, and
    matches missing from the list are deleted together with their assignments.
    """
    _require_admin(actor, club)

    existing = {
        match.pk: match for match in Match.objects.select_for_update().filter(club=club)
    }
    incoming_ids = {payload.get("id") for payload in matches if payload.get("id")}
    stale_ids = [match_id for match_id in existing if match_id not in incoming_ids]
    if stale_ids:
        MatchAssignment.objects.filter(match_id__in=stale_ids).delete()
        Match.objects.filter(pk__in=stale_ids).delete()

    saved = []
    for payload in matches:
        values = _clean_match_payload(payload)
        match = existing.get(payload.get("id"))
        if match is None:
            if payload.get("id"):
                if Match.objects.filter(pk=payload["id"]).exists():
                    raise ValidationError("Match id already belongs to another club.")
                values["id"] = payload["id"]
            match = Match(club=club, **values)
        else:
            for name, value in values.items():
                setattr(match, name, value)
        match.full_clean(exclude=["club"])
        match.save()
        saved.append(match)

    logger.info(
        "club %s matches saved: kept/created=%s deleted=%s", club.pk, len(saved), len(stale_ids)
    )
    return saved


@dataclass
class ScheduledMatch:
    match: Match
    assignment: MatchAssignment | None


@dataclass
class ClubMember:
    user: object
    is_admin: bool = False


@dataclass
class ClubSchedule:
    club: Club
    matches: list[ScheduledMatch] = field(default_factory=list)
    postulations: list = field(default_factory=list)
    members: list[ClubMember] = field(default_factory=list)


def get_club_schedule(club: Club) -> ClubSchedule:
    from apps.postulations.services import postulations_with_matches

    matches = Match.objects.filter(club=club).select_related("assignment__referee")
    schedule = ClubSchedule(club=club)
    for match in matches:
        schedule.matches.append(
            ScheduledMatch(match=match, assignment=getattr(match, "assignment", None))
        )
    schedule.postulations = postulations_with_matches(club)

    members = {}
    memberships = ClubMembership.objects.filter(club=club).select_related("user").order_by(
        "user__username"
    )
    for membership in memberships:
        member = members.setdefault(membership.user_id, ClubMember(user=membership.user))
        member.is_admin = member.is_admin or membership.role == ClubMembership.Role.ADMIN
    schedule.members = list(members.values())
    return schedule
