import logging

from django.contrib.auth import get_user_model
from django.core.exceptions import PermissionDenied, ValidationError
from django.db import transaction

from apps.matches.models import MatchAssignment
from apps.postulations.models import Postulation
from .models import Club, ClubMembership, Suggestion
from .utils import admin_count, is_club_admin

logger = logging.getLogger(__name__)


def _require_admin(actor, club: Club) -> None:
    if not is_club_admin(actor, club):
        raise PermissionDenied("You do not have permission to manage this club.")


@transaction.atomic
def create_club(*, owner, name: str) -> Club:
    name = (name or "").strip()
    if len(name) < 2:
        raise ValidationError("Club name must have at least 2 characters.")
    club = Club.objects.create(name=name)
    # The founder referees too, so both roles are granted up front.
    ClubMembership.objects.bulk_create(
        [
            ClubMembership(user=owner, club=club, role=ClubMembership.Role.ADMIN),
            ClubMembership(user=owner, club=club, role=ClubMembership.Role.REFEREE),
        ]
    )
    logger.info("club %s created by user %s", club.pk, owner.pk)
    return club


@transaction.atomic
def join_club(*, user, club_id: str) -> Club:
    club_id = (club_id or "").strip()
    if not club_id:
        raise ValidationError("The club code cannot be empty.")
    club = Club.objects.filter(pk=club_id).first()
    if club is None:
        raise ValidationError("The club code is not valid.")
    _, created = ClubMembership.objects.get_or_create(
        user=user, club=club, role=ClubMembership.Role.REFEREE
    )
    if not created:
        raise ValidationError("You are already a member of this club.")
    logger.info("user %s joined club %s", user.pk, club.pk)
    return club


def promote_to_admin(*, club: Club, actor, user) -> ClubMembership:
    _require_admin(actor, club)
    if not ClubMembership.objects.filter(club=club, user=user).exists():
        raise ValidationError("Only club members can be promoted.")
    membership, _ = ClubMembership.objects.get_or_create(
        user=user, club=club, role=ClubMembership.Role.ADMIN
    )
    return membership


@transaction.atomic
def demote_admin(*, club: Club, actor, user) -> None:
    _require_admin(actor, club)
    if actor.pk == user.pk and admin_count(club) <= 1:
        raise ValidationError("You cannot give up your role while you are the last admin.")
    ClubMembership.objects.filter(user=user, club=club, role=ClubMembership.Role.ADMIN).delete()
    # Demoted admins keep refereeing.
    ClubMembership.objects.get_or_create(user=user, club=club, role=ClubMembership.Role.REFEREE)


@transaction.atomic
def remove_member(*, club: Club, actor, user) -> None:
    _require_admin(actor, club)
    if actor.pk == user.pk:
        raise ValidationError("You cannot remove yourself from the club.")
    roles = set(
        ClubMembership.objects.select_for_update()
        .filter(user=user, club=club)
        .values_list("role", flat=True)
    )
    if ClubMembership.Role.ADMIN in roles and admin_count(club) <= 1:
        raise ValidationError("The last admin of a club cannot be removed.")

    ClubMembership.objects.filter(user=user, club=club).delete()
    postulations_deleted, _ = Postulation.objects.filter(user=user, club=club).delete()
    assignments_deleted, _ = MatchAssignment.objects.filter(referee=user, club=club).delete()
    logger.info(
        "user %s removed from club %s (postulation rows=%s assignments=%s)",
        user.pk,
        club.pk,
        postulations_deleted,
        assignments_deleted,
    )


@transaction.atomic
def register_user(
    *, username: str, password: str, email: str = "", role: str, club_name: str = "", club_id: str = ""
):
    """Create an account and attach it to a club in one step.

    Admins found a new club; referees join an existing one by its code. A
    failure on the club side leaves no account behind.
    """
    if role == ClubMembership.Role.ADMIN:
        if not (club_name or "").strip():
            raise ValidationError("A club name is required to register as an admin.")
    elif role == ClubMembership.Role.REFEREE:
        if not (club_id or "").strip():
            raise ValidationError("A club code is required to register as a referee.")
    else:
        raise ValidationError(f"Unknown role: {role}.")

    user = get_user_model().objects.create_user(username=username, email=email, password=password)
    if role == ClubMembership.Role.ADMIN:
        create_club(owner=user, name=club_name)
    else:
        join_club(user=user, club_id=club_id)
    logger.info("user %s registered as %s", user.pk, role)
    return user


SUGGESTION_MIN_LENGTH = 10
SUGGESTION_MAX_LENGTH = 1000


def submit_suggestion(*, user, text: str) -> Suggestion:
    text = (text or "").strip()
    if len(text) < SUGGESTION_MIN_LENGTH:
        raise ValidationError(
            f"Suggestions must have at least {SUGGESTION_MIN_LENGTH} characters."
        )
    if len(text) > SUGGESTION_MAX_LENGTH:
        raise ValidationError(f"Suggestions cannot exceed {SUGGESTION_MAX_LENGTH} characters.")

    author = user if user is not None and user.is_authenticated else None
    suggestion = Suggestion.objects.create(
        user=author,
        user_name=author.get_username() if author else "Anonymous",
        text=text,
    )
    logger.info("suggestion %s submitted by %s", suggestion.pk, suggestion.user_name)
    return suggestion


def get_suggestions(user) -> list[Suggestion]:
    # Only staff read the suggestion box; everyone else sees nothing.
    if user is None or not user.is_authenticated or not user.is_staff:
        return []
    return list(Suggestion.objects.all())
