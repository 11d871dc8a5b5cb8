from dataclasses import dataclass, field

from .models import ClubMembership


@dataclass(frozen=True)
class Identity:
    """What the scheduling core needs to know about the signed-in user."""

    user_id: int | None
    is_admin: bool = False
    administered_club_ids: frozenset[str] = field(default_factory=frozenset)
    member_club_ids: frozenset[str] = field(default_factory=frozenset)


def get_identity(user) -> Identity:
    if not user or not user.is_authenticated:
        return Identity(user_id=None)
    administered = set()
    members = set()
    for club_id, role in ClubMembership.objects.filter(user=user).values_list("club_id", "role"):
        members.add(club_id)
        if role == ClubMembership.Role.ADMIN:
            administered.add(club_id)
    return Identity(
        user_id=user.pk,
        is_admin=bool(administered),
        administered_club_ids=frozenset(administered),
        member_club_ids=frozenset(members),
    )


def _club_id(club) -> str:
    return getattr(club, "pk", club)


def is_club_admin(user, club) -> bool:
    if not user or not user.is_authenticated:
        return False
    return ClubMembership.objects.filter(
        user=user, club_id=_club_id(club), role=ClubMembership.Role.ADMIN
    ).exists()


def is_club_member(user, club) -> bool:
    if not user or not user.is_authenticated:
        return False
    return ClubMembership.objects.filter(user=user, club_id=_club_id(club)).exists()


def admin_count(club) -> int:
    return ClubMembership.objects.filter(
        club_id=_club_id(club), role=ClubMembership.Role.ADMIN
    ).count()
