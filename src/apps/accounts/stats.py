import datetime
from dataclasses import dataclass, field

from django.utils import timezone

from apps.matches.models import Match, MatchAssignment
from apps.postulations.models import Postulation
from .models import ClubMembership


@dataclass
class StatMatch:
    description: str
    date: datetime.date
    club_name: str


@dataclass
class UserStats:
    associations_count: int = 0
    refereed_matches_count: int = 0
    cancelled_matches_count: int = 0
    postulations_count: int = 0
    refereed_matches: list[StatMatch] = field(default_factory=list)
    cancelled_matches: list[StatMatch] = field(default_factory=list)


def get_user_stats(user, now=None) -> UserStats:
    """Summarise a referee's history.

    A match counts as refereed when it is still ``scheduled`` and its date is
    before today; assigned matches that were cancelled are listed apart.
    """
    today = timezone.localdate(now or timezone.now())
    stats = UserStats(
        associations_count=ClubMembership.objects.filter(user=user)
        .values("club_id")
        .distinct()
        .count(),
        postulations_count=Postulation.objects.filter(user=user).count(),
    )

    assignments = (
        MatchAssignment.objects.filter(referee=user)
        .select_related("match", "club")
        .order_by("-match__date")
    )
    for assignment in assignments:
        match = assignment.match
        row = StatMatch(description=match.description, date=match.date, club_name=assignment.club.name)
        if match.status == Match.Status.CANCELLED:
            stats.cancelled_matches.append(row)
        elif match.status == Match.Status.SCHEDULED and match.date < today:
            stats.refereed_matches.append(row)

    stats.refereed_matches_count = len(stats.refereed_matches)
    stats.cancelled_matches_count = len(stats.cancelled_matches)
    return stats
