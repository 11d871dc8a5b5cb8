import secrets

from django.conf import settings
from django.db import models
from django.utils import timezone


def generate_match_id() -> str:
    return f"match_{secrets.token_hex(6)}"


class Match(models.Model):
    class Status(models.TextChoices):
        SCHEDULED = "scheduled", "Scheduled"
        CANCELLED = "cancelled", "Cancelled"
        POSTPONED = "postponed", "Postponed"

    id = models.CharField(primary_key=True, max_length=64, default=generate_match_id)
    club = models.ForeignKey("accounts.Club", on_delete=models.CASCADE, related_name="matches")
    description = models.CharField(max_length=255)
    date = models.DateField(db_index=True)
    time = models.TimeField()
    location = models.CharField(max_length=255)
    status = models.CharField(
        max_length=20, choices=Status.choices, default=Status.SCHEDULED, db_index=True
    )

    class Meta:
        ordering = ["date", "time"]

    def __str__(self) -> str:
        return f"{self.description} ({self.date} {self.time:%H:%M})"


class MatchAssignment(models.Model):
    club = models.ForeignKey(
        "accounts.Club", on_delete=models.CASCADE, related_name="match_assignments"
    )
    match = models.OneToOneField(Match, on_delete=models.CASCADE, related_name="assignment")
    referee = models.ForeignKey(
        settings.AUTH_USER_MODEL, on_delete=models.CASCADE, related_name="match_assignments"
    )
    assigned_at = models.DateTimeField(default=timezone.now)

    class Meta:
        indexes = [models.Index(fields=["club", "referee"], name="ix_assignment_club_referee")]

    def __str__(self) -> str:
        return f"{self.referee} -> {self.match}"
