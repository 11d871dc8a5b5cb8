import secrets

from django.conf import settings
from django.db import models
from django.db.models import Q
from django.utils import timezone


def generate_postulation_id() -> str:
    return f"req_{secrets.token_hex(6)}"


class Postulation(models.Model):
    class Status(models.TextChoices):
        PENDING = "pending", "Pending"
        COMPLETED = "completed", "Completed"

    id = models.CharField(
        primary_key=True, max_length=64, default=generate_postulation_id, editable=False
    )
    user = models.ForeignKey(
        settings.AUTH_USER_MODEL, on_delete=models.CASCADE, related_name="postulations"
    )
    club = models.ForeignKey("accounts.Club", on_delete=models.CASCADE, related_name="postulations")
    has_car = models.BooleanField(default=False)
    notes = models.TextField(blank=True, default="")
    status = models.CharField(
        max_length=20, choices=Status.choices, default=Status.PENDING, db_index=True
    )
    submitted_at = models.DateTimeField(default=timezone.now)
    matches = models.ManyToManyField(
        "matches.Match", through="PostulationMatch", related_name="postulations"
    )

    class Meta:
        ordering = ["-submitted_at"]
        constraints = [
            models.UniqueConstraint(
                fields=["user", "club"],
                condition=Q(status="pending"),
                name="uq_pending_postulation_user_club",
            ),
        ]

    def __str__(self) -> str:
        return f"{self.user} @ {self.club_id} ({self.get_status_display()})"


class PostulationMatch(models.Model):
    postulation = models.ForeignKey(
        Postulation, on_delete=models.CASCADE, related_name="match_links"
    )
    match = models.ForeignKey(
        "matches.Match", on_delete=models.CASCADE, related_name="postulation_links"
    )

    class Meta:
        constraints = [
            models.UniqueConstraint(
                fields=["postulation", "match"], name="uq_postulation_match"
            ),
        ]

    def __str__(self) -> str:
        return f"{self.postulation_id} -> {self.match_id}"
