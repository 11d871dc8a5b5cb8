import secrets

from django.conf import settings
from django.db import models
from django.utils import timezone


def generate_club_id() -> str:
    return f"club_{secrets.token_hex(6)}"


class Club(models.Model):
    # The id doubles as the join code referees type in.
    id = models.CharField(primary_key=True, max_length=64, default=generate_club_id, editable=False)
    name = models.CharField(max_length=200)
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        ordering = ["name"]

    def __str__(self) -> str:
        return self.name


class ClubMembership(models.Model):
    class Role(models.TextChoices):
        ADMIN = "admin", "Admin"
        REFEREE = "referee", "Referee"

    user = models.ForeignKey(
        settings.AUTH_USER_MODEL, on_delete=models.CASCADE, related_name="club_memberships"
    )
    club = models.ForeignKey(Club, on_delete=models.CASCADE, related_name="memberships")
    role = models.CharField(max_length=20, choices=Role.choices, default=Role.REFEREE, db_index=True)
    joined_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        constraints = [
            models.UniqueConstraint(
                fields=["user", "club", "role"], name="uq_membership_user_club_role"
            ),
        ]

    def __str__(self) -> str:
        return f"{self.user} @ {self.club} ({self.get_role_display()})"


def generate_suggestion_id() -> str:
    return f"sug_{secrets.token_hex(6)}"


class Suggestion(models.Model):
    id = models.CharField(
        primary_key=True, max_length=64, default=generate_suggestion_id, editable=False
    )
    user = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="suggestions",
    )
    # Kept apart from ``user`` so anonymous and deleted authors still show a name.
    user_name = models.CharField(max_length=150)
    text = models.TextField()
    submitted_at = models.DateTimeField(default=timezone.now)

    class Meta:
        ordering = ["-submitted_at"]

    def __str__(self) -> str:
        return f"{self.user_name}: {self.text[:40]}"
