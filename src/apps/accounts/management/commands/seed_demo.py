from datetime import datetime, time, timedelta

from django.contrib.auth import get_user_model
from django.core.management.base import BaseCommand
from django.db import transaction
from django.utils import timezone

from apps.accounts.models import Club, ClubMembership
from apps.matches.models import Match


class Command(BaseCommand):
    help = "Seed a demo club with one admin, two referees and a week of matches"

    def add_arguments(self, parser):
        parser.add_argument("--club-id", default="club_demo")
        parser.add_argument("--days", type=int, default=7)

    @transaction.atomic
    def handle(self, *args, **options):
        user_model = get_user_model()
        club, _ = Club.objects.get_or_create(pk=options["club_id"], defaults={"name": "Demo League"})

        users = [
            ("admin1", ClubMembership.Role.ADMIN),
            ("referee1", ClubMembership.Role.REFEREE),
            ("referee2", ClubMembership.Role.REFEREE),
        ]
        for username, role in users:
            user, created = user_model.objects.get_or_create(username=username)
            if created:
                user.set_password("password123")
                user.save()
            ClubMembership.objects.get_or_create(user=user, club=club, role=role)
            if role == ClubMembership.Role.ADMIN:
                ClubMembership.objects.get_or_create(
                    user=user, club=club, role=ClubMembership.Role.REFEREE
                )

        today = timezone.localdate()
        created_matches = 0
        for offset in range(1, options["days"] + 1):
            day = today + timedelta(days=offset)
            for kickoff in (time(10, 0), time(15, 0)):
                _, created = Match.objects.get_or_create(
                    pk=f"demo_{day:%Y%m%d}_{kickoff:%H%M}",
                    defaults={
                        "club": club,
                        "description": f"Demo match {datetime.combine(day, kickoff):%a %H:%M}",
                        "date": day,
                        "time": kickoff,
                        "location": "Main field",
                    },
                )
                created_matches += int(created)

        self.stdout.write(
            self.style.SUCCESS(
                f"Demo club {club.pk} ready with {len(users)} members and {created_matches} new matches."
            )
        )
