import django.db.models.deletion
import django.utils.timezone
from django.conf import settings
from django.db import migrations, models

import apps.postulations.models


class Migration(migrations.Migration):
    initial = True

    dependencies = [
        ("accounts", "0001_initial"),
        ("matches", "0001_initial"),
        migrations.swappable_dependency(settings.AUTH_USER_MODEL),
    ]

    operations = [
        migrations.CreateModel(
            name="Postulation",
            fields=[
                ("id", models.CharField(default=apps.postulations.models.generate_postulation_id, editable=False, max_length=64, primary_key=True, serialize=False)),
                ("has_car", models.BooleanField(default=False)),
                ("notes", models.TextField(blank=True, default="")),
                ("status", models.CharField(choices=[("pending", "Pending"), ("completed", "Completed")], db_index=True, default="pending", max_length=20)),
                ("submitted_at", models.DateTimeField(default=django.utils.timezone.now)),
                (
                    "club",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.CASCADE,
                        related_name="postulations",
                        to="accounts.club",
                    ),
                ),
                (
                    "user",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.CASCADE,
                        related_name="postulations",
                        to=settings.AUTH_USER_MODEL,
                    ),
                ),
            ],
            options={
                "ordering": ["-submitted_at"],
            },
        ),
        migrations.CreateModel(
            name="PostulationMatch",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                (
                    "match",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.CASCADE,
                        related_name="postulation_links",
                        to="matches.match",
                    ),
                ),
                (
                    "postulation",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.CASCADE,
                        related_name="match_links",
                        to="postulations.postulation",
                    ),
                ),
            ],
        ),
        migrations.AddField(
            model_name="postulation",
            name="matches",
            field=models.ManyToManyField(related_name="postulations", through="postulations.PostulationMatch", to="matches.match"),
        ),
        migrations.AddConstraint(
            model_name="postulation",
            constraint=models.UniqueConstraint(
                condition=models.Q(("status", "pending")),
                fields=("user", "club"),
                name="uq_pending_postulation_user_club",
            ),
        ),
        migrations.AddConstraint(
            model_name="postulationmatch",
            constraint=models.UniqueConstraint(
                fields=("postulation", "match"), name="uq_postulation_match"
            ),
        ),
    ]
