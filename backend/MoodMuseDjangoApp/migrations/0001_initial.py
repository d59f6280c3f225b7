import django.core.validators
from django.db import migrations, models

import MoodMuseDjangoApp.models


class Migration(migrations.Migration):

    initial = True

    dependencies = []

    operations = [
        migrations.CreateModel(
            name="SharedMoodboard",
            fields=[
                ("id", models.CharField(default=MoodMuseDjangoApp.models.gen_moodboard_slug, editable=False, max_length=40, primary_key=True, serialize=False)),
                ("original_mood", models.CharField(max_length=500)),
                ("poetic_caption", models.TextField()),
                ("playlist", models.JSONField(blank=True, default=list)),
                ("images", models.JSONField(blank=True, default=list)),
                ("view_count", models.PositiveIntegerField(default=0, validators=[django.core.validators.MinValueValidator(0)])),
                ("created_at", models.DateTimeField(auto_now_add=True, db_index=True)),
            ],
            options={
                "db_table": "moodboards",
                "ordering": ["-created_at"],
                "constraints": [
                    models.CheckConstraint(condition=models.Q(("original_mood", ""), _negated=True), name="moodboard_mood_not_empty"),
                ],
            },
        ),
    ]
