import django.db.models.deletion
from django.db import migrations, models


class Migration(migrations.Migration):

    initial = True

    dependencies = [
        ("accounts", "0001_initial"),
    ]

    operations = [
        migrations.CreateModel(
            name="Schedule",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("start_time", models.DateTimeField()),
                ("end_time", models.DateTimeField()),
                ("location", models.CharField(max_length=200)),
                ("description", models.TextField()),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                (
                    "owner",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.CASCADE,
                        related_name="schedules",
                        to="accounts.profile",
                    ),
                ),
            ],
            options={
                "ordering": ["start_time", "id"],
                "indexes": [
                    models.Index(fields=["owner", "start_time"], name="schedule_owner_start_idx"),
                ],
            },
        ),
        migrations.CreateModel(
            name="Report",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("actual_start_time", models.DateTimeField(db_index=True)),
                ("actual_end_time", models.DateTimeField()),
                ("break_time", models.PositiveIntegerField(default=0)),
                ("actual_description", models.TextField()),
                ("reflection", models.TextField()),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                (
                    "schedule",
                    models.OneToOneField(
                        on_delete=django.db.models.deletion.CASCADE,
                        related_name="report",
                        to="scheduling.schedule",
                    ),
                ),
            ],
            options={
                "ordering": ["actual_start_time", "id"],
            },
        ),
    ]
