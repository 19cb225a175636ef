import django.db.models.deletion
from django.conf import settings
from django.db import migrations, models


class Migration(migrations.Migration):

    initial = True

    dependencies = [
        migrations.swappable_dependency(settings.AUTH_USER_MODEL),
    ]

    operations = [
        migrations.CreateModel(
            name="Profile",
            fields=[
                (
                    "id",
                    models.BigAutoField(
                        auto_created=True,
                        primary_key=True,
                        serialize=False,
                        verbose_name="ID",
                    ),
                ),
                (
                    "created_at",
                    models.DateTimeField(auto_now_add=True, verbose_name="created at"),
                ),
                (
                    "updated_at",
                    models.DateTimeField(auto_now=True, verbose_name="updated at"),
                ),
                ("display_name", models.CharField(blank=True, max_length=150)),
                (
                    "avatar",
                    models.CharField(
                        blank=True,
                        default="",
                        help_text="PNG, JPEG, GIF, WebP or BMP image",
                        max_length=255,
                    ),
                ),
                (
                    "resume",
                    models.CharField(
                        blank=True,
                        default="",
                        help_text="Any document",
                        max_length=255,
                    ),
                ),
                (
                    "owner",
                    models.OneToOneField(
                        on_delete=django.db.models.deletion.CASCADE,
                        related_name="profile",
                        to=settings.AUTH_USER_MODEL,
                    ),
                ),
            ],
            options={
                "verbose_name": "profile",
                "verbose_name_plural": "profiles",
                "db_table": "portal_profile",
                "ordering": ["-created_at"],
            },
        ),
    ]
