"""Portal models: user profiles with uploaded avatar and resume files."""

from common.models import TimeStampedModel
from django.conf import settings
from django.db import models
from uploader.models import FileRule, FileSlotsModel, SlotNameField
from uploader.policies import RenamePolicy


class Profile(FileSlotsModel, TimeStampedModel):
    """Public profile of a user.

    ``avatar`` and ``resume`` hold the stored filenames of uploaded files.
    Uploads are slug-renamed, replaced files are removed on save, and
    both files are removed when the profile is deleted.
    """

    owner = models.OneToOneField(
        settings.AUTH_USER_MODEL,
        on_delete=models.CASCADE,
        related_name="profile",
    )
    display_name = models.CharField(max_length=150, blank=True)
    avatar = SlotNameField(help_text="PNG, JPEG, GIF, WebP or BMP image")
    resume = SlotNameField(help_text="Any document")

    upload_rules = [
        ("avatar", FileRule.IMAGE),
        ("resume", FileRule.FILE),
        ("display_name", "max_length"),
    ]
    uploader_options = {"rename_policy": RenamePolicy.SLUG}

    class Meta:
        db_table = "portal_profile"
        verbose_name = "profile"
        verbose_name_plural = "profiles"
        ordering = ["-created_at"]

    def __str__(self):
        return self.display_name or str(self.owner)
