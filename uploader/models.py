"""Abstract model binding file slots to a Django model's lifecycle."""

from django import forms
from django.core.exceptions import FieldDoesNotExist
from django.core.validators import FileExtensionValidator
from django.db import models
from django.db.models.signals import class_prepared, post_delete, post_save
from django.dispatch import receiver
from django.utils.functional import cached_property
from django.utils.text import capfirst

from uploader.exceptions import ConfigurationError
from uploader.policies import resolve_rename_policy
from uploader.services.slots import (
    DERIVE,
    FileRule,
    FileSlotManager,
    resolve_slot_names,
)
from uploader.signals import commit_file_slots, purge_file_slots

__all__ = ("FileRule", "FileSlotsModel", "IMAGE_EXTENSIONS", "SlotNameField")

IMAGE_EXTENSIONS = ["jpg", "jpeg", "png", "gif", "webp", "bmp"]

UPLOADER_OPTIONS = frozenset(
    {
        "slot_names",
        "storage_directory",
        "rename_policy",
        "auto_delete_on_destroy",
        "delete_previous_on_replace",
    }
)


class SlotNameField(models.CharField):
    """CharField pre-configured to hold a stored upload filename."""

    def __init__(self, *args, **kwargs):
        kwargs.setdefault("max_length", 255)
        kwargs.setdefault("blank", True)
        kwargs.setdefault("default", "")
        super().__init__(*args, **kwargs)

    def deconstruct(self):
        name, path, args, kwargs = super().deconstruct()
        path = "django.db.models.CharField"
        return name, path, args, kwargs


class FileSlotsModel(models.Model):
    """Model whose filename attributes are managed as upload slots.

    Subclasses declare which attributes are slots through ``upload_rules``,
    a list of ``(attribute_or_attributes, FileRule)`` pairs, and may
    override the manager configuration with ``uploader_options``::

        class Profile(FileSlotsModel):
            avatar = SlotNameField()

            upload_rules = [("avatar", FileRule.IMAGE)]
            uploader_options = {"rename_policy": RenamePolicy.SLUG}

    Loading a row captures the stored filenames as the baseline. Saving a
    row writes pending uploads and removes replaced files. Deleting a row
    removes its files.
    """

    upload_rules = ()
    uploader_options = {}
    file_slot_names = ()

    class Meta:
        abstract = True

    @classmethod
    def from_db(cls, db, field_names, values):
        instance = super().from_db(db, field_names, values)
        instance.file_slots.capture_baseline(instance, instance.get_slot_values())
        return instance

    @classmethod
    def build_file_slot_manager(cls, record=None):
        options = {k: v for k, v in cls.uploader_options.items() if k != "slot_names"}
        return FileSlotManager(
            slot_names=list(cls.file_slot_names),
            record=record,
            **options,
        )

    @cached_property
    def file_slots(self):
        return self.build_file_slot_manager(record=self)

    def get_slot_values(self):
        """Return the stored filename of every loaded slot attribute."""
        deferred = self.get_deferred_fields()
        return {
            name: getattr(self, name) or ""
            for name in self.file_slot_names
            if name not in deferred
        }

    @classmethod
    def get_slot_rule(cls, name):
        for attributes, kind in cls.upload_rules:
            if isinstance(attributes, str):
                attributes = [attributes]
            if name in attributes and kind == FileRule.IMAGE:
                return FileRule.IMAGE
        return FileRule.FILE

    @classmethod
    def slot_form_field(cls, name):
        """Build the upload form field for a slot."""
        model_field = cls._meta.get_field(name)
        validators = []
        if cls.get_slot_rule(name) == FileRule.IMAGE:
            validators.append(FileExtensionValidator(IMAGE_EXTENSIONS))
        return forms.FileField(
            label=capfirst(model_field.verbose_name),
            help_text=model_field.help_text,
            required=False,
            widget=forms.FileInput,
            validators=validators,
        )


@receiver(class_prepared)
def bind_file_slots(sender, **kwargs):
    """Resolve slot configuration once per concrete model and connect receivers."""
    if not issubclass(sender, FileSlotsModel) or sender._meta.abstract:
        return

    options = sender.uploader_options
    unknown = set(options) - UPLOADER_OPTIONS
    if unknown:
        raise ConfigurationError(
            f"{sender.__name__}.uploader_options has unknown keys: "
            f"{', '.join(sorted(unknown))}."
        )

    names = resolve_slot_names(options.get("slot_names", DERIVE), sender.upload_rules)
    for name in names:
        try:
            sender._meta.get_field(name)
        except FieldDoesNotExist:
            raise ConfigurationError(
                f"{sender.__name__} has no field {name!r} for a file slot."
            ) from None

    if "rename_policy" in options:
        resolve_rename_policy(options["rename_policy"])

    sender.file_slot_names = tuple(names)
    label = sender._meta.label_lower
    post_save.connect(
        commit_file_slots, sender=sender, dispatch_uid=f"uploader.commit.{label}"
    )
    post_delete.connect(
        purge_file_slots, sender=sender, dispatch_uid=f"uploader.purge.{label}"
    )
