"""File slot manager: naming, storing and cleaning up uploaded files.

A record owns a set of named file slots. Each slot holds the filename
stored on the record and, during a save cycle, at most one pending upload.
Callers drive a slot through four phases in order:

    capture_baseline  after the record is loaded
    prepare_ingest    before the record is validated and written
    commit_ingest     after the record is written
    purge_all         after the record is deleted

Only commit_ingest and purge_all touch the filesystem.
"""

import contextlib
import logging
import os
from dataclasses import dataclass, field
from functools import partial
from pathlib import Path

from django.conf import settings
from django.core.exceptions import SuspiciousFileOperation
from django.core.files.base import ContentFile, File
from django.core.files.storage import FileSystemStorage
from django.db import models
from django.utils.crypto import get_random_string

from uploader.exceptions import CleanupError, ConfigurationError, StorageWriteError
from uploader.policies import rename, resolve_rename_policy

logger = logging.getLogger(__name__)


class _Derive:
    def __repr__(self):
        return "DERIVE"


DERIVE = _Derive()


class FileRule(models.TextChoices):
    """Validation rule kinds that mark an attribute as a file slot."""

    FILE = "file", "File"
    IMAGE = "image", "Image"


class CommitResult(models.TextChoices):
    SKIPPED = "skipped", "Skipped"
    WRITTEN = "written", "Written"
    WRITTEN_CLEANUP_FAILED = "written_cleanup_failed", "Written, cleanup failed"


@dataclass(frozen=True)
class RawUpload:
    """Incoming upload: client base name, extension and content."""

    base_name: str
    extension: str
    content: File

    @classmethod
    def from_uploaded_file(cls, file):
        """Build from a Django UploadedFile (or any named File)."""
        base_name, extension = split_filename(file.name)
        return cls(base_name=base_name, extension=extension, content=file)

    @classmethod
    def from_bytes(cls, filename, data):
        base_name, extension = split_filename(filename)
        return cls(
            base_name=base_name,
            extension=extension,
            content=ContentFile(data, name=filename),
        )


@dataclass
class Slot:
    name: str
    previous_stored_name: str = ""
    pending_upload: RawUpload = None
    current_stored_name: str = ""


@dataclass
class PurgeResult:
    """Per-slot outcome of purge_all()."""

    enabled: bool = True
    deleted: list = field(default_factory=list)
    missing: list = field(default_factory=list)
    skipped: list = field(default_factory=list)
    failed: dict = field(default_factory=dict)

    @property
    def ok(self):
        return not self.failed


def split_filename(filename):
    """Split a client filename into (base_name, lower-cased extension)."""
    name = os.path.basename(str(filename).replace("\\", "/"))
    if "." not in name:
        return name, ""
    base_name, _, extension = name.rpartition(".")
    return base_name, extension.lower()


def join_filename(base_name, extension):
    if not extension:
        return base_name
    return f"{base_name}.{extension}"


def derive_slot_names(rules):
    """Collect attribute names tagged with a file or image rule.

    Args:
        rules: Iterable of ``(attribute_or_attributes, kind)`` pairs.
            Rules of any other kind are ignored.

    Returns:
        Ordered list of slot names, without duplicates.

    Raises:
        ConfigurationError: If a rule is not a two-item pair.
    """
    kinds = set(FileRule.values)
    names = []
    for rule in rules:
        try:
            attributes, kind = rule
        except (TypeError, ValueError):
            raise ConfigurationError(
                f"Validation rule must be an (attributes, kind) pair, got {rule!r}."
            ) from None
        if kind not in kinds:
            continue
        if isinstance(attributes, str):
            attributes = [attributes]
        for attribute in attributes:
            if attribute not in names:
                names.append(attribute)
    return names


def resolve_slot_names(slot_names=DERIVE, validation_rules=None):
    """Resolve the slot configuration to an ordered list of names.

    Raises:
        ConfigurationError: If slot_names is neither a string, a
            collection of strings nor DERIVE, or if DERIVE is given
            without validation rules.
    """
    if slot_names is DERIVE or slot_names is None:
        if validation_rules is None:
            raise ConfigurationError(
                "Slot names must be given explicitly or derived from "
                "validation rules supplied at bind time."
            )
        return derive_slot_names(validation_rules)

    if isinstance(slot_names, str):
        slot_names = [slot_names]
    elif not isinstance(slot_names, (list, tuple, set, frozenset)):
        raise ConfigurationError(
            f"Slot names must be a string or a collection, got {slot_names!r}."
        )

    names = []
    for name in slot_names:
        if not isinstance(name, str) or not name:
            raise ConfigurationError(f"Slot name must be a non-empty string, got {name!r}.")
        if name not in names:
            names.append(name)
    return names


def default_storage_directory():
    configured = getattr(settings, "UPLOADER_STORAGE_DIRECTORY", None)
    if configured:
        return Path(configured)
    return Path(settings.MEDIA_ROOT) / "uploads"


class FileSlotManager:
    """Owns the file lifecycle for the slots of one record.

    Configuration is fixed at construction. Settings provide the defaults
    for every option left as None.
    """

    def __init__(
        self,
        slot_names=DERIVE,
        storage_directory=None,
        rename_policy=None,
        auto_delete_on_destroy=None,
        delete_previous_on_replace=None,
        validation_rules=None,
        record=None,
    ):
        if storage_directory is None:
            storage_directory = default_storage_directory()
        if rename_policy is None:
            rename_policy = getattr(settings, "UPLOADER_RENAME_POLICY", "random")
        if auto_delete_on_destroy is None:
            auto_delete_on_destroy = getattr(settings, "UPLOADER_AUTO_DELETE", True)
        if delete_previous_on_replace is None:
            delete_previous_on_replace = getattr(
                settings, "UPLOADER_DELETE_PREVIOUS_ON_REPLACE", True
            )

        self.storage_directory = Path(storage_directory)
        self.rename_policy = resolve_rename_policy(rename_policy)
        self.auto_delete_on_destroy = bool(auto_delete_on_destroy)
        self.delete_previous_on_replace = bool(delete_previous_on_replace)
        self.storage = FileSystemStorage(location=str(self.storage_directory))
        self.record = record
        self.slots = {
            name: Slot(name=name)
            for name in resolve_slot_names(slot_names, validation_rules)
        }

    def __repr__(self):
        return (
            f"<FileSlotManager slots={list(self.slots)} "
            f"storage_directory={str(self.storage_directory)!r}>"
        )

    def get_slot(self, name):
        try:
            return self.slots[name]
        except KeyError:
            raise ConfigurationError(f"Unknown file slot {name!r}.") from None

    def current_values(self):
        """Return the current stored filename of every slot."""
        return {name: slot.current_stored_name for name, slot in self.slots.items()}

    def capture_baseline(self, record, current_values):
        """Record the filenames read from durable storage as the baseline.

        Args:
            record: The owning record, kept as rename context.
            current_values: Mapping of slot name to stored filename.
                Slots missing from the mapping keep their state.
        """
        self.record = record
        for name, value in current_values.items():
            if name not in self.slots:
                continue
            slot = self.slots[name]
            slot.previous_stored_name = value or ""
            slot.current_stored_name = value or ""
            slot.pending_upload = None

    def prepare_ingest(self, slot_name, incoming=None, record=None):
        """Compute the filename for a slot before the record is written.

        With an incoming upload the rename policy produces the new name
        and the upload is attached as pending. Without one the baseline
        filename is restored. No filesystem access happens here.

        Returns:
            The slot's current stored filename.

        Raises:
            ConfigurationError: If a custom rename function faults.
        """
        slot = self.get_slot(slot_name)
        if record is None:
            record = self.record

        if incoming is None:
            slot.current_stored_name = slot.previous_stored_name
            slot.pending_upload = None
            return slot.current_stored_name

        new_base_name = rename(self.rename_policy, incoming.base_name, record)
        slot.current_stored_name = join_filename(new_base_name, incoming.extension)
        slot.pending_upload = incoming
        logger.debug(
            "Upload prepared: slot=%s original=%s name=%s",
            slot_name,
            join_filename(incoming.base_name, incoming.extension),
            slot.current_stored_name,
        )
        return slot.current_stored_name

    def prepare_all(self, incoming_by_slot, record=None):
        """Run prepare_ingest() for every slot.

        Args:
            incoming_by_slot: Mapping of slot name to RawUpload. Slots
                absent from the mapping restore their baseline.

        Returns:
            dict: slot name to current stored filename.
        """
        return {
            name: self.prepare_ingest(name, incoming_by_slot.get(name), record=record)
            for name in self.slots
        }

    def ensure_storage_directory(self):
        os.makedirs(self.storage.location, exist_ok=True)

    def commit_ingest(self, slot_name, defer_cleanup=None):
        """Write a slot's pending upload and remove the file it replaces.

        Args:
            slot_name: The slot to commit.
            defer_cleanup: Optional callable taking a zero-argument
                function. When given, removal of the replaced file is
                handed to it instead of running immediately, e.g.
                ``transaction.on_commit`` so a rolled-back row keeps its
                file. A deferred removal is never reported as
                WRITTEN_CLEANUP_FAILED; its failure is only logged.

        Returns:
            A CommitResult.

        Raises:
            StorageWriteError: If the file could not be written. The
                previous file is left untouched and the upload stays
                pending.
        """
        slot = self.get_slot(slot_name)
        upload = slot.pending_upload
        if upload is None:
            return CommitResult.SKIPPED

        name = slot.current_stored_name
        self._write(slot_name, name, upload.content)
        logger.info(
            "Upload file written: slot=%s name=%s directory=%s",
            slot_name,
            name,
            self.storage.location,
        )

        result = CommitResult.WRITTEN
        previous = slot.previous_stored_name
        if self.delete_previous_on_replace and previous and previous != name:
            if defer_cleanup is not None:
                defer_cleanup(partial(self._delete_replaced, slot_name, previous))
            elif self._delete(slot_name, previous) is not None:
                result = CommitResult.WRITTEN_CLEANUP_FAILED

        slot.pending_upload = None
        slot.previous_stored_name = name
        return result

    def commit_all(self, defer_cleanup=None):
        """Run commit_ingest() for every slot, in slot order."""
        return {
            name: self.commit_ingest(name, defer_cleanup=defer_cleanup)
            for name in self.slots
        }

    def purge_all(self, record=None, current_values=None):
        """Delete the stored file of every slot.

        Each slot is attempted independently; a missing file is not an
        error and a failed deletion does not stop the others.

        Args:
            record: The destroyed record, used for logging only.
            current_values: Optional mapping of slot name to stored
                filename. Defaults to the slots' current names.

        Returns:
            A PurgeResult.
        """
        if not self.auto_delete_on_destroy:
            return PurgeResult(enabled=False)

        record = record if record is not None else self.record
        values = self.current_values()
        if current_values is not None:
            values.update(
                (k, v or "") for k, v in current_values.items() if k in self.slots
            )

        result = PurgeResult()
        for slot_name, name in values.items():
            if not name:
                result.skipped.append(slot_name)
                continue
            if not self._exists(name):
                result.missing.append(slot_name)
                continue
            error = self._delete(slot_name, name)
            if error is None:
                result.deleted.append(slot_name)
            else:
                result.failed[slot_name] = error

        logger.info(
            "Slot files purged: record=%s deleted=%d missing=%d failed=%d",
            getattr(record, "pk", None),
            len(result.deleted),
            len(result.missing),
            len(result.failed),
        )
        return result

    def _exists(self, name):
        try:
            return os.path.isfile(self.storage.path(name))
        except SuspiciousFileOperation:
            return False

    def _write(self, slot_name, name, content):
        """Write content under a temporary name, then rename it onto name.

        The rename replaces an existing file atomically, so a failed write
        never removes the file currently stored under name.
        """
        temp_name = None
        try:
            target = self.storage.path(name)
            self.ensure_storage_directory()
            temp_name = self.storage.save(f".{get_random_string(12)}.part", content)
            os.replace(self.storage.path(temp_name), target)
        except (OSError, SuspiciousFileOperation) as exc:
            if temp_name is not None:
                with contextlib.suppress(OSError):
                    self.storage.delete(temp_name)
            logger.warning(
                "Upload file write failed: slot=%s name=%s error=%s",
                slot_name,
                name,
                exc,
            )
            raise StorageWriteError(
                f"Could not write {name!r} to {self.storage.location}: {exc}",
                slot=slot_name,
                name=name,
            ) from exc

    def _delete_replaced(self, slot_name, name):
        # A later commit in the same transaction may have stored this name again.
        if self.slots[slot_name].previous_stored_name == name:
            return None
        return self._delete(slot_name, name)

    def _delete(self, slot_name, name):
        """Delete a stored file. Returns a CleanupError instead of raising."""
        try:
            if self._exists(name):
                self.storage.delete(name)
        except (OSError, SuspiciousFileOperation) as exc:
            error = CleanupError(
                f"Could not delete {name!r} from {self.storage.location}: {exc}",
                slot=slot_name,
                name=name,
            )
            logger.warning(
                "Stale file cleanup failed: slot=%s name=%s error=%s",
                slot_name,
                name,
                exc,
            )
            return error

        logger.info("Stale file deleted: slot=%s name=%s", slot_name, name)
        return None
