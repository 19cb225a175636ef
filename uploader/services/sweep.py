"""Orphan sweep for file slot storage directories.

Files end up unreferenced when a save is rolled back after its upload was
written, or when a replaced file could not be deleted. Rows end up
referencing missing files when a commit fails after the row was written.
The sweep deletes the former and reports the latter.
"""

import logging
from datetime import timedelta
from pathlib import Path

from django.apps import apps
from django.conf import settings
from django.core.files.storage import FileSystemStorage
from django.utils import timezone

logger = logging.getLogger(__name__)


def slot_models():
    """Return every installed concrete model with file slots."""
    from uploader.models import FileSlotsModel

    return [
        model
        for model in apps.get_models()
        if issubclass(model, FileSlotsModel)
        and model.file_slot_names
        and not model._meta.proxy
    ]


def _storage_groups():
    """Group slot models by the storage directory they write to."""
    groups = {}
    for model in slot_models():
        storage = model.build_file_slot_manager().storage
        group = groups.setdefault(storage.location, {"storage": storage, "models": []})
        group["models"].append(model)
    return groups


def _stored_files(storage):
    try:
        _dirs, files = storage.listdir("")
    except FileNotFoundError:
        return []
    return files


def _is_shared_directory(location):
    """True if location is MEDIA_ROOT or one of its parents.

    Slot storage directories are expected to hold slot files only; files
    in a shared media directory are never treated as orphans.
    """
    if not settings.MEDIA_ROOT:
        return False
    media_root = Path(settings.MEDIA_ROOT).resolve()
    directory = Path(location).resolve()
    return directory == media_root or directory in media_root.parents


def _referenced_names(models):
    names = set()
    for model in models:
        for row in model._default_manager.values_list(*model.file_slot_names):
            names.update(value for value in row if value)
    return names


def find_orphaned_files(grace_hours=None):
    """List stored files that no row references.

    Files modified within the grace period are left out so that uploads
    written by an in-flight save are not mistaken for orphans.

    Args:
        grace_hours: Minimum file age in hours. Defaults to
            ``settings.UPLOADER_ORPHAN_GRACE_HOURS`` (1).

    Returns:
        list of {"directory": str, "name": str} dicts.
    """
    if grace_hours is None:
        grace_hours = getattr(settings, "UPLOADER_ORPHAN_GRACE_HOURS", 1)
    cutoff = timezone.now() - timedelta(hours=grace_hours)

    orphans = []
    for location, group in _storage_groups().items():
        if _is_shared_directory(location):
            logger.warning(
                "Orphan sweep skipped shared directory: directory=%s",
                location,
            )
            continue
        storage = group["storage"]
        referenced = _referenced_names(group["models"])
        for name in sorted(_stored_files(storage)):
            if name in referenced:
                continue
            if storage.get_modified_time(name) > cutoff:
                continue
            orphans.append({"directory": location, "name": name})
    return orphans


def find_dangling_references():
    """List rows whose slot value names a file missing from storage.

    Returns:
        list of {"model": str, "pk": str, "slot": str, "name": str} dicts.
    """
    dangling = []
    for group in _storage_groups().values():
        stored = set(_stored_files(group["storage"]))
        for model in group["models"]:
            rows = model._default_manager.values_list("pk", *model.file_slot_names)
            for pk, *values in rows:
                for slot, name in zip(model.file_slot_names, values):
                    if name and name not in stored:
                        dangling.append(
                            {
                                "model": model._meta.label,
                                "pk": str(pk),
                                "slot": slot,
                                "name": name,
                            }
                        )
    return dangling


def sweep_orphaned_files(grace_hours=None, dry_run=False):
    """Delete orphaned files and report dangling references.

    Args:
        grace_hours: See find_orphaned_files().
        dry_run: If True, list orphans without deleting them.

    Returns:
        dict: {"deleted": int, "failed": int, "dangling": int}, plus
        "orphans" (list) when dry_run is True.
    """
    orphans = find_orphaned_files(grace_hours=grace_hours)
    dangling = find_dangling_references()
    for ref in dangling:
        logger.warning(
            "Dangling slot reference: model=%s pk=%s slot=%s name=%s",
            ref["model"],
            ref["pk"],
            ref["slot"],
            ref["name"],
        )

    if dry_run:
        return {
            "deleted": 0,
            "failed": 0,
            "dangling": len(dangling),
            "orphans": orphans,
        }

    deleted = 0
    failed = 0
    for orphan in orphans:
        storage = FileSystemStorage(location=orphan["directory"])
        try:
            storage.delete(orphan["name"])
        except OSError as exc:
            failed += 1
            logger.warning(
                "Orphaned file delete failed: directory=%s name=%s error=%s",
                orphan["directory"],
                orphan["name"],
                exc,
            )
            continue
        deleted += 1

    logger.info(
        "Orphan sweep finished: %d deleted, %d failed, %d dangling references.",
        deleted,
        failed,
        len(dangling),
    )
    return {"deleted": deleted, "failed": failed, "dangling": len(dangling)}
