"""Signal receivers that drive file slots from model saves and deletes.

Connected per model by ``uploader.models.bind_file_slots`` when a
FileSlotsModel subclass is prepared. New files are written as soon as the
row is saved. Replaced and purged files are removed only once the
enclosing transaction commits, so a rolled-back row keeps its files.
"""

import logging
from functools import partial

from common.utils import safe_dispatch
from django.db import transaction

from uploader.services.slots import CommitResult

logger = logging.getLogger(__name__)


def commit_file_slots(sender, instance, raw=False, using=None, **kwargs):
    """Write pending uploads once the row has been saved."""
    if raw:
        return

    results = instance.file_slots.commit_all(
        defer_cleanup=partial(transaction.on_commit, using=using)
    )
    committed = [name for name, result in results.items() if result != CommitResult.SKIPPED]
    if not committed:
        return

    logger.info(
        "Slot uploads committed: model=%s pk=%s slots=%s",
        sender._meta.label,
        instance.pk,
        ",".join(committed),
    )


def _purge(sender, instance, pk, values):
    result = None
    with safe_dispatch("purge slot files", logger):
        result = instance.file_slots.purge_all(instance, values)

    if result is not None and not result.ok:
        logger.warning(
            "Slot files left behind after delete: model=%s pk=%s slots=%s",
            sender._meta.label,
            pk,
            ",".join(result.failed),
        )


def purge_file_slots(sender, instance, using=None, **kwargs):
    """Delete a row's stored files once its deletion is committed.

    The row is already gone, so nothing raised here may reach the caller.
    """
    values = instance.get_slot_values()
    transaction.on_commit(
        partial(_purge, sender, instance, instance.pk, values), using=using
    )
