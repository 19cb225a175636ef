"""Celery tasks for the uploader app."""

import logging

from celery import shared_task

logger = logging.getLogger(__name__)


@shared_task(
    name="uploader.tasks.sweep_orphaned_uploads_task",
    bind=True,
    max_retries=2,
    default_retry_delay=60,
)
def sweep_orphaned_uploads_task(self):
    """Delete slot files no row references.

    Files younger than UPLOADER_ORPHAN_GRACE_HOURS are kept so uploads
    of in-flight saves survive. Rows pointing at missing files are
    logged, never modified.

    Returns:
        dict: {"deleted": int, "failed": int, "dangling": int}
    """
    from uploader.services.sweep import sweep_orphaned_files

    result = sweep_orphaned_files()
    if result["deleted"] == 0 and result["failed"] == 0:
        logger.info("No orphaned upload files to clean up.")
    return result
