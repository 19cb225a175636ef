"""Shared utility functions used across all apps."""

import logging
from contextlib import contextmanager


@contextmanager
def safe_dispatch(operation_name, logger=None):
    """
    Context manager for side effects that must never raise.

    Use around file cleanup and other secondary work that runs after the
    primary operation has already succeeded.

    Usage::

        with safe_dispatch("purge slot files", logger):
            instance.file_slots.purge_all(instance)
    """
    _logger = logger or logging.getLogger("fileslots.dispatch")
    try:
        yield
    except Exception as e:
        _logger.error("Failed to %s: %s", operation_name, e)
