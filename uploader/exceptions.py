"""Exceptions raised by the file slot uploader."""


class UploaderError(Exception):
    """Base class for uploader errors."""


class ConfigurationError(UploaderError):
    """Invalid uploader configuration or a faulting custom rename function."""


class StorageWriteError(UploaderError):
    """Writing an uploaded file to storage failed.

    The record's filename attribute may already hold ``name`` even though
    no file exists under it yet. The caller decides whether to roll back.
    """

    def __init__(self, message, slot=None, name=None):
        super().__init__(message)
        self.slot = slot
        self.name = name


class CleanupError(UploaderError):
    """A stale file could not be deleted.

    Never raised out of a slot operation. Instances are logged and
    attached to operation results instead.
    """

    def __init__(self, message, slot=None, name=None):
        super().__init__(message)
        self.slot = slot
        self.name = name
