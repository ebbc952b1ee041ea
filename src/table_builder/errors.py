"""I/O failures of the crosswalk reader and writer. Both are fatal to a run."""


class SourceReadError(OSError):
    """Raised when a source table cannot be found, read, or lacks required columns."""


class SourceWriteError(OSError):
    """Raised when the crosswalk or its issue report cannot be written."""
