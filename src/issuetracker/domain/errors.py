"""Error kinds raised by the tracker core"""


class TrackerError(Exception):
    """Base class for every error raised by the tracker core"""


class ValidationError(TrackerError, ValueError):
    """Invalid input or a broken entity invariant"""


class NotFoundError(ValidationError):
    """The requested row does not exist"""

    def __init__(self, kind: str, key):
        self.kind = kind
        self.key = key
        super().__init__(f"{kind} {key!r} does not exist")


class ConflictError(TrackerError):
    """Operation collides with existing state (id already set, name taken)"""


class BackendError(TrackerError, RuntimeError):
    """I/O or constraint failure reported by the storage backend"""
