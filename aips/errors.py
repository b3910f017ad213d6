"""Error taxonomy shared by the storage, completion, and controller layers.

Every error is terminal for the operation that raised it. The HTTP layer maps
them onto status codes; the controller absorbs completion and persistence
failures into the session state instead of raising.
"""


class AipsError(Exception):
    """Base class for all domain errors."""


class ValidationError(AipsError):
    """Bad input caught before any network or storage call (empty query, missing fields)."""


class NotFoundError(AipsError):
    """A story, thread, or user document does not exist."""


class CompletionError(AipsError):
    """The completion backend could not be reached or returned an unusable response."""


class PersistenceError(AipsError):
    """A document write failed."""


class ConflictError(PersistenceError):
    """A write was refused because the stored document changed underneath the caller."""


class SessionBusyError(AipsError):
    """A query is already in flight for this editing session."""
