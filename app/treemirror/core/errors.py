"""Exception hierarchy for treemirror.

Every asynchronous operation either completes or raises one of these.
The core never retries; callers decide how to present failures.
"""


class TreeMirrorError(Exception):
    """Base exception for all treemirror errors."""


class BackendUnavailableError(TreeMirrorError):
    """Raised when the storage backend cannot be obtained."""


class EntryNotFoundError(TreeMirrorError):
    """Raised by a backend when a handle no longer refers to an existing entry."""


class WalkAbortedError(TreeMirrorError):
    """Raised when a walk fails mid-traversal.

    The previously cached snapshot stays in place when this is raised.
    """


class InvalidNameError(TreeMirrorError, ValueError):
    """Raised when an entry name cannot be used with the backend."""


class EntryTypeMismatchError(TreeMirrorError):
    """Raised when an entry exists with the other kind (file vs. directory)."""
