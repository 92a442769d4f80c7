"""Core synchronization engine.

This module exports the tree walker, the subscription hub, and the
TreeMirror facade, together with configuration and error types.
"""

from treemirror.core.config import MirrorConfig, load_config, load_config_or_default, save_config
from treemirror.core.errors import (
    BackendUnavailableError,
    EntryNotFoundError,
    EntryTypeMismatchError,
    InvalidNameError,
    TreeMirrorError,
    WalkAbortedError,
)
from treemirror.core.mirror import TreeMirror, validate_name
from treemirror.core.subscriptions import DEFAULT_INTERVAL_MS, SubscriptionHub
from treemirror.core.walker import TreeWalker

__all__ = [
    "DEFAULT_INTERVAL_MS",
    "BackendUnavailableError",
    "EntryNotFoundError",
    "EntryTypeMismatchError",
    "InvalidNameError",
    "MirrorConfig",
    "SubscriptionHub",
    "TreeMirror",
    "TreeMirrorError",
    "TreeWalker",
    "WalkAbortedError",
    "load_config",
    "load_config_or_default",
    "save_config",
    "validate_name",
]
