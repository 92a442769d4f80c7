"""Utility modules for treemirror.

This module exports commonly used utility functions.
"""

from treemirror.utils.formatting import (
    console,
    err_console,
    print_error,
    print_info,
    print_success,
)

__all__ = [
    "console",
    "err_console",
    "print_error",
    "print_info",
    "print_success",
]
