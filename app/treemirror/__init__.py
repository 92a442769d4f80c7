"""treemirror - live in-memory mirror of a hierarchical storage tree."""

__version__ = "0.1.0"
