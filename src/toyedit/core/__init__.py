# src/toyedit/core/__init__.py
"""Public facade for toyedit.core: re-export main classes from CamelCase modules.

Keeps the one-class-per-file module names (Document.py, Viewport.py, ...),
but provides flat imports for convenience and stability.
"""

# Leaf modules first; Toyedit imports the UI layer, which imports these.
from .exceptions import (  # noqa: F401
    PreconditionViolation,
    ResourceUnavailable,
    ResourceWriteFailure,
)
from .Document import Cell, Cursor, Document, Row, Tag  # noqa: F401
from .Highlighter import Highlighter, classify_line, compute_overlay  # noqa: F401
from .Viewport import FrameRow, Viewport  # noqa: F401
from .FileStore import FileStore  # noqa: F401
from .Toyedit import EditorState, Toyedit  # noqa: F401


__all__ = [
    "Cell",
    "Cursor",
    "Document",
    "EditorState",
    "FileStore",
    "FrameRow",
    "Highlighter",
    "PreconditionViolation",
    "ResourceUnavailable",
    "ResourceWriteFailure",
    "Row",
    "Tag",
    "Toyedit",
    "Viewport",
    "classify_line",
    "compute_overlay",
]
