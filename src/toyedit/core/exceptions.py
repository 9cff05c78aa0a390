# toyedit/core/exceptions.py
"""Error types raised by the toyedit core.

- PreconditionViolation: a Document mutator received a row index (or an
  argument) it cannot honour. The document is left untouched.
- ResourceUnavailable: a document source could not be read at load time.
- ResourceWriteFailure: a document could not be written at save time.
"""


class PreconditionViolation(IndexError):
    """Raised when a Document operation is called outside its preconditions."""


class ResourceUnavailable(OSError):
    """Raised when the file backing a document cannot be opened for reading."""


class ResourceWriteFailure(OSError):
    """Raised when a document cannot be written to its destination."""

    def __init__(self, path: str, reason: str) -> None:
        super().__init__(f"Cannot write '{path}': {reason}")
        self.path = path
        self.reason = reason
