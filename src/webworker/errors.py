"""
=============================================================================
ERROR TAXONOMY
=============================================================================

Every failure a worker can meet belongs to exactly one of these classes.
Each class is handled at a single boundary:

    ┌─────────────────────┬──────────────────────────┬──────────────────────┐
    │ Error               │ Handled in               │ Client sees          │
    ├─────────────────────┼──────────────────────────┼──────────────────────┤
    │ RequestReadError    │ RequestReader            │ normal response for  │
    │                     │ (read phase ends early)  │ whatever was read    │
    ├─────────────────────┼──────────────────────────┼──────────────────────┤
    │ ResourceOpenError   │ ContentWriter            │ fallback 404 body    │
    ├─────────────────────┼──────────────────────────┼──────────────────────┤
    │ IOWriteError        │ WebWorker.run            │ truncated response   │
    │                     │                          │ or nothing at all    │
    └─────────────────────┴──────────────────────────┴──────────────────────┘

A missing resource at header time is NOT an error: it is the 404 status.

=============================================================================
"""

from typing import Optional


class WebWorkerError(Exception):
    """
    Base class for connection-scoped failures.

    Attributes:
        cause: The low-level exception that triggered this one, if any.
    """

    def __init__(self, message: str, cause: Optional[BaseException] = None):
        super().__init__(message)
        self.cause = cause


class RequestReadError(WebWorkerError):
    """Reading the request from the input side failed (reset, timeout, bad bytes)."""


class ResourceOpenError(WebWorkerError):
    """The resolved resource could not be opened for reading."""

    def __init__(self, path: str, cause: Optional[BaseException] = None):
        super().__init__(f"Cannot open resource {path!r}: {cause}", cause)
        self.path = path


class IOWriteError(WebWorkerError):
    """Writing the header or the body to the output side failed."""
