"""Completion error taxonomy.

Mapping and registry errors abort a single request. Backend errors are
recovered by the fetcher's fallback chain and never reach the user.
"""

__all__ = [
    "CompletionError",
    "UnmappablePosition",
    "NoOwningDocument",
    "BackendUnavailable",
    "BackendFailure",
]


class CompletionError(Exception):
    """Base class for all completion errors."""


class UnmappablePosition(CompletionError):
    """A position cannot be converted to the requested coordinate space."""


class NoOwningDocument(CompletionError):
    """No registered virtual document contains the position."""


class BackendUnavailable(CompletionError):
    """No backend is configured for the document being completed."""


class BackendFailure(CompletionError):
    """A backend call failed (transport error, protocol error or timeout)."""

    def __init__(self, backend: str, message: str):
        super().__init__(f"{backend}: {message}")
        self.backend = backend
