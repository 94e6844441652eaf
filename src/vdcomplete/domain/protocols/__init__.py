"""Domain protocols - interfaces for editors and completion backends.

Backends are described structurally so that concrete connectors are chosen
by composition in the fetcher instead of through a connector class
hierarchy, and so that tests can pass simple stubs.
"""

from vdcomplete.domain.protocols.backends import (
    AnalysisBackend,
    LanguageServerConnection,
    ReplyBackend,
    RuntimeBackend,
    RuntimeSession,
)
from vdcomplete.domain.protocols.editor import Editor

__all__ = [
    "AnalysisBackend",
    "LanguageServerConnection",
    "ReplyBackend",
    "RuntimeBackend",
    "RuntimeSession",
    "Editor",
]
