"""Backend protocols.

Two layers are described here: the transport-facing objects owned by the
session layer (``LanguageServerConnection``, ``RuntimeSession``) and the
backend interfaces consumed by the fetcher (``AnalysisBackend``,
``ReplyBackend``). Adapters in ``vdcomplete.infrastructure.backends`` turn the
former into the latter.
"""

from typing import Any, Protocol, Sequence

from vdcomplete.domain.completion import (
    CompletionItem,
    CompletionReply,
    EditorRequest,
    TriggerKind,
)
from vdcomplete.domain.positions import Token, VirtualPosition

__all__ = [
    "LanguageServerConnection",
    "RuntimeSession",
    "AnalysisBackend",
    "ReplyBackend",
    "RuntimeBackend",
]


class LanguageServerConnection(Protocol):
    """Live connection to a language server for one virtual document."""

    async def get_completion(
        self,
        cursor: VirtualPosition,
        token: Token,
        typed_character: str | None,
        trigger_kind: TriggerKind,
    ) -> Sequence[dict[str, Any]] | None:
        """Request completions and return raw ``CompletionItem`` dicts."""
        ...

    def get_language_completion_characters(self) -> Sequence[str]:
        """Trigger characters declared by the server for its language."""
        ...


class RuntimeSession(Protocol):
    """Session with a code-execution runtime (e.g. a Jupyter kernel).

    Attributes:
        language: Language of the running runtime
    """

    language: str

    async def complete(self, code: str, cursor_pos: int) -> dict[str, Any]:
        """Return the content of a ``complete_reply`` message."""
        ...


class AnalysisBackend(Protocol):
    """Language analysis backend working in virtual coordinates."""

    async def get_completion(
        self,
        cursor: VirtualPosition,
        token: Token,
        typed_character: str | None,
        trigger_kind: TriggerKind,
    ) -> list[CompletionItem]:
        """Return completion items (possibly empty).

        Raises:
            BackendFailure: If the request fails or times out
        """
        ...

    def get_language_completion_characters(self) -> list[str]:
        ...


class ReplyBackend(Protocol):
    """Backend answering editor-level requests with a ready reply.

    Implemented by the runtime adapter and by the fallback connectors.
    """

    async def fetch(self, request: EditorRequest) -> CompletionReply:
        """Return a reply in editor offsets.

        Raises:
            BackendFailure: If the request fails or times out
        """
        ...


class RuntimeBackend(ReplyBackend, Protocol):
    """Reply backend bound to a running runtime of a given language."""

    @property
    def language(self) -> str:
        ...
