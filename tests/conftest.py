"""Shared stubs and fixtures for completion tests."""

from typing import Any, Callable, Optional

import pytest

from vdcomplete.application.fetcher import CompletionFetcher
from vdcomplete.application.request_builder import RequestBuilder
from vdcomplete.core.coordinates import CoordinateMapper
from vdcomplete.core.registry import VirtualDocumentRegistry
from vdcomplete.domain.completion import (
    CompletionItem,
    CompletionReply,
    EditorRequest,
    TriggerKind,
)
from vdcomplete.domain.documents import VirtualDocument
from vdcomplete.domain.errors import BackendFailure
from vdcomplete.domain.positions import EditorPosition, RootPosition
from vdcomplete.infrastructure.backends import ContextBackend, RuntimeAndContextBackend
from vdcomplete.infrastructure.editor import TextBufferEditor

PYTHON_DOC = VirtualDocument(id_path="notebook.ipynb", language="python")
R_DOC = VirtualDocument(id_path="notebook.ipynb/r-1", language="r")


class StubAnalysisBackend:
    """Analysis backend returning canned items and recording calls."""

    def __init__(
        self,
        items: Optional[list[CompletionItem]] = None,
        error: Optional[Exception] = None,
        trigger_characters: Optional[list[str]] = None,
    ):
        self.items = items or []
        self.error = error
        self.trigger_characters = trigger_characters or []
        self.calls: list[dict[str, Any]] = []

    async def get_completion(self, cursor, token, typed_character, trigger_kind):
        self.calls.append(
            {
                "cursor": cursor,
                "token": token,
                "typed_character": typed_character,
                "trigger_kind": trigger_kind,
            }
        )
        if self.error is not None:
            raise self.error
        return list(self.items)

    def get_language_completion_characters(self) -> list[str]:
        return list(self.trigger_characters)


class StubReplyBackend:
    """Runtime or fallback backend returning a canned reply."""

    def __init__(
        self,
        reply: Optional[CompletionReply] = None,
        error: Optional[Exception] = None,
        language: str = "python",
    ):
        self.reply = reply
        self.error = error
        self._language = language
        self.requests: list[EditorRequest] = []

    @property
    def language(self) -> str:
        return self._language

    async def fetch(self, request: EditorRequest) -> CompletionReply:
        self.requests.append(request)
        if self.error is not None:
            raise self.error
        return self.reply if self.reply is not None else CompletionReply.empty(request.offset)


def items(*labels: str, kind: Optional[int] = None) -> list[CompletionItem]:
    return [CompletionItem(label=label, kind=kind) for label in labels]


def analysis_failure() -> BackendFailure:
    return BackendFailure("analysis", "connection reset")


@pytest.fixture
def make_fetcher() -> Callable[..., tuple[CompletionFetcher, TextBufferEditor]]:
    """Factory building a fetcher over an in-memory editor.

    The editor is placed at ``editor_offset`` in the root document and the
    registry holds a single python document covering it unless ``documents``
    lists ``(document, root_start, root_end)`` regions. Without an explicit
    ``fallback`` the real context (or runtime+context) connector is used.
    """

    def factory(
        text: str,
        cursor: Optional[EditorPosition] = None,
        *,
        connections: Optional[dict[str, Any]] = None,
        runtime: Optional[StubReplyBackend] = None,
        fallback: Optional[StubReplyBackend] = None,
        documents: Optional[list[tuple[VirtualDocument, RootPosition, RootPosition]]] = None,
        editor_offset: int = 0,
    ) -> tuple[CompletionFetcher, TextBufferEditor]:
        editor = TextBufferEditor("cell-1", text, cursor)
        mapper = CoordinateMapper({"cell-1": editor_offset})
        registry = VirtualDocumentRegistry(mapper)
        for document, start, end in documents or [(PYTHON_DOC, RootPosition(0, 0), RootPosition(100, 0))]:
            registry.register(document, start, end)
        if fallback is None:
            fallback = ContextBackend() if runtime is None else RuntimeAndContextBackend(runtime, ContextBackend())
        fetcher = CompletionFetcher(
            editor,
            RequestBuilder(mapper, registry),
            connections if connections is not None else {},
            fallback=fallback,
            runtime=runtime,
        )
        return fetcher, editor

    return factory

