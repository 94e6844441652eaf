"""
CompletionContainer - wires the completion pipeline for one editor.

Components are created lazily on first access. The editor offsets, the
connections and the registry stay owned by the document-management layer:
the container only reads them.
"""

from __future__ import annotations

from collections.abc import Iterator, Mapping

from vdcomplete.application.fetcher import CompletionFetcher
from vdcomplete.application.request_builder import RequestBuilder
from vdcomplete.application.trigger_policy import TriggerPolicy
from vdcomplete.config import CompletionConfig
from vdcomplete.core.coordinates import CoordinateMapper
from vdcomplete.core.registry import VirtualDocumentRegistry
from vdcomplete.domain.errors import CompletionError
from vdcomplete.domain.protocols import (
    AnalysisBackend,
    Editor,
    LanguageServerConnection,
    ReplyBackend,
    RuntimeBackend,
    RuntimeSession,
)
from vdcomplete.infrastructure.backends import (
    ContextBackend,
    LanguageServerBackend,
    RuntimeAndContextBackend,
    RuntimeCompleter,
)
from vdcomplete.logger import get_logger
from vdcomplete.presentation.controller import CompletionController

logger = get_logger("completion.container")


class AnalysisBackendMapping(Mapping[str, AnalysisBackend]):
    """Live view wrapping language server connections as analysis backends."""

    def __init__(self, connections: Mapping[str, LanguageServerConnection], timeout: float):
        self._connections = connections
        self._timeout = timeout
        self._wrapped: dict[str, tuple[LanguageServerConnection, LanguageServerBackend]] = {}

    def __getitem__(self, key: str) -> AnalysisBackend:
        connection = self._connections[key]
        cached = self._wrapped.get(key)
        if cached is None or cached[0] is not connection:
            cached = (connection, LanguageServerBackend(connection, timeout=self._timeout))
            self._wrapped[key] = cached
        return cached[1]

    def __iter__(self) -> Iterator[str]:
        return iter(self._connections)

    def __len__(self) -> int:
        return len(self._connections)


class CompletionContainer:
    """Lazily builds and holds the completion components of one editor."""

    def __init__(
        self,
        editor: Editor,
        editor_offsets: Mapping[str, int],
        connections: Mapping[str, LanguageServerConnection],
        *,
        runtime_session: RuntimeSession | None = None,
        registry: VirtualDocumentRegistry | None = None,
        config: CompletionConfig | None = None,
    ):
        """
        Args:
            editor: Editor being completed
            editor_offsets: First root line of each editor
            connections: Language server connections keyed by virtual document id path
            runtime_session: Runtime session of the root document, if any
            registry: Registry of virtual documents; a new empty one by default
            config: Completion configuration
        """
        self.editor = editor
        self.config = config or CompletionConfig()
        self._editor_offsets = editor_offsets
        self._connections = connections
        self._runtime_session = runtime_session

        self._mapper: CoordinateMapper | None = None
        self._registry = registry
        self._request_builder: RequestBuilder | None = None
        self._policy: TriggerPolicy | None = None
        self._backends: AnalysisBackendMapping | None = None
        self._runtime: RuntimeBackend | None = None
        self._context: ReplyBackend | None = None
        self._fallback: ReplyBackend | None = None
        self._fetcher: CompletionFetcher | None = None
        self._controller: CompletionController | None = None

    @property
    def mapper(self) -> CoordinateMapper:
        if self._mapper is None:
            self._mapper = CoordinateMapper(self._editor_offsets)
        return self._mapper

    @property
    def registry(self) -> VirtualDocumentRegistry:
        if self._registry is None:
            self._registry = VirtualDocumentRegistry(self.mapper)
        return self._registry

    @property
    def request_builder(self) -> RequestBuilder:
        if self._request_builder is None:
            self._request_builder = RequestBuilder(self.mapper, self.registry)
        return self._request_builder

    @property
    def policy(self) -> TriggerPolicy:
        if self._policy is None:
            self._policy = TriggerPolicy(self.config.suppressed_token_types)
        return self._policy

    @property
    def backends(self) -> AnalysisBackendMapping:
        if self._backends is None:
            self._backends = AnalysisBackendMapping(self._connections, self.config.analysis_timeout)
        return self._backends

    @property
    def runtime(self) -> RuntimeBackend | None:
        if self._runtime is None and self._runtime_session is not None:
            self._runtime = RuntimeCompleter(self._runtime_session, timeout=self.config.runtime_timeout)
        return self._runtime

    @property
    def context(self) -> ReplyBackend:
        if self._context is None:
            self._context = ContextBackend()
        return self._context

    @property
    def fallback(self) -> ReplyBackend:
        """Connector used when analysis fails: runtime+context, or context alone."""
        if self._fallback is None:
            runtime = self.runtime
            self._fallback = RuntimeAndContextBackend(runtime, self.context) if runtime is not None else self.context
        return self._fallback

    @property
    def fetcher(self) -> CompletionFetcher:
        if self._fetcher is None:
            self._fetcher = CompletionFetcher(
                self.editor,
                self.request_builder,
                self.backends,
                fallback=self.fallback,
                runtime=self.runtime,
                policy=self.policy,
                config=self.config,
            )
        return self._fetcher

    @property
    def controller(self) -> CompletionController:
        if self._controller is None:
            self._controller = CompletionController(
                self.editor,
                self.fetcher,
                self.policy,
                self.trigger_characters,
                self.active_document_id,
            )
        return self._controller

    def active_document_id(self) -> str | None:
        """Id path of the virtual document owning the cursor, if any."""
        try:
            root = self.mapper.to_root(self.editor.get_cursor_position(), self.editor.editor_id)
            return self.registry.document_at(root).id_path
        except CompletionError as exc:
            logger.debug(f"No virtual document at cursor: {exc}")
            return None

    def trigger_characters(self, id_path: str | None = None) -> list[str]:
        """Trigger characters of a document's analysis backend (default: the one at the cursor)."""
        if id_path is None:
            id_path = self.active_document_id()
            if id_path is None:
                return []
        backend = self.backends.get(id_path)
        if backend is None:
            return []
        return backend.get_language_completion_characters()
