"""
Completion fetcher: dispatches requests to the analysis and runtime backends.
"""

from __future__ import annotations

import asyncio
from collections.abc import Iterator, Mapping, Sequence
from contextlib import contextmanager

from vdcomplete.application.merger import merge_replies
from vdcomplete.application.request_builder import RequestBuilder
from vdcomplete.application.trigger_policy import TriggerPolicy
from vdcomplete.config import CompletionConfig
from vdcomplete.domain.completion import (
    CompletionItem,
    CompletionReply,
    CompletionRequest,
    EditorRequest,
    TriggerKind,
)
from vdcomplete.domain.errors import BackendFailure, BackendUnavailable
from vdcomplete.domain.protocols import AnalysisBackend, Editor, ReplyBackend, RuntimeBackend
from vdcomplete.logger import get_logger

logger = get_logger("completion.fetcher")


def build_analysis_reply(items: Sequence[CompletionItem], token_text: str, offset: int) -> CompletionReply:
    """
    Build a reply from analysis items for a token starting at ``offset``.

    When no candidate extends the typed token the range starts one character
    later, so the character that triggered the completion is kept.
    """
    matches: list[str] = []
    type_tags: dict[str, str] = {}
    all_non_prefixed = True
    for item in items:
        text = item.display_text
        if text.startswith(token_text):
            all_non_prefixed = False
        if text in type_tags:
            continue
        matches.append(text)
        type_tags[text] = item.kind_name

    return CompletionReply.build(
        range_start=offset + (1 if all_non_prefixed else 0),
        range_end=offset + len(token_text),
        matches=matches,
        type_tags=type_tags,
    )


class CompletionFetcher:
    """Fetches completions for the editor's cursor.

    The runtime backend is consulted together with the analysis backend only
    when its language matches the virtual document under the cursor. Analysis
    failures fall back to the fallback connector (runtime+context when a
    runtime exists, context otherwise), whose reply is returned as is.
    """

    def __init__(
        self,
        editor: Editor,
        request_builder: RequestBuilder,
        connections: Mapping[str, AnalysisBackend],
        *,
        fallback: ReplyBackend,
        runtime: RuntimeBackend | None = None,
        policy: TriggerPolicy | None = None,
        config: CompletionConfig | None = None,
    ) -> None:
        """
        Args:
            editor: Active editor
            request_builder: Builder of analysis requests
            connections: Analysis backends keyed by virtual document id path
            fallback: Connector used when analysis fails (runtime+context, or context alone)
            runtime: Runtime backend of the session, if any
            policy: Trigger policy; defaults to one built from ``config``
            config: Completion configuration
        """
        self._editor = editor
        self._request_builder = request_builder
        self._connections = connections
        self._runtime = runtime
        self._config = config or CompletionConfig()
        self._policy = policy or TriggerPolicy(self._config.suppressed_token_types)

        self._fallback = fallback

        self._trigger_kind = TriggerKind.INVOKED

    @property
    def fallback_connector(self) -> ReplyBackend:
        return self._fallback

    @property
    def trigger_kind(self) -> TriggerKind:
        return self._trigger_kind

    @contextmanager
    def with_trigger_kind(self, kind: TriggerKind) -> Iterator[None]:
        """Use ``kind`` for fetches issued inside the block, then reset to ``INVOKED``."""
        self._trigger_kind = kind
        try:
            yield
        finally:
            # Return to the default state
            self._trigger_kind = TriggerKind.INVOKED

    def runtime_applicable(self, request: CompletionRequest) -> bool:
        return self._runtime is not None and self._runtime.language == request.document.language

    async def fetch(
        self,
        request: EditorRequest,
        trigger_kind: TriggerKind | None = None,
    ) -> CompletionReply | None:
        """
        Fetch completions for the token under the cursor.

        Args:
            request: Editor-level request (editor text and cursor offset)
            trigger_kind: What caused the request; defaults to the scoped trigger kind

        Returns:
            The reply, or None when completion is suppressed in the token's context

        Raises:
            UnmappablePosition: If the token cannot be mapped to a virtual document
            NoOwningDocument: If no virtual document owns the token
        """
        kind = trigger_kind if trigger_kind is not None else self._trigger_kind
        editor = self._editor

        cursor = editor.get_cursor_position()
        token = editor.get_token_for_position(cursor)

        if self._policy.should_suppress(token.type):
            logger.debug(f"Completion suppressed in {token.type} token {token.value!r}")
            return None

        start = editor.get_position_at(token.offset)
        end = editor.get_position_at(token.end_offset)

        lsp_request = self._request_builder.build_request(
            token.value,
            start,
            end,
            cursor,
            token.offset,
            editor.editor_id,
        )

        if self.runtime_applicable(lsp_request):
            runtime_reply, analysis_reply = await asyncio.gather(
                self._runtime.fetch(request),
                self.hint(lsp_request, kind),
                return_exceptions=True,
            )
            if isinstance(analysis_reply, (BackendFailure, BackendUnavailable)):
                logger.warning(f"Analysis completion failed, falling back: {analysis_reply}")
                return await self._fetch_fallback(request, token.offset, token.end_offset)
            if isinstance(analysis_reply, BaseException):
                raise analysis_reply
            if isinstance(runtime_reply, BackendFailure):
                logger.warning(f"Runtime completion failed, using analysis only: {runtime_reply}")
                runtime_reply = CompletionReply.empty(request.offset)
            elif isinstance(runtime_reply, BaseException):
                raise runtime_reply
            # The cursor line is sliced with editor-text offsets; below the first
            # line the prefix is taken from the wrong columns (usually empty).
            return merge_replies(
                runtime_reply,
                analysis_reply,
                editor.get_line(cursor.line),
                unknown_type=self._config.unknown_type,
            )

        try:
            return await self.hint(lsp_request, kind)
        except (BackendFailure, BackendUnavailable) as exc:
            logger.warning(f"Analysis completion failed, falling back: {exc}")
            return await self._fetch_fallback(request, token.offset, token.end_offset)

    async def hint(self, request: CompletionRequest, trigger_kind: TriggerKind = TriggerKind.INVOKED) -> CompletionReply:
        """
        Ask the analysis backend of the request's document.

        Raises:
            BackendUnavailable: If the document has no connection
            BackendFailure: If the backend call fails
        """
        document = request.document
        connection = self._connections.get(document.id_path)
        if connection is None:
            raise BackendUnavailable(f"No analysis connection for {document.id_path!r} ({document.language})")

        items = await connection.get_completion(
            request.cursor,
            request.token,
            request.typed_character,
            trigger_kind,
        )
        return build_analysis_reply(items or [], request.token_text, request.offset)

    async def _fetch_fallback(self, request: EditorRequest, start: int, end: int) -> CompletionReply:
        try:
            return await self._fallback.fetch(request)
        except BackendFailure as exc:
            logger.error(f"Fallback completion failed: {exc}")
            return CompletionReply.empty(start, end)
