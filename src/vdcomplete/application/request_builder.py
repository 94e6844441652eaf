"""
Builds analysis requests from raw editor state.
"""

from __future__ import annotations

from vdcomplete.core.coordinates import CoordinateMapper
from vdcomplete.core.registry import VirtualDocumentRegistry
from vdcomplete.domain.completion import CompletionRequest
from vdcomplete.domain.positions import EditorPosition, ensure_position
from vdcomplete.logger import get_logger

logger = get_logger("completion.request")


def typed_character_at(token_text: str, start: EditorPosition, cursor: EditorPosition) -> str | None:
    """Character right behind the cursor within the token, if any."""
    index = cursor.column - start.column - 1
    if 0 <= index < len(token_text):
        return token_text[index]
    return None


class RequestBuilder:
    """Translates editor-level token data into a ``CompletionRequest``."""

    def __init__(self, mapper: CoordinateMapper, registry: VirtualDocumentRegistry) -> None:
        self._mapper = mapper
        self._registry = registry

    def build_request(
        self,
        token_text: str,
        start: EditorPosition,
        end: EditorPosition,
        cursor: EditorPosition,
        offset: int,
        editor_id: str,
    ) -> CompletionRequest:
        """
        Build the analysis request for a token.

        The owning document is resolved once from the token start; the end and
        cursor positions are expressed in that document's coordinates.

        Raises:
            UnmappablePosition: If a position cannot be mapped
            NoOwningDocument: If no virtual document owns the token start
        """
        for position in (start, end, cursor):
            ensure_position(position, EditorPosition)

        typed_character = typed_character_at(token_text, start, cursor)

        start_in_root = self._mapper.to_root(start, editor_id)
        end_in_root = self._mapper.to_root(end, editor_id)
        cursor_in_root = self._mapper.to_root(cursor, editor_id)

        document = self._registry.document_at(start_in_root)

        request = CompletionRequest(
            token_text=token_text,
            start=self._registry.to_virtual(start_in_root, document),
            end=self._registry.to_virtual(end_in_root, document),
            cursor=self._registry.to_virtual(cursor_in_root, document),
            typed_character=typed_character,
            document=document,
            offset=offset,
        )
        logger.debug(
            f"Built request for {token_text!r} in {document.id_path!r} "
            f"(cursor={request.cursor}, typed={typed_character!r})"
        )
        return request
