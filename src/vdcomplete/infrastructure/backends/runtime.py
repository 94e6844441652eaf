"""
Runtime completion adapter over an execution runtime session.
"""

from __future__ import annotations

import asyncio
from collections.abc import Mapping
from typing import Any

from pydantic import ValidationError

from vdcomplete.domain.completion import CompletionReply, EditorRequest
from vdcomplete.domain.errors import BackendFailure
from vdcomplete.domain.protocols import RuntimeSession
from vdcomplete.logger import get_logger

logger = get_logger("backends.runtime")

# metadata keys under which runtimes report candidate types
_TYPE_KEYS = ("_jupyter_types_experimental", "itemTypes")


def _item_types(metadata: dict[str, Any]) -> dict[str, str]:
    for key in _TYPE_KEYS:
        entries = metadata.get(key)
        if entries:
            types: dict[str, str] = {}
            for entry in entries:
                types.setdefault(entry["text"], entry.get("type", ""))
            return types
    return {}


class RuntimeCompleter:
    """Turns ``complete_reply`` contents of a runtime into completion replies."""

    def __init__(self, session: RuntimeSession, timeout: float = 5.0) -> None:
        self._session = session
        self._timeout = timeout

    @property
    def language(self) -> str:
        return self._session.language

    async def fetch(self, request: EditorRequest) -> CompletionReply:
        """
        Ask the runtime for completions at the request offset.

        Raises:
            BackendFailure: If the runtime errors or times out, or its reply is malformed or an error
        """
        try:
            content = await asyncio.wait_for(
                self._session.complete(request.text, request.offset),
                timeout=self._timeout,
            )
        except asyncio.TimeoutError as exc:
            raise BackendFailure("runtime", f"no reply within {self._timeout}s") from exc
        except Exception as exc:
            raise BackendFailure("runtime", f"completion request failed: {exc}") from exc

        if not isinstance(content, Mapping):
            raise BackendFailure("runtime", f"malformed complete_reply {content!r}")
        if content.get("status", "ok") != "ok":
            raise BackendFailure("runtime", f"complete_reply status {content.get('status')!r}")

        try:
            matches = list(dict.fromkeys(content.get("matches") or []))
            reply = CompletionReply.build(
                range_start=content.get("cursor_start", request.offset),
                range_end=content.get("cursor_end", request.offset),
                matches=matches,
                type_tags=_item_types(content.get("metadata") or {}),
            )
        except (KeyError, TypeError, AttributeError, ValidationError) as exc:
            raise BackendFailure("runtime", f"malformed complete_reply: {exc}") from exc

        logger.debug(f"Runtime returned {len(matches)} matches")
        return reply
