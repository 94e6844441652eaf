"""
Analysis backend adapter over a language server connection.
"""

from __future__ import annotations

import asyncio
from typing import Any

from pydantic import ValidationError

from vdcomplete.domain.completion import CompletionItem, TriggerKind
from vdcomplete.domain.errors import BackendFailure
from vdcomplete.domain.positions import Token, VirtualPosition
from vdcomplete.domain.protocols import LanguageServerConnection
from vdcomplete.logger import get_logger

logger = get_logger("backends.analysis")


def _raw_items(result: Any) -> list[Any]:
    # servers may answer with a bare item list or a CompletionList
    if result is None:
        return []
    if isinstance(result, dict):
        return list(result.get("items") or [])
    return list(result)


class LanguageServerBackend:
    """Wraps a language server connection for one virtual document.

    Transport errors, timeouts and malformed items are reported as
    ``BackendFailure`` so the fetcher can fall back deliberately.
    """

    def __init__(self, connection: LanguageServerConnection, timeout: float = 5.0) -> None:
        self._connection = connection
        self._timeout = timeout

    async def get_completion(
        self,
        cursor: VirtualPosition,
        token: Token,
        typed_character: str | None,
        trigger_kind: TriggerKind,
    ) -> list[CompletionItem]:
        try:
            result = await asyncio.wait_for(
                self._connection.get_completion(cursor, token, typed_character, trigger_kind),
                timeout=self._timeout,
            )
        except asyncio.TimeoutError as exc:
            raise BackendFailure("analysis", f"no completion reply within {self._timeout}s") from exc
        except Exception as exc:
            raise BackendFailure("analysis", f"completion request failed: {exc}") from exc

        try:
            raw_items = _raw_items(result)
        except (TypeError, AttributeError) as exc:
            raise BackendFailure("analysis", f"malformed completion result {result!r}") from exc

        items: list[CompletionItem] = []
        for raw in raw_items:
            if isinstance(raw, CompletionItem):
                items.append(raw)
                continue
            try:
                items.append(CompletionItem.model_validate(raw))
            except ValidationError as exc:
                raise BackendFailure("analysis", f"malformed completion item {raw!r}") from exc

        logger.debug(f"Language server returned {len(items)} items (trigger={trigger_kind.name})")
        return items

    def get_language_completion_characters(self) -> list[str]:
        return list(self._connection.get_language_completion_characters() or [])
