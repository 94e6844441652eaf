"""
Runtime completions topped up with context completions.
"""

from __future__ import annotations

import asyncio

from vdcomplete.domain.completion import CompletionReply, EditorRequest
from vdcomplete.domain.errors import BackendFailure
from vdcomplete.domain.protocols import ReplyBackend
from vdcomplete.logger import get_logger

logger = get_logger("backends.combined")


class RuntimeAndContextBackend:
    """Queries the runtime and the context completer together.

    Runtime matches come first, followed by context matches the runtime did
    not propose; the runtime's range is kept. A failing runtime leaves the
    context reply.
    """

    def __init__(self, runtime: ReplyBackend, context: ReplyBackend) -> None:
        self._runtime = runtime
        self._context = context

    async def fetch(self, request: EditorRequest) -> CompletionReply:
        runtime, context = await asyncio.gather(
            self._runtime.fetch(request),
            self._context.fetch(request),
            return_exceptions=True,
        )
        if isinstance(context, BaseException):
            raise context
        if isinstance(runtime, BackendFailure):
            logger.warning(f"Runtime completion failed, using context only: {runtime}")
            return context
        if isinstance(runtime, BaseException):
            raise runtime

        # If one is empty, return the other.
        if runtime.is_empty():
            return context
        if context.is_empty():
            return runtime

        memo = set(runtime.matches)
        matches = list(runtime.matches)
        matches.extend(m for m in context.matches if m not in memo)
        return runtime.model_copy(update={"matches": matches})
