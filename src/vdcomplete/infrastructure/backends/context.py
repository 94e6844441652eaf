"""
Context completion: proposes words already present in the editor text.
"""

from __future__ import annotations

import re
from collections.abc import Callable

from vdcomplete.domain.completion import CompletionReply, EditorRequest
from vdcomplete.domain.positions import EditorToken
from vdcomplete.logger import get_logger

logger = get_logger("backends.context")

_TOKEN_PATTERN = re.compile(
    r"""
    (?P<comment>\#[^\n]*)
    | (?P<string>"(?:[^"\\\n]|\\.)*"?|'(?:[^'\\\n]|\\.)*'?)
    | (?P<number>\d+(?:\.\d*)?)
    | (?P<variable>[A-Za-z_]\w*)
    | (?P<whitespace>[ \t]+)
    | (?P<operator>[^\sA-Za-z_0-9])
    """,
    re.VERBOSE,
)

_WORD = re.compile(r"[A-Za-z_]\w*\Z")


def tokenize(text: str) -> list[EditorToken]:
    """Split text into tokens; line breaks separate tokens and are not returned."""
    tokens: list[EditorToken] = []
    for match in _TOKEN_PATTERN.finditer(text):
        kind = match.lastgroup or ""
        tokens.append(
            EditorToken(
                value=match.group(),
                offset=match.start(),
                type="" if kind == "whitespace" else kind,
            )
        )
    return tokens


class ContextBackend:
    """Completes the word before the cursor from other words in the text."""

    def __init__(self, tokenizer: Callable[[str], list[EditorToken]] = tokenize) -> None:
        self._tokenizer = tokenizer

    async def fetch(self, request: EditorRequest) -> CompletionReply:
        tokens = self._tokenizer(request.text)
        token = next(
            (t for t in tokens if t.offset < request.offset <= t.end_offset),
            EditorToken(value="", offset=request.offset),
        )
        query = token.value[: request.offset - token.offset]
        if not _WORD.match(query):
            return CompletionReply.empty(request.offset)

        matches = dict.fromkeys(
            t.value
            for t in tokens
            if t is not token and t.value.startswith(query) and t.value != query and _WORD.match(t.value)
        )
        logger.debug(f"Context completion for {query!r}: {len(matches)} matches")
        return CompletionReply.build(
            range_start=token.offset,
            range_end=token.end_offset,
            matches=list(matches),
        )
