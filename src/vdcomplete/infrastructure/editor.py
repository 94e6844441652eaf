"""In-memory editor buffer with a small line-based tokenizer.

Stands in for the editor widget wherever no real widget is attached (replays,
tests). Tokens never span lines and follow CodeMirror conventions: the token
"for" a position is the one ending at, or containing, the character before it.
"""

from __future__ import annotations

import re

from vdcomplete.domain.positions import EditorPosition, EditorToken, ensure_position
from vdcomplete.infrastructure.backends.context import tokenize
from vdcomplete.domain.protocols.editor import Editor

__all__ = ["TextBufferEditor"]

_LINE_BREAK = re.compile(r"\n")


class TextBufferEditor(Editor):
    """Plain text editor holding a single cursor."""

    def __init__(self, editor_id: str, text: str = "", cursor: EditorPosition | None = None):
        self.editor_id = editor_id
        self._text = text
        self._cursor = cursor if cursor is not None else self.get_position_at(len(text))

    @property
    def text(self) -> str:
        return self._text

    def set_text(self, text: str, cursor: EditorPosition | None = None) -> None:
        self._text = text
        self._cursor = cursor if cursor is not None else self.get_position_at(len(text))

    def set_cursor(self, position: EditorPosition) -> None:
        # validates the position against the current text
        self.get_offset_at(position)
        self._cursor = position

    def insert(self, value: str) -> list[str]:
        """Insert text at the cursor and move the cursor after it.

        Returns:
            Inserted lines, as reported in editor change events
        """
        offset = self.get_offset_at(self._cursor)
        self._text = self._text[:offset] + value + self._text[offset:]
        self._cursor = self.get_position_at(offset + len(value))
        return value.split("\n")

    def get_cursor_position(self) -> EditorPosition:
        return self._cursor

    def get_line(self, line: int) -> str:
        lines = self._text.split("\n")
        if not 0 <= line < len(lines):
            raise ValueError(f"Line {line} out of range (0-{len(lines) - 1})")
        return lines[line]

    def get_position_at(self, offset: int) -> EditorPosition:
        if not 0 <= offset <= len(self._text):
            raise ValueError(f"Offset {offset} out of range (0-{len(self._text)})")
        line = self._text.count("\n", 0, offset)
        column = offset - (self._text.rfind("\n", 0, offset) + 1)
        return EditorPosition(line, column)

    def get_offset_at(self, position: EditorPosition) -> int:
        ensure_position(position, EditorPosition)
        line_text = self.get_line(position.line)
        if position.column > len(line_text):
            raise ValueError(f"Column {position.column} beyond end of line {position.line}")
        starts = [0] + [m.end() for m in _LINE_BREAK.finditer(self._text)]
        return starts[position.line] + position.column

    def get_tokens(self) -> list[EditorToken]:
        return tokenize(self._text)

    def get_token_for_position(self, position: EditorPosition) -> EditorToken:
        offset = self.get_offset_at(position)
        line_start = offset - position.column
        for token in self.get_tokens():
            if token.offset < offset <= token.end_offset and token.offset >= line_start:
                return token
        return EditorToken(value="", offset=offset, type="")
