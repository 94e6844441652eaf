"""Editor protocol consumed by the completion pipeline."""

from typing import Protocol, Sequence

from vdcomplete.domain.positions import EditorPosition, EditorToken

__all__ = ["Editor"]


class Editor(Protocol):
    """Single editor widget showing one part of the root document.

    Attributes:
        editor_id: Identity used to find the editor's place in the root document
    """

    editor_id: str

    @property
    def text(self) -> str:
        ...

    def get_cursor_position(self) -> EditorPosition:
        ...

    def get_token_for_position(self, position: EditorPosition) -> EditorToken:
        """Return the token ending at (or containing) ``position``."""
        ...

    def get_position_at(self, offset: int) -> EditorPosition:
        ...

    def get_offset_at(self, position: EditorPosition) -> int:
        ...

    def get_line(self, line: int) -> str:
        ...

    def get_tokens(self) -> Sequence[EditorToken]:
        ...
