"""Completion requests, items and replies.

These Pydantic models keep replies in the shape the presentation layer
consumes (``rangeStart``/``rangeEnd``/``matches``/``metadata.itemTypes``)
while the rest of the code works with snake_case attributes.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import IntEnum
from typing import Any, Mapping, Sequence

from lsprotocol.types import CompletionItemKind
from pydantic import BaseModel, ConfigDict, Field

from vdcomplete.domain.documents import VirtualDocument
from vdcomplete.domain.positions import Token, VirtualPosition

__all__ = [
    "TriggerKind",
    "CompletionRequest",
    "EditorRequest",
    "CompletionItem",
    "ItemTypeTag",
    "ReplyMetadata",
    "CompletionReply",
]


class TriggerKind(IntEnum):
    """What caused a completion request (language server protocol values)."""

    INVOKED = 1
    TRIGGER_CHARACTER = 2
    TRIGGER_FOR_INCOMPLETE_COMPLETIONS = 3


@dataclass(frozen=True, slots=True)
class EditorRequest:
    """Editor-level request handed to runtime and fallback backends.

    Attributes:
        text: Full text of the active editor
        offset: Cursor offset in ``text``
    """

    text: str
    offset: int


@dataclass(frozen=True, slots=True)
class CompletionRequest:
    """Normalized request for the analysis backend, in virtual coordinates."""

    token_text: str
    start: VirtualPosition
    end: VirtualPosition
    cursor: VirtualPosition
    typed_character: str | None
    document: VirtualDocument
    offset: int

    @property
    def token(self) -> Token:
        return Token(text=self.token_text, offset=self.offset, start=self.start, end=self.end)

    @property
    def token_span(self) -> tuple[VirtualPosition, VirtualPosition]:
        return self.start, self.end


class CompletionItem(BaseModel):
    """A raw completion item as returned by a language server."""

    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    label: str = Field(..., description="Label shown in the completion list")
    insert_text: str | None = Field(None, alias="insertText", description="Text to insert, if different from the label")
    kind: int | None = Field(None, description="CompletionItemKind value")

    @property
    def display_text(self) -> str:
        return self.insert_text if self.insert_text else self.label

    @property
    def kind_name(self) -> str:
        """Name of the item kind (e.g. ``"Function"``), empty if absent or unknown."""
        if self.kind is None:
            return ""
        try:
            return CompletionItemKind(self.kind).name
        except ValueError:
            return ""


class ItemTypeTag(BaseModel):
    """Type classification of one candidate."""

    text: str
    type: str


class ReplyMetadata(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    item_types: list[ItemTypeTag] = Field(default_factory=list, alias="itemTypes")


class CompletionReply(BaseModel):
    """Completion reply delivered to the presentation layer.

    ``range_start``/``range_end`` are offsets in the editor text: the
    presentation layer deletes that range and inserts the chosen match.
    """

    model_config = ConfigDict(populate_by_name=True)

    range_start: int = Field(..., alias="rangeStart")
    range_end: int = Field(..., alias="rangeEnd")
    matches: list[str] = Field(default_factory=list)
    metadata: ReplyMetadata = Field(default_factory=ReplyMetadata)

    @classmethod
    def build(
        cls,
        range_start: int,
        range_end: int,
        matches: Sequence[str] = (),
        type_tags: Mapping[str, str] | None = None,
    ) -> "CompletionReply":
        """Create a reply from matches and an ordered text -> type mapping."""
        tags = [ItemTypeTag(text=text, type=type_) for text, type_ in (type_tags or {}).items()]
        return cls(
            range_start=range_start,
            range_end=range_end,
            matches=list(matches),
            metadata=ReplyMetadata(item_types=tags),
        )

    @classmethod
    def empty(cls, range_start: int, range_end: int | None = None) -> "CompletionReply":
        return cls.build(range_start, range_start if range_end is None else range_end)

    @property
    def type_tags(self) -> dict[str, str]:
        """Item types as an ordered mapping; the first tag for a text wins."""
        tags: dict[str, str] = {}
        for tag in self.metadata.item_types:
            tags.setdefault(tag.text, tag.type)
        return tags

    def is_empty(self) -> bool:
        return not self.matches

    def to_wire(self) -> dict[str, Any]:
        """Serialize using the externally consumed key names."""
        return self.model_dump(by_alias=True)
