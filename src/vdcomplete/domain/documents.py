"""Virtual documents and the root regions they occupy."""

from __future__ import annotations

from dataclasses import dataclass, field

from vdcomplete.domain.positions import RootPosition, VirtualPosition, ensure_position

__all__ = ["VirtualDocument", "VirtualRegion"]


@dataclass(frozen=True, slots=True)
class VirtualDocument:
    """An independently analyzable document embedded in the root document.

    Attributes:
        id_path: Stable identity used to look up the document's connection
        language: Language of the document (e.g. ``"python"``, ``"r"``)
    """

    id_path: str
    language: str


@dataclass(frozen=True, slots=True)
class VirtualRegion:
    """Span of the root document that belongs to one virtual document.

    ``root_start`` maps to ``virtual_start``; both ends are inclusive so that a
    cursor sitting right after the last character still belongs to the region.
    """

    document: VirtualDocument
    root_start: RootPosition
    root_end: RootPosition
    virtual_start: VirtualPosition = field(default_factory=lambda: VirtualPosition(0, 0))

    def __post_init__(self) -> None:
        ensure_position(self.root_start, RootPosition)
        ensure_position(self.root_end, RootPosition)
        ensure_position(self.virtual_start, VirtualPosition)
        if self.root_end < self.root_start:
            raise ValueError(
                f"Region for {self.document.id_path!r} ends before it starts: "
                f"{self.root_start} > {self.root_end}"
            )

    def contains(self, position: RootPosition) -> bool:
        return self.root_start <= ensure_position(position, RootPosition) <= self.root_end
