"""Conversions between editor, root and virtual positions.

Editors are stacked vertically in the root document, so an editor position
maps to the root by adding the editor's first root line. A root position maps
into a virtual document through the region the document occupies: lines shift
by the region's line delta, and only the region's first line shifts columns.
"""

from __future__ import annotations

from typing import Mapping

from vdcomplete.domain.documents import VirtualRegion
from vdcomplete.domain.errors import UnmappablePosition
from vdcomplete.domain.positions import (
    EditorPosition,
    RootPosition,
    VirtualPosition,
    ensure_position,
)

__all__ = ["CoordinateMapper", "editor_to_root", "root_to_virtual"]


def editor_to_root(position: EditorPosition, line_offset: int) -> RootPosition:
    ensure_position(position, EditorPosition)
    if line_offset < 0:
        raise UnmappablePosition(f"Editor starts at negative root line {line_offset}")
    return RootPosition(position.line + line_offset, position.column)


def root_to_virtual(position: RootPosition, region: VirtualRegion) -> VirtualPosition:
    ensure_position(position, RootPosition)
    if not region.contains(position):
        raise UnmappablePosition(
            f"{position} lies outside the region of {region.document.id_path!r} "
            f"({region.root_start} - {region.root_end})"
        )
    line = region.virtual_start.line + position.line - region.root_start.line
    if position.line == region.root_start.line:
        column = region.virtual_start.column + position.column - region.root_start.column
    else:
        column = position.column
    return VirtualPosition(line, column)


class CoordinateMapper:
    """Maps positions of known editors into root and virtual coordinates.

    The editor offsets mapping is owned by the document-management layer and
    read on every call, so editors added or moved later are picked up.
    """

    def __init__(self, editor_offsets: Mapping[str, int]):
        """
        Args:
            editor_offsets: First root line of each editor, keyed by editor id
        """
        self._editor_offsets = editor_offsets

    def to_root(self, position: EditorPosition, editor_id: str) -> RootPosition:
        """
        Convert an editor position to the root document.

        Raises:
            UnmappablePosition: If the editor is not part of the root document
        """
        try:
            line_offset = self._editor_offsets[editor_id]
        except KeyError:
            raise UnmappablePosition(f"Unknown editor {editor_id!r}") from None
        return editor_to_root(position, line_offset)

    def to_virtual(self, position: RootPosition, region: VirtualRegion) -> VirtualPosition:
        """
        Convert a root position into the region's virtual document.

        Raises:
            UnmappablePosition: If the position is outside the region
        """
        return root_to_virtual(position, region)
