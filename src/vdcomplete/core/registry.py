"""Registry resolving root positions to the virtual documents that own them."""

from __future__ import annotations

from typing import Iterator

from vdcomplete.core.coordinates import CoordinateMapper, root_to_virtual
from vdcomplete.domain.documents import VirtualDocument, VirtualRegion
from vdcomplete.domain.errors import NoOwningDocument, UnmappablePosition
from vdcomplete.domain.positions import RootPosition, VirtualPosition, ensure_position
from vdcomplete.logger import get_logger

logger = get_logger("core.registry")


class VirtualDocumentRegistry:
    """Regions of the root document and the virtual documents they belong to.

    The document-management layer registers and unregisters regions as the
    root document changes; the completion pipeline only reads them.

    Resolution picks, among the regions containing a position, the one that
    starts last. Embedded regions therefore win over the host document that
    surrounds them, and at a boundary shared by two regions the one starting
    there wins. Callers pass the start of a token, so a token touching the end
    of one region and the start of the next is owned by the next one.
    """

    def __init__(self, mapper: CoordinateMapper | None = None):
        self._mapper = mapper
        self._regions: list[VirtualRegion] = []

    def register(
        self,
        document: VirtualDocument,
        root_start: RootPosition,
        root_end: RootPosition,
        virtual_start: VirtualPosition | None = None,
    ) -> VirtualRegion:
        region = VirtualRegion(
            document=document,
            root_start=root_start,
            root_end=root_end,
            virtual_start=virtual_start or VirtualPosition(0, 0),
        )
        self._regions.append(region)
        logger.debug(
            f"Registered {document.language} document {document.id_path!r} "
            f"at {root_start} - {root_end}"
        )
        return region

    def unregister(self, id_path: str) -> None:
        """Remove every region of the document; unknown ids are ignored."""
        self._regions = [r for r in self._regions if r.document.id_path != id_path]

    def clear(self) -> None:
        self._regions.clear()

    def documents(self) -> list[VirtualDocument]:
        seen: dict[str, VirtualDocument] = {}
        for region in self._regions:
            seen.setdefault(region.document.id_path, region.document)
        return list(seen.values())

    def __len__(self) -> int:
        return len(self._regions)

    def __iter__(self) -> Iterator[VirtualRegion]:
        return iter(self._regions)

    def region_at(self, position: RootPosition) -> VirtualRegion:
        """
        Find the region owning a root position.

        Raises:
            NoOwningDocument: If no registered region contains the position
        """
        ensure_position(position, RootPosition)
        owner: VirtualRegion | None = None
        for region in self._regions:
            # later registrations win ties
            if region.contains(position) and (owner is None or region.root_start >= owner.root_start):
                owner = region
        if owner is None:
            raise NoOwningDocument(f"No virtual document contains {position}")
        return owner

    def document_at(self, position: RootPosition) -> VirtualDocument:
        return self.region_at(position).document

    def region_of(self, document: VirtualDocument, position: RootPosition) -> VirtualRegion:
        """
        Find the region of ``document`` containing ``position``.

        Raises:
            NoOwningDocument: If the document is not registered
            UnmappablePosition: If none of the document's regions contains the position
        """
        regions = [r for r in self._regions if r.document == document]
        if not regions:
            raise NoOwningDocument(f"{document.id_path!r} is not registered")
        for region in regions:
            if region.contains(position):
                return region
        raise UnmappablePosition(f"{position} lies outside every region of {document.id_path!r}")

    def to_virtual(
        self,
        position: RootPosition,
        document: VirtualDocument | None = None,
    ) -> VirtualPosition:
        """
        Convert a root position into virtual coordinates.

        Args:
            position: Root position to convert
            document: Document whose coordinates to use; defaults to the owner of the position

        Raises:
            NoOwningDocument: If no suitable region is registered
            UnmappablePosition: If the conversion itself is impossible
        """
        region = self.region_at(position) if document is None else self.region_of(document, position)
        if self._mapper is not None:
            return self._mapper.to_virtual(position, region)
        return root_to_virtual(position, region)
