"""Coordinate mapping and virtual document resolution."""

from vdcomplete.core.coordinates import CoordinateMapper, editor_to_root, root_to_virtual
from vdcomplete.core.registry import VirtualDocumentRegistry

__all__ = [
    "CoordinateMapper",
    "editor_to_root",
    "root_to_virtual",
    "VirtualDocumentRegistry",
]
