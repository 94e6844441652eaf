"""Position types for the three coordinate spaces.

An editor position is what the editing widget reports, a root position lives
in the composite document the user sees, and a virtual position lives inside
one virtual document. The three are deliberately separate classes: a function
expecting one of them rejects the others instead of reading a foreign
``line``/``column`` pair.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import TypeVar

__all__ = [
    "EditorPosition",
    "RootPosition",
    "VirtualPosition",
    "Token",
    "EditorToken",
    "ensure_position",
]


def _check_coordinates(line: int, column: int) -> None:
    if line < 0 or column < 0:
        raise ValueError(f"Positions must be non-negative, got line={line} column={column}")


@dataclass(frozen=True, slots=True, order=True)
class EditorPosition:
    """Position as exposed by a single editor widget."""

    line: int
    column: int

    def __post_init__(self) -> None:
        _check_coordinates(self.line, self.column)


@dataclass(frozen=True, slots=True, order=True)
class RootPosition:
    """Position in the composite root document."""

    line: int
    column: int

    def __post_init__(self) -> None:
        _check_coordinates(self.line, self.column)


@dataclass(frozen=True, slots=True, order=True)
class VirtualPosition:
    """Position inside one virtual document."""

    line: int
    column: int

    def __post_init__(self) -> None:
        _check_coordinates(self.line, self.column)


P = TypeVar("P", EditorPosition, RootPosition, VirtualPosition)


def ensure_position(position: object, expected: type[P]) -> P:
    """Return ``position`` if it is an instance of ``expected``.

    Raises:
        TypeError: If a position of another coordinate space is passed
    """
    if type(position) is not expected:
        raise TypeError(
            f"Expected {expected.__name__}, got {type(position).__name__}"
        )
    return position  # type: ignore[return-value]


@dataclass(frozen=True, slots=True)
class Token:
    """A token expressed in the coordinates of its owning virtual document."""

    text: str
    offset: int
    start: VirtualPosition
    end: VirtualPosition

    @property
    def span(self) -> tuple[VirtualPosition, VirtualPosition]:
        return self.start, self.end


@dataclass(frozen=True, slots=True)
class EditorToken:
    """Raw token reported by the editor's tokenizer.

    Attributes:
        value: Token text
        offset: Character offset of the token start in the editor text
        type: Lexical category (``"string"``, ``"comment"``, ...), empty when unknown
    """

    value: str
    offset: int
    type: str = ""

    @property
    def end_offset(self) -> int:
        return self.offset + len(self.value)
