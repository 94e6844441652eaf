"""
Gates deciding whether completion runs for an edit or an invocation.
"""

from __future__ import annotations

from collections.abc import Iterable, Sequence
from dataclasses import dataclass, field

from vdcomplete.config import DEFAULT_SUPPRESSED_TOKEN_TYPES
from vdcomplete.logger import get_logger

logger = get_logger("completion.trigger")


@dataclass(frozen=True, slots=True)
class EditorChange:
    """Text change reported by the editor.

    Attributes:
        text: Inserted lines (CodeMirror style; ``[""]`` or ``[]`` for deletions)
        removed: Removed lines
    """

    text: Sequence[str] = ()
    removed: Sequence[str] = ()


def extract_last_character(change: EditorChange) -> str:
    """Return the last inserted character, or an empty string for deletions."""
    inserted = "\n".join(change.text)
    return inserted[-1] if inserted else ""


@dataclass(frozen=True)
class TriggerPolicy:
    """Suppression and auto-invoke checks.

    Suppression looks at the token under the cursor before anything is sent
    to a backend; auto-invocation looks at the character just inserted and
    additionally applies only to completions not explicitly requested by the
    user.
    """

    suppressed_token_types: frozenset[str] = field(default=DEFAULT_SUPPRESSED_TOKEN_TYPES)

    def should_suppress(self, token_type: str | None) -> bool:
        suppressed = bool(token_type) and token_type in self.suppressed_token_types
        if suppressed:
            logger.debug(f"Suppressing completion in {token_type} token")
        return suppressed

    def should_auto_invoke(self, last_typed_char: str | None, trigger_characters: Iterable[str]) -> bool:
        if not last_typed_char:
            return False
        return last_typed_char in set(trigger_characters)
