"""
CompletionController - turns editor events into completion replies.
"""

from __future__ import annotations

from collections.abc import Callable, Iterable

from vdcomplete.application.fetcher import CompletionFetcher
from vdcomplete.application.trigger_policy import EditorChange, TriggerPolicy, extract_last_character
from vdcomplete.domain.completion import CompletionReply, EditorRequest, TriggerKind
from vdcomplete.domain.errors import CompletionError
from vdcomplete.domain.protocols import Editor
from vdcomplete.logger import get_logger

logger = get_logger("completion.controller")


class CompletionController:
    """
    Drives completion for one editor.

    Replies to requests superseded by a newer one are dropped, and request
    failures are logged and reported as "no completions" so that nothing
    escapes to the UI.
    """

    def __init__(
        self,
        editor: Editor,
        fetcher: CompletionFetcher,
        policy: TriggerPolicy,
        trigger_characters: Callable[[str], Iterable[str]],
        active_document: Callable[[], str | None],
    ):
        """
        Args:
            editor: Editor being completed
            fetcher: Fetcher serving the editor
            policy: Trigger policy deciding on auto-invocation
            trigger_characters: Provider of the trigger characters of a virtual document
            active_document: Provider of the id path of the virtual document at the cursor
        """
        self._editor = editor
        self._fetcher = fetcher
        self._policy = policy
        self._trigger_characters_provider = trigger_characters
        self._active_document = active_document
        self._completion_characters: dict[str, list[str]] = {}
        self._generation = 0

    @property
    def completion_characters(self) -> list[str]:
        """Trigger characters of the document at the cursor.

        Cached per document once its connection reports some.
        """
        id_path = self._active_document()
        if id_path is None:
            return []
        characters = self._completion_characters.get(id_path)
        if not characters:
            characters = list(self._trigger_characters_provider(id_path))
            self._completion_characters[id_path] = characters
        return characters

    async def after_change(self, change: EditorChange) -> CompletionReply | None:
        """
        Auto-invoke completion if the change typed a trigger character.

        Returns:
            The reply, or None when nothing was requested or nothing is shown
        """
        last_character = extract_last_character(change)
        if not self._policy.should_auto_invoke(last_character, self.completion_characters):
            return None
        logger.debug(f"Trigger character {last_character!r} typed, invoking completer")
        return await self.invoke(TriggerKind.TRIGGER_CHARACTER)

    async def invoke(self, trigger_kind: TriggerKind = TriggerKind.INVOKED) -> CompletionReply | None:
        """Request completions at the cursor."""
        self._generation += 1
        generation = self._generation

        editor = self._editor
        request = EditorRequest(
            text=editor.text,
            offset=editor.get_offset_at(editor.get_cursor_position()),
        )

        try:
            reply = await self._fetcher.fetch(request, trigger_kind)
        except CompletionError as exc:
            logger.error(f"Completion request failed: {exc}")
            return None

        if generation != self._generation:
            logger.debug(f"Discarding stale completion reply (request {generation}, current {self._generation})")
            return None
        return reply
