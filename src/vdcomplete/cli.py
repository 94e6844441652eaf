"""Typer CLI replaying recorded completion scenarios through the pipeline."""

from __future__ import annotations

import asyncio
import json
from pathlib import Path
from typing import Any, Optional, Sequence

import typer

from vdcomplete.application.trigger_policy import EditorChange
from vdcomplete.config import load_completion_config
from vdcomplete.domain.completion import CompletionReply, TriggerKind
from vdcomplete.domain.documents import VirtualDocument
from vdcomplete.domain.positions import EditorPosition, RootPosition, Token, VirtualPosition
from vdcomplete.infrastructure.editor import TextBufferEditor
from vdcomplete.logger import get_logger, setup_logger
from vdcomplete.presentation.container import CompletionContainer

logger = get_logger("cli")

cli = typer.Typer(
    name="vdcomplete",
    help="Completion broker for editors made of several virtual documents",
    epilog="""
    Examples:
    $ vdcomplete replay scenarios/notebook.json --debug
    """,
    add_completion=False,
)


class ReplayConnection:
    """Language server connection answering with recorded items."""

    def __init__(self, recorded: dict[str, Any]):
        self._items = recorded.get("items", [])
        self._error = recorded.get("error")
        self._trigger_characters = recorded.get("triggerCharacters", [])
        self.calls: list[dict[str, Any]] = []

    async def get_completion(
        self,
        cursor: VirtualPosition,
        token: Token,
        typed_character: str | None,
        trigger_kind: TriggerKind,
    ) -> Sequence[dict[str, Any]]:
        self.calls.append(
            {"cursor": cursor, "token": token, "typed_character": typed_character, "trigger_kind": trigger_kind}
        )
        if self._error:
            raise ConnectionError(self._error)
        return self._items

    def get_language_completion_characters(self) -> Sequence[str]:
        return self._trigger_characters


class ReplayRuntimeSession:
    """Runtime session answering with a recorded ``complete_reply``."""

    def __init__(self, recorded: dict[str, Any]):
        self.language = recorded["language"]
        self._reply = recorded.get("reply", {})
        self._error = recorded.get("error")

    async def complete(self, code: str, cursor_pos: int) -> dict[str, Any]:
        if self._error:
            raise ConnectionError(self._error)
        return self._reply


def _position(cls, value: Sequence[int]):
    line, column = value
    return cls(int(line), int(column))


def load_scenario(data: dict[str, Any]) -> tuple[CompletionContainer, Optional[str], TriggerKind]:
    """Build a container from a scenario; also return the text to type and the trigger kind."""
    editor_data = data["editor"]
    cursor = editor_data.get("cursor")
    editor = TextBufferEditor(
        editor_data.get("id", "editor"),
        editor_data.get("text", ""),
        _position(EditorPosition, cursor) if cursor is not None else None,
    )

    connections = {id_path: ReplayConnection(recorded) for id_path, recorded in data.get("analysis", {}).items()}
    runtime_data = data.get("runtime")
    container = CompletionContainer(
        editor,
        {editor.editor_id: int(editor_data.get("rootLineOffset", 0))},
        connections,
        runtime_session=ReplayRuntimeSession(runtime_data) if runtime_data else None,
        config=load_completion_config(),
    )
    for document in data.get("documents", []):
        container.registry.register(
            VirtualDocument(id_path=document["idPath"], language=document["language"]),
            _position(RootPosition, document["rootStart"]),
            _position(RootPosition, document["rootEnd"]),
            _position(VirtualPosition, document.get("virtualStart", [0, 0])),
        )

    trigger_kind = TriggerKind[data.get("triggerKind", "invoked").upper()]
    return container, data.get("typed"), trigger_kind


async def replay_scenario(data: dict[str, Any]) -> Optional[CompletionReply]:
    """Run one scenario through the controller."""
    container, typed, trigger_kind = load_scenario(data)
    controller = container.controller
    if typed is not None:
        lines = container.editor.insert(typed)
        return await controller.after_change(EditorChange(text=lines))
    return await controller.invoke(trigger_kind)


@cli.callback()
def main(
    debug: bool = typer.Option(False, "--debug", help="Enable debug logging"),
):
    """Completion broker tools."""
    setup_logger(log_level="DEBUG" if debug else load_completion_config().log_level)


@cli.command()
def replay(
    scenario: Path = typer.Argument(..., exists=True, dir_okay=False, readable=True, help="Scenario JSON file"),
):
    """Replay a recorded completion scenario and print the reply."""
    try:
        data = json.loads(scenario.read_text(encoding="utf-8"))
    except json.JSONDecodeError as e:
        typer.echo(f"❌ Invalid scenario JSON: {e}", err=True)
        raise typer.Exit(code=1)

    try:
        reply = asyncio.run(replay_scenario(data))
    except (KeyError, ValueError, TypeError) as e:
        typer.echo(f"❌ Malformed scenario: {e}", err=True)
        raise typer.Exit(code=1)

    logger.info(f"Replayed {scenario.name}: {'no completion' if reply is None else f'{len(reply.matches)} matches'}")
    typer.echo(json.dumps(reply.to_wire() if reply is not None else None, indent=2))


if __name__ == "__main__":
    cli()
