"""Tests for the scenario replay CLI."""

import json
from pathlib import Path

import pytest
from typer.testing import CliRunner

from vdcomplete.cli import cli, load_scenario, replay_scenario
from vdcomplete.domain.completion import TriggerKind
from vdcomplete.logger import setup_logger

runner = CliRunner()


def notebook_scenario(**overrides):
    scenario = {
        "editor": {"id": "cell-1", "text": "import os\nme"},
        "documents": [
            {"idPath": "notebook.ipynb", "language": "python", "rootStart": [0, 0], "rootEnd": [10, 0]},
        ],
        "analysis": {
            "notebook.ipynb": {"items": [{"label": "mean"}, {"label": "median", "kind": 3}], "triggerCharacters": ["."]},
        },
    }
    scenario.update(overrides)
    return scenario


@pytest.fixture(autouse=True)
def quiet_logs(monkeypatch):
    monkeypatch.setenv("VDCOMPLETE_LOG_LEVEL", "ERROR")
    monkeypatch.delenv("VDCOMPLETE_SUPPRESS_IN", raising=False)
    monkeypatch.setattr("vdcomplete.config.load_dotenv", lambda: False)
    yield
    # CliRunner swaps sys.stderr while the command runs
    setup_logger(log_level="WARNING")


def test_load_scenario():
    container, typed, trigger_kind = load_scenario(notebook_scenario(triggerKind="trigger_character"))

    assert typed is None
    assert trigger_kind == TriggerKind.TRIGGER_CHARACTER
    assert container.editor.text == "import os\nme"
    assert [d.id_path for d in container.registry.documents()] == ["notebook.ipynb"]
    assert container.runtime is None


@pytest.mark.asyncio
async def test_replay_invocation():
    reply = await replay_scenario(notebook_scenario())

    assert reply.to_wire() == {
        "rangeStart": 10,
        "rangeEnd": 12,
        "matches": ["mean", "median"],
        "metadata": {"itemTypes": [{"text": "mean", "type": ""}, {"text": "median", "type": "Function"}]},
    }


@pytest.mark.asyncio
async def test_replay_typed_trigger_character():
    scenario = notebook_scenario(typed=".")
    scenario["editor"]["text"] = "os"
    scenario["analysis"]["notebook.ipynb"]["items"] = [{"label": "path"}]

    reply = await replay_scenario(scenario)

    assert reply.matches == ["path"]
    assert (reply.range_start, reply.range_end) == (3, 3)


@pytest.mark.asyncio
async def test_replay_with_failing_runtime_keeps_analysis():
    reply = await replay_scenario(notebook_scenario(runtime={"language": "python", "error": "kernel died"}))

    assert reply.matches == ["mean", "median"]


@pytest.mark.asyncio
async def test_replay_falls_back_to_context():
    scenario = notebook_scenario()
    scenario["editor"]["text"] = "measure = 1\nme"
    scenario["analysis"]["notebook.ipynb"] = {"error": "server crashed"}

    reply = await replay_scenario(scenario)

    assert reply.matches == ["measure"]
    assert (reply.range_start, reply.range_end) == (12, 14)


def test_replay_command_prints_reply(tmp_path):
    path = tmp_path / "scenario.json"
    path.write_text(json.dumps(notebook_scenario()), encoding="utf-8")

    result = runner.invoke(cli, ["replay", str(path)])

    assert result.exit_code == 0
    assert '"matches": [\n    "mean",\n    "median"\n  ]' in result.output


def test_replay_command_suppressed_completion_prints_null(tmp_path):
    scenario = notebook_scenario()
    scenario["editor"]["text"] = "x = 'me"
    path = tmp_path / "scenario.json"
    path.write_text(json.dumps(scenario), encoding="utf-8")

    result = runner.invoke(cli, ["replay", str(path)])

    assert result.exit_code == 0
    assert "null" in result.output


def test_replay_command_rejects_invalid_json(tmp_path):
    path = tmp_path / "scenario.json"
    path.write_text("{not json", encoding="utf-8")

    result = runner.invoke(cli, ["replay", str(path)])

    assert result.exit_code == 1


def test_replay_command_rejects_malformed_scenario(tmp_path):
    path = tmp_path / "scenario.json"
    path.write_text(json.dumps({"documents": []}), encoding="utf-8")

    result = runner.invoke(cli, ["replay", str(path)])

    assert result.exit_code == 1


def test_bundled_notebook_scenario():
    path = Path(__file__).parent.parent / "scenarios" / "notebook.json"

    result = runner.invoke(cli, ["replay", str(path)])

    assert result.exit_code == 0
    assert '"memoryview",\n    "mean",\n    "median"' in result.output
