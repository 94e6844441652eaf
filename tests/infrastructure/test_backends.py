"""Tests for backend adapters."""

import asyncio

import pytest

from tests.conftest import StubReplyBackend
from vdcomplete.domain.completion import CompletionReply, EditorRequest, TriggerKind
from vdcomplete.domain.errors import BackendFailure
from vdcomplete.domain.positions import Token, VirtualPosition
from vdcomplete.infrastructure.backends import (
    ContextBackend,
    LanguageServerBackend,
    RuntimeAndContextBackend,
    RuntimeCompleter,
)

TOKEN = Token(text="me", offset=10, start=VirtualPosition(1, 0), end=VirtualPosition(1, 2))


class FakeConnection:
    def __init__(self, result=None, error=None, delay=0.0):
        self.result = result
        self.error = error
        self.delay = delay

    async def get_completion(self, cursor, token, typed_character, trigger_kind):
        if self.delay:
            await asyncio.sleep(self.delay)
        if self.error is not None:
            raise self.error
        return self.result

    def get_language_completion_characters(self):
        return None


class FakeSession:
    language = "python"

    def __init__(self, content=None, error=None):
        self.content = content or {}
        self.error = error
        self.calls = []

    async def complete(self, code, cursor_pos):
        self.calls.append((code, cursor_pos))
        if self.error is not None:
            raise self.error
        return self.content


class TestLanguageServerBackend:
    @pytest.mark.asyncio
    async def test_parses_raw_items(self):
        backend = LanguageServerBackend(
            FakeConnection([{"label": "mean(data)", "insertText": "mean", "kind": 3, "sortText": "a"}])
        )

        result = await backend.get_completion(VirtualPosition(1, 2), TOKEN, "e", TriggerKind.INVOKED)

        assert [item.display_text for item in result] == ["mean"]
        assert result[0].kind_name == "Function"

    @pytest.mark.asyncio
    async def test_accepts_completion_lists(self):
        backend = LanguageServerBackend(FakeConnection({"isIncomplete": False, "items": [{"label": "median"}]}))

        result = await backend.get_completion(VirtualPosition(1, 2), TOKEN, "e", TriggerKind.INVOKED)

        assert [item.label for item in result] == ["median"]

    @pytest.mark.asyncio
    async def test_none_result_is_empty(self):
        backend = LanguageServerBackend(FakeConnection(None))

        assert await backend.get_completion(VirtualPosition(1, 2), TOKEN, None, TriggerKind.INVOKED) == []

    @pytest.mark.asyncio
    async def test_transport_error_becomes_backend_failure(self):
        backend = LanguageServerBackend(FakeConnection(error=ConnectionResetError("closed")))

        with pytest.raises(BackendFailure) as exc_info:
            await backend.get_completion(VirtualPosition(1, 2), TOKEN, "e", TriggerKind.INVOKED)
        assert isinstance(exc_info.value.__cause__, ConnectionResetError)

    @pytest.mark.asyncio
    async def test_timeout_becomes_backend_failure(self):
        backend = LanguageServerBackend(FakeConnection([], delay=1.0), timeout=0.01)

        with pytest.raises(BackendFailure):
            await backend.get_completion(VirtualPosition(1, 2), TOKEN, "e", TriggerKind.INVOKED)

    @pytest.mark.asyncio
    async def test_malformed_item_becomes_backend_failure(self):
        backend = LanguageServerBackend(FakeConnection([{"kind": 3}]))

        with pytest.raises(BackendFailure):
            await backend.get_completion(VirtualPosition(1, 2), TOKEN, "e", TriggerKind.INVOKED)

    @pytest.mark.asyncio
    @pytest.mark.parametrize("result", [42, {"items": 5}, "mean", [None]])
    async def test_malformed_result_becomes_backend_failure(self, result):
        backend = LanguageServerBackend(FakeConnection(result))

        with pytest.raises(BackendFailure):
            await backend.get_completion(VirtualPosition(1, 2), TOKEN, "e", TriggerKind.INVOKED)

    def test_missing_trigger_characters(self):
        assert LanguageServerBackend(FakeConnection()).get_language_completion_characters() == []


class TestRuntimeCompleter:
    @pytest.mark.asyncio
    async def test_converts_complete_reply(self):
        session = FakeSession(
            {
                "status": "ok",
                "matches": ["mean", "median", "mean"],
                "cursor_start": 10,
                "cursor_end": 12,
                "metadata": {
                    "_jupyter_types_experimental": [
                        {"text": "mean", "type": "function", "start": 10, "end": 12},
                        {"text": "median", "type": "function", "start": 10, "end": 12},
                    ]
                },
            }
        )
        completer = RuntimeCompleter(session)

        reply = await completer.fetch(EditorRequest(text="import os\nme", offset=12))

        assert session.calls == [("import os\nme", 12)]
        assert completer.language == "python"
        assert reply.matches == ["mean", "median"]
        assert (reply.range_start, reply.range_end) == (10, 12)
        assert reply.type_tags == {"mean": "function", "median": "function"}

    @pytest.mark.asyncio
    async def test_error_status_is_a_failure(self):
        completer = RuntimeCompleter(FakeSession({"status": "error", "ename": "KeyError"}))

        with pytest.raises(BackendFailure):
            await completer.fetch(EditorRequest(text="", offset=0))

    @pytest.mark.asyncio
    @pytest.mark.parametrize(
        "content",
        [
            None,
            ["mean"],
            {"status": "ok", "matches": ["mean"], "cursor_start": "start"},
            {"status": "ok", "matches": [["mean"]]},
            {"status": "ok", "matches": ["mean"], "metadata": {"_jupyter_types_experimental": [{"type": "function"}]}},
            {"status": "ok", "matches": ["mean"], "metadata": ["function"]},
        ],
    )
    async def test_malformed_reply_is_a_failure(self, content):
        session = FakeSession()
        session.content = content

        with pytest.raises(BackendFailure):
            await RuntimeCompleter(session).fetch(EditorRequest(text="import os\nme", offset=12))

    @pytest.mark.asyncio
    async def test_session_error_is_a_failure(self):
        completer = RuntimeCompleter(FakeSession(error=RuntimeError("kernel died")))

        with pytest.raises(BackendFailure):
            await completer.fetch(EditorRequest(text="", offset=0))


class TestContextBackend:
    @pytest.mark.asyncio
    async def test_completes_from_words_in_text(self):
        text = "measure = 1\nmedian = measure\nme"

        reply = await ContextBackend().fetch(EditorRequest(text=text, offset=len(text)))

        assert reply.matches == ["measure", "median"]
        assert (reply.range_start, reply.range_end) == (len(text) - 2, len(text))

    @pytest.mark.asyncio
    async def test_nothing_to_complete_after_operator(self):
        reply = await ContextBackend().fetch(EditorRequest(text="x.", offset=2))

        assert reply.is_empty()
        assert reply.range_start == 2


class TestRuntimeAndContextBackend:
    @pytest.mark.asyncio
    async def test_runtime_matches_come_first(self):
        runtime = StubReplyBackend(CompletionReply.build(12, 14, ["memoryview", "measure"]))
        text = "measure = 1\nme"

        reply = await RuntimeAndContextBackend(runtime, ContextBackend()).fetch(
            EditorRequest(text=text, offset=len(text))
        )

        assert reply.matches == ["memoryview", "measure"]

    @pytest.mark.asyncio
    async def test_runtime_failure_leaves_context(self):
        runtime = StubReplyBackend(error=BackendFailure("runtime", "down"))
        text = "measure = 1\nme"

        reply = await RuntimeAndContextBackend(runtime, ContextBackend()).fetch(
            EditorRequest(text=text, offset=len(text))
        )

        assert reply.matches == ["measure"]

    @pytest.mark.asyncio
    async def test_empty_runtime_gives_context(self):
        runtime = StubReplyBackend(CompletionReply.empty(14))
        text = "measure = 1\nme"

        reply = await RuntimeAndContextBackend(runtime, ContextBackend()).fetch(
            EditorRequest(text=text, offset=len(text))
        )

        assert (reply.range_start, reply.matches) == (12, ["measure"])
