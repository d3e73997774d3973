"""End-to-end flow: real stdio MCP server, scripted chat model, real engine."""

import sys
from unittest.mock import AsyncMock, MagicMock

import pytest
from langchain_core.messages import AIMessage, ToolMessage

pytest.importorskip("mcp")

from delegateAgent.config import DelegateConfig, Settings
from delegateAgent.execution import CompletedResult, PausedResult
from delegateAgent.models import ProviderRegistry
from delegateAgent.runtime import build_application
from delegateAgent.server import dispatch_tool_call

pytestmark = pytest.mark.integration


def scripted_model(*responses):
    model = MagicMock()
    model.bind_tools.return_value = model
    model.ainvoke = AsyncMock(side_effect=list(responses))
    return model


@pytest.fixture
def app_config(test_server_path):
    return DelegateConfig.model_validate(
        {
            "mcps": {
                "echo": {"command": sys.executable, "args": [str(test_server_path)]},
                "ghost": {"command": "/nonexistent/definitely-not-a-server"},
            },
            "tools": [
                {
                    "name": "shout",
                    "description": "Echo a message through the downstream server",
                    "arguments": {"type": "object", "properties": {"text": {"type": "string"}}},
                    "internal_tools": {"echo": ["echo", "add"]},
                    "provider": "scripted",
                    "model": "scripted-1",
                    "interactive": True,
                },
                {
                    "name": "haunted",
                    "description": "Needs a server that never starts",
                    "internal_tools": {"ghost": ["boo"]},
                    "provider": "scripted",
                    "model": "scripted-1",
                },
            ],
        }
    )


@pytest.fixture
def build_app(app_config):
    async def _build(model):
        registry = ProviderRegistry(loader=None)
        registry.register("scripted", lambda model_id, **kwargs: model)
        app = await build_application(app_config, Settings(), registry=registry)
        return app

    return _build


@pytest.mark.asyncio
async def test_task_calls_downstream_echo(build_app):
    model = scripted_model(
        AIMessage(content="", tool_calls=[{"name": "echo__echo", "args": {"message": "hi"}, "id": "c1"}]),
        AIMessage(content="The server said: Echo: hi"),
    )
    app = await build_app(model)

    try:
        assert app.engine.has_context("shout")
        assert not app.engine.has_context("haunted")

        result = await app.engine.execute("shout", {"text": "hi"})

        assert isinstance(result, CompletedResult)
        assert result.text == "The server said: Echo: hi"
        tool_messages = [m for m in result.messages if isinstance(m, ToolMessage)]
        assert tool_messages[0].content == "Echo: hi"
    finally:
        await app.shutdown()


@pytest.mark.asyncio
async def test_pause_reply_round_trip(build_app):
    model = scripted_model(
        AIMessage(content="", tool_calls=[{"name": "ask_orchestrator", "args": {"question": "Which version?"}, "id": "c1"}]),
        AIMessage(content="", tool_calls=[{"name": "echo__add", "args": {"a": 1, "b": 2}, "id": "c2"}]),
        AIMessage(content="v3 it is; 1 + 2 = 3"),
    )
    app = await build_app(model)

    try:
        paused = await app.engine.execute("shout", {"text": "install"})
        assert isinstance(paused, PausedResult)
        assert (paused.session_id, paused.question) == (0, "Which version?")

        content = await dispatch_tool_call(app.engine, "reply", {"session_id": 0, "payload": {"answer": "v3"}})

        assert content[0].text == "v3 it is; 1 + 2 = 3"
        assert app.sessions.active_count == 0
    finally:
        await app.shutdown()
