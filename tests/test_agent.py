"""
Tests for the agent service.
"""

import shutil
from unittest.mock import MagicMock

import pytest
from langchain_core.messages import AIMessage, HumanMessage, SystemMessage, ToolMessage

from webvision.agent import AgentService, create_chat_model, message_text
from webvision.config import AgentConfig
from webvision.tools import ToolResult


def tool_call_message(name: str, args: dict, call_id: str = "call_1") -> AIMessage:
    return AIMessage(content="", tool_calls=[{"name": name, "args": args, "id": call_id}])


@pytest.fixture
def config(tmp_path):
    return AgentConfig(max_steps=5, log_runs=False, screenshots_dir=tmp_path)


@pytest.fixture
def browser_tools():
    tools = MagicMock()
    tools.execute.return_value = ToolResult(success=True, message="🌍 Successfully loaded: https://example.com")
    return tools


@pytest.fixture
def browser_manager(browser_tools):
    manager = MagicMock()
    manager.get_browser_tools.return_value = browser_tools
    return manager


@pytest.fixture
def chat_model():
    model = MagicMock()
    model.bind_tools.return_value = MagicMock()
    return model


@pytest.fixture
def agent(config, store, renderer, browser_manager, chat_model):
    store.set_api_key("sk-test-key-123456")
    return AgentService(
        config,
        store,
        renderer,
        browser_manager,
        llm_factory=MagicMock(return_value=chat_model),
    )


class TestAgentRun:
    """Tests for the tool-calling loop."""

    def test_executes_tool_calls_then_answers(self, agent, chat_model, browser_tools, output):
        bound = chat_model.bind_tools.return_value
        bound.invoke.side_effect = [
            tool_call_message("open_url", {"url": "example.com"}),
            AIMessage(content="The title is Example Domain"),
        ]

        answer = agent.run("Open example.com and tell me the title")

        assert answer == "The title is Example Domain"
        browser_tools.execute.assert_called_once_with("open_url", {"url": "example.com"})

        messages = bound.invoke.call_args.args[0]
        assert isinstance(messages[0], SystemMessage)
        assert isinstance(messages[1], HumanMessage)
        tool_messages = [m for m in messages if isinstance(m, ToolMessage)]
        assert len(tool_messages) == 1
        assert tool_messages[0].tool_call_id == "call_1"

        text = output.getvalue()
        assert "Step 1: open_url" in text
        assert "The title is Example Domain" in text

    def test_tools_are_bound_to_model(self, agent, chat_model):
        chat_model.bind_tools.return_value.invoke.return_value = AIMessage(content="done")

        agent.run("anything")

        tools = chat_model.bind_tools.call_args.args[0]
        assert "open_url" in [t.name for t in tools]

    def test_failed_tool_is_reported_to_model(self, agent, chat_model, browser_tools):
        browser_tools.execute.return_value = ToolResult(success=False, message="❌ Element not found: #x")
        bound = chat_model.bind_tools.return_value
        bound.invoke.side_effect = [
            tool_call_message("click_element", {"selector": "#x"}),
            AIMessage(content="Could not find it"),
        ]

        agent.run("click x")

        messages = bound.invoke.call_args.args[0]
        tool_message = next(m for m in messages if isinstance(m, ToolMessage))
        assert tool_message.content.startswith("Error: ")

    def test_step_cap(self, agent, chat_model, browser_tools):
        agent.config.max_steps = 2
        chat_model.bind_tools.return_value.invoke.return_value = tool_call_message("scroll_page", {"pixels": 300})

        answer = agent.run("scroll forever")

        assert answer.startswith("Stopped after 2 steps")
        assert browser_tools.execute.call_count == 2

    def test_missing_api_key_short_circuits(self, config, store, renderer, browser_manager, output):
        llm_factory = MagicMock()
        agent = AgentService(config, store, renderer, browser_manager, llm_factory=llm_factory)

        assert agent.run("Open example.com") is None

        llm_factory.assert_not_called()
        browser_manager.get_browser_tools.assert_not_called()
        assert "/apikey" in output.getvalue()

    def test_environment_key_is_used(self, config, store, renderer, browser_manager, chat_model, monkeypatch):
        monkeypatch.setenv("OPENAI_API_KEY", "sk-from-environment")
        chat_model.bind_tools.return_value.invoke.return_value = AIMessage(content="ok")
        llm_factory = MagicMock(return_value=chat_model)
        agent = AgentService(config, store, renderer, browser_manager, llm_factory=llm_factory)

        assert agent.run("task") == "ok"
        llm_factory.assert_called_once_with(config, "sk-from-environment")

    def test_llm_error_is_rendered(self, agent, chat_model, output):
        chat_model.bind_tools.return_value.invoke.side_effect = RuntimeError("rate limited")

        assert agent.run("task") is None
        assert "rate limited" in output.getvalue()

    def test_run_log_is_written(self, agent, chat_model, isolated_home):
        agent.config.log_runs = True
        chat_model.bind_tools.return_value.invoke.side_effect = [
            tool_call_message("open_url", {"url": "example.com"}),
            AIMessage(content="done"),
        ]

        agent.run("Open example")

        logs = list((isolated_home / "runs").glob("*/steps.jsonl"))
        assert len(logs) == 1
        assert '"tool": "open_url"' in logs[0].read_text(encoding="utf-8")

    def test_run_log_failure_does_not_fail_run(self, agent, chat_model, browser_tools, isolated_home):
        agent.config.log_runs = True
        replies = iter([
            tool_call_message("open_url", {"url": "example.com"}),
            AIMessage(content="done"),
        ])

        def invoke(messages):
            shutil.rmtree(isolated_home / "runs", ignore_errors=True)
            return next(replies)

        chat_model.bind_tools.return_value.invoke.side_effect = invoke

        assert agent.run("Open example") == "done"
        browser_tools.execute.assert_called_once()


class TestHelpers:
    """Tests for model helpers."""

    def test_message_text_from_parts(self):
        message = AIMessage(content=[{"type": "text", "text": "Hello "}, {"type": "text", "text": "world"}])
        assert message_text(message) == "Hello world"

    def test_create_chat_model_uses_endpoint(self, config):
        config.model = "local-model"
        config.model_endpoint = "http://localhost:1234/v1"

        llm = create_chat_model(config, "sk-test-key-123456")

        assert llm.model_name == "local-model"
        assert llm.openai_api_base == "http://localhost:1234/v1"
        assert llm.temperature == 0.1
