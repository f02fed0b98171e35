"""
Agent runs for WebVision.

An agent run takes one natural-language task and lets the chat model call
the browser tool palette until it answers without a tool call.
"""

import logging
import os
from typing import Any, Callable, Optional

from langchain_core.language_models import BaseChatModel
from langchain_core.messages import AIMessage, HumanMessage, SystemMessage, ToolMessage
from langchain_openai import ChatOpenAI

from .browser_manager import LazyBrowserManager
from .config import AgentConfig
from .logger import RunLogger
from .renderer import Renderer
from .settings_store import ConfigStore
from .tool_schemas import build_langchain_tools
from .tools import BrowserTools

logger = logging.getLogger(__name__)


SYSTEM_PROMPT = """You are WebVision, a website automation agent that controls a real browser through tools.

Rules:
- When the user provides a domain like "google.com" or "wikipedia.org", normalize it into a full URL that starts with "https://".
- Use the tools to open URLs, click, type, fill forms, scroll and press keys.
- Never ask the user for clarification; always try to complete the task.
- If the request is not clear, use your best judgement to complete it.
- Use fake data for any form filling such as name, email or phone.
- Call take_screenshot ONLY when you need to analyze what is visible.
- Prefer get_page_content to read text from the page.
- If a tool returns an error, try a different approach instead of repeating it.
- Visit every page you need in order to complete the task.
- When the task is complete, reply with a concise final answer and no tool calls.

Example: "Go to google.com and search for cats" means: open_url https://google.com, fill the search box with "cats", press Enter, then read the results."""


LLMFactory = Callable[[AgentConfig, str], BaseChatModel]


def create_chat_model(config: AgentConfig, api_key: str) -> BaseChatModel:
    """Create the OpenAI-compatible chat model for agent runs."""
    llm_kwargs: dict[str, Any] = {
        "model": config.model.strip(),
        "api_key": api_key,
        "temperature": 0.1,
        "request_timeout": 120,
    }
    if config.model_endpoint:
        llm_kwargs["base_url"] = config.model_endpoint
    return ChatOpenAI(**llm_kwargs)


def message_text(message: AIMessage) -> str:
    """Extract plain text from a model message (string or content parts)."""
    content = message.content
    if isinstance(content, str):
        return content.strip()
    parts = []
    for part in content:
        if isinstance(part, str):
            parts.append(part)
        elif isinstance(part, dict) and part.get("type") == "text":
            parts.append(part.get("text", ""))
    return "".join(parts).strip()


class AgentService:
    """Runs tasks through the chat model and the browser tool palette."""

    def __init__(
        self,
        config: AgentConfig,
        store: ConfigStore,
        renderer: Renderer,
        browser_manager: LazyBrowserManager,
        llm_factory: Optional[LLMFactory] = None,
    ):
        """Initialize the agent service.

        Args:
            config: Agent configuration
            store: Persisted user configuration (source of the API key)
            renderer: Output renderer
            browser_manager: Owner of the shared browser session
            llm_factory: Builds the chat model from config and API key
        """
        self.config = config
        self.store = store
        self.renderer = renderer
        self.browser_manager = browser_manager
        self.llm_factory = llm_factory or create_chat_model

    def _api_key(self) -> Optional[str]:
        return self.store.get_api_key() or os.getenv("OPENAI_API_KEY")

    def run(self, task: str) -> Optional[str]:
        """Run one task to completion.

        Args:
            task: Natural-language task from the user

        Returns:
            The model's final answer, or None if the run could not start or failed
        """
        self.renderer.show_agent_start(task)

        api_key = self._api_key()
        if not api_key:
            self.renderer.show_error("No API key configured. Use /apikey to set one.")
            return None

        try:
            browser_tools = self.browser_manager.get_browser_tools()
            answer = self._run_loop(task, browser_tools, api_key)
        except Exception as e:
            logger.exception("Agent run failed")
            self.renderer.show_error(f"Agent run failed: {e}")
            return None

        self.renderer.show_agent_end(answer)
        return answer

    def _open_run_log(self, task: str) -> Optional[RunLogger]:
        if not self.config.log_runs:
            return None
        try:
            return RunLogger(task)
        except OSError as e:
            logger.warning(f"Run log disabled: {e}")
            return None

    def _run_loop(self, task: str, browser_tools: BrowserTools, api_key: str) -> str:
        """Alternate model turns and tool calls until the model stops calling tools.

        Tools execute in the calling thread, one at a time, in the order the
        model requested them.
        """
        tools = build_langchain_tools(browser_tools)
        llm = self.llm_factory(self.config, api_key).bind_tools(tools)
        run_log = self._open_run_log(task)

        messages: list = [
            SystemMessage(content=SYSTEM_PROMPT),
            HumanMessage(content=task),
        ]

        tool_step = 0
        for turn in range(1, self.config.max_steps + 1):
            response = llm.invoke(messages)
            messages.append(response)

            tool_calls = getattr(response, "tool_calls", None) or []
            if not tool_calls:
                logger.debug(f"Agent finished after {turn} model turns")
                return message_text(response)

            for call in tool_calls:
                name = call["name"]
                args = call.get("args") or {}
                result = browser_tools.execute(name, args)

                tool_step += 1
                self.renderer.show_tool_step(tool_step, name, args, result.success, result.message)
                if run_log:
                    run_log.log_step(name, args, result.to_dict())

                messages.append(ToolMessage(
                    content=result.to_llm_text(),
                    tool_call_id=call["id"],
                    name=name,
                ))

        logger.warning(f"Agent stopped after reaching max_steps={self.config.max_steps}")
        return f"Stopped after {self.config.max_steps} steps without a final answer."
