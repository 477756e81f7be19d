import json
import logging
import time
from collections.abc import AsyncIterator
from dataclasses import dataclass, field
from typing import Any

from ollama import AsyncClient

from toolrelay.config.schema import AgentConfig
from toolrelay.core.session import Message, Session
from toolrelay.tools.registry import ToolRegistry
from toolrelay.util.prompt_loader import PromptLoader

logger = logging.getLogger(__name__)


class AgentError(Exception):
    pass


@dataclass(frozen=True)
class ToolCallRecord:
    name: str
    arguments: dict[str, Any]
    observation: str


@dataclass(frozen=True)
class AgentReply:
    text: str
    tool_calls: list[ToolCallRecord] = field(default_factory=list)

    @property
    def tools_used(self) -> list[str]:
        return list(dict.fromkeys(call.name for call in self.tool_calls))


def _tool_arguments(raw: Any) -> dict[str, Any]:
    """Tool call arguments arrive as a mapping, or as JSON text from some models."""
    if isinstance(raw, str):
        try:
            raw = json.loads(raw) if raw.strip() else {}
        except json.JSONDecodeError:
            logger.warning(f"Tool call arguments are not valid JSON: {raw!r}")
            return {}
    return dict(raw or {})


class AgentService:
    """Agentic LLM loop with streaming and tool calling via Ollama."""

    def __init__(self, config: AgentConfig, tool_registry: ToolRegistry) -> None:
        self._config = config
        self._tools = tool_registry
        self._client: AsyncClient | None = None

    async def start(self) -> None:
        self._client = AsyncClient()
        logger.info(f"Agent initialized with model: {self._config.model}")
        await self._warmup()

    async def _warmup(self) -> None:
        """Prime the model with the system prompt and tool schemas."""
        system_prompt = PromptLoader.load_system_prompt(self._config, self._tools)
        start = time.monotonic()
        try:
            await self._client.chat(
                model=self._config.model,
                messages=[
                    {"role": "system", "content": system_prompt},
                    {"role": "user", "content": "hi"},
                ],
                tools=self._tools.to_ollama_tools() or None,
                options={"num_predict": 1},
            )
        except Exception:
            logger.warning("Model warmup failed, first request may be slow", exc_info=True)
            return
        logger.info(f"Model {self._config.model} warmed up in {time.monotonic() - start:.1f}s")

    async def stop(self) -> None:
        self._client = None

    async def _stream_round(
        self,
        session: Session,
        tool_calls: list[Any],
    ) -> AsyncIterator[str]:
        """Stream one model turn, collecting requested tool calls into ``tool_calls``."""
        try:
            stream = await self._client.chat(
                model=self._config.model,
                messages=session.get_ollama_messages(),
                tools=self._tools.to_ollama_tools() or None,
                options={
                    "temperature": self._config.temperature,
                    "num_ctx": self._config.num_ctx,
                },
                stream=True,
            )
        except Exception as e:
            raise AgentError(f"Ollama chat failed: {e}") from e

        async for chunk in stream:
            message = chunk["message"]
            if message["content"]:
                yield message["content"]
            if message.get("tool_calls"):
                tool_calls.extend(message["tool_calls"])

    async def _run_tools(self, tool_calls: list[Any], session: Session) -> list[ToolCallRecord]:
        records: list[ToolCallRecord] = []
        for tc in tool_calls:
            name = tc["function"]["name"]
            arguments = _tool_arguments(tc["function"]["arguments"])
            observation = await self._tools.call_tool(name, arguments)
            session.add_tool_result(name, observation)
            records.append(ToolCallRecord(name=name, arguments=arguments, observation=observation))
        return records

    async def run(
        self,
        user_text: str,
        session: Session,
        records: list[ToolCallRecord] | None = None,
    ) -> AsyncIterator[str]:
        """
        Run the agent loop. Yields text chunks as they stream.
        Tool results, including errors, go back to the model as tool
        messages; each call is appended to ``records`` when given.
        """
        if self._client is None:
            raise AgentError("Agent not started")
        if not session.is_started:
            raise AgentError("Session not started")

        session.add_message(Message(role="user", content=user_text))

        for tool_round in range(self._config.max_tool_rounds + 1):
            tool_calls: list[Any] = []
            parts: list[str] = []
            async for content in self._stream_round(session, tool_calls):
                parts.append(content)
                yield content

            session.add_message(Message(
                role="assistant",
                content="".join(parts),
                tool_calls=tool_calls or None,
            ))
            if not tool_calls:
                break

            logger.info(f"Tool round {tool_round + 1}: {len(tool_calls)} call(s)")
            executed = await self._run_tools(tool_calls, session)
            if records is not None:
                records.extend(executed)
        else:
            logger.warning(f"Stopped after {self._config.max_tool_rounds} tool rounds")

    async def respond(self, user_text: str, session: Session) -> AgentReply:
        """Run the loop to completion."""
        records: list[ToolCallRecord] = []
        chunks = [chunk async for chunk in self.run(user_text, session, records)]
        return AgentReply(text="".join(chunks), tool_calls=records)
