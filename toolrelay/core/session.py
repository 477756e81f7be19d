from dataclasses import dataclass
from typing import Any

from toolrelay.config.schema import SessionConfig


@dataclass
class Message:
    role: str
    content: str
    tool_calls: list[dict[str, Any]] | None = None
    tool_name: str | None = None


class Session:
    """Conversation history for one agent run."""

    def __init__(self, config: SessionConfig) -> None:
        self._config = config
        self._messages: list[Message] = []

    def start(self, system_prompt: str) -> None:
        """Begin a new conversation with a system prompt. Clears old history."""
        self._messages = [Message(role="system", content=system_prompt)]

    @property
    def is_started(self) -> bool:
        return bool(self._messages)

    def add_message(self, message: Message) -> None:
        self._messages.append(message)
        self._trim_history()

    def add_tool_result(self, tool_name: str, content: str) -> None:
        self.add_message(Message(role="tool", content=content, tool_name=tool_name))

    def get_ollama_messages(self) -> list[dict[str, Any]]:
        """Convert messages to Ollama SDK format."""
        result: list[dict[str, Any]] = []
        for msg in self._messages:
            entry: dict[str, Any] = {"role": msg.role, "content": msg.content}
            if msg.tool_calls:
                entry["tool_calls"] = msg.tool_calls
            if msg.tool_name:
                entry["tool_name"] = msg.tool_name
            result.append(entry)
        return result

    def tools_used(self) -> list[str]:
        """Names of the tools called so far, in first-use order."""
        names: list[str] = []
        for msg in self._messages:
            if msg.role == "tool" and msg.tool_name and msg.tool_name not in names:
                names.append(msg.tool_name)
        return names

    @property
    def messages(self) -> list[Message]:
        return list(self._messages)

    def _trim_history(self) -> None:
        """Keep system prompt + last N messages if over limit."""
        max_msgs = max(self._config.max_history_messages, 1)
        if len(self._messages) <= max_msgs:
            return
        if self._messages[0].role == "system":
            # A negative slice of zero would keep everything.
            tail = self._messages[len(self._messages) - (max_msgs - 1):]
            self._messages = [self._messages[0]] + tail
        else:
            self._messages = self._messages[-max_msgs:]
