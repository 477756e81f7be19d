from typing import Any

from toolrelay.util.text import truncate


def describe_value(value: Any, limit: int = 80) -> str:
    try:
        text = repr(value)
    except ValueError:
        text = f"<{type(value).__name__} too large to display>"
    return truncate(text, limit)


class ToolError(Exception):
    """Base class for every structured tool invocation failure."""

    kind = "tool_error"

    def __init__(self, tool: str, message: str) -> None:
        super().__init__(message)
        self.tool = tool
        self.message = message

    def to_observation(self) -> str:
        return f"Error: {self.message}"


class UnknownToolError(ToolError):
    kind = "unknown_tool"

    def __init__(self, name: str, available: list[str] | None = None) -> None:
        message = f"Unknown tool '{name}'."
        if available is not None:
            message += f" Available tools: {available}"
        super().__init__(name, message)
        self.name = name


class MissingRequiredParameterError(ToolError):
    kind = "missing_required_parameter"

    def __init__(self, tool: str, param: str) -> None:
        super().__init__(tool, f"Tool '{tool}' requires parameter '{param}'.")
        self.param = param


class UnexpectedParameterError(ToolError):
    kind = "unexpected_parameter"

    def __init__(self, tool: str, param: str) -> None:
        super().__init__(tool, f"Tool '{tool}' does not accept parameter '{param}'.")
        self.param = param


class TypeMismatchError(ToolError):
    kind = "type_mismatch"

    def __init__(self, tool: str, param: str, expected: str, actual: Any) -> None:
        super().__init__(
            tool,
            f"Parameter '{param}' of tool '{tool}' expects {expected}, got {describe_value(actual)}.",
        )
        self.param = param
        self.expected = expected
        self.actual = actual


class InvalidEnumValueError(ToolError):
    kind = "invalid_enum_value"

    def __init__(self, tool: str, param: str, value: str, allowed: list[str]) -> None:
        super().__init__(
            tool,
            f"Invalid value '{value}' for parameter '{param}' of tool '{tool}'. "
            f"Must be one of: {', '.join(allowed)}.",
        )
        self.param = param
        self.value = value
        self.allowed = allowed


class UpstreamFailureError(ToolError):
    kind = "upstream_failure"

    def __init__(self, tool: str, status_code: int | None, message: str) -> None:
        super().__init__(tool, f"Upstream request for tool '{tool}' failed: {message}")
        self.status_code = status_code
        self.upstream_message = message


class ToolTimeoutError(ToolError):
    kind = "timeout"

    def __init__(self, tool: str) -> None:
        super().__init__(tool, f"Upstream request for tool '{tool}' timed out.")


class ToolExecutionError(ToolError):
    kind = "execution_error"

    def __init__(self, tool: str, message: str) -> None:
        super().__init__(tool, f"Tool '{tool}' failed: {message}")
        self.reason = message
