import logging
import re
from typing import Any, Mapping

from toolrelay.services.http_client import UpstreamError, UpstreamTimeout
from toolrelay.tools.base import (
    ParameterType,
    Tool,
    ToolDefinition,
    ToolInvocationResult,
    ToolParameter,
)
from toolrelay.tools.errors import (
    MissingRequiredParameterError,
    ToolError,
    ToolExecutionError,
    ToolTimeoutError,
    TypeMismatchError,
    UnexpectedParameterError,
    UnknownToolError,
    UpstreamFailureError,
)

logger = logging.getLogger(__name__)

_INTEGER_RE = re.compile(r"[+-]?[0-9]+")
_DOUBLE_RE = re.compile(r"[+-]?([0-9]+(\.[0-9]*)?|\.[0-9]+)([eE][+-]?[0-9]+)?")


def coerce_value(tool: str, param: ToolParameter, value: Any) -> Any:
    """Coerce a raw argument to the parameter's declared type.

    Strings are parsed for numeric and boolean targets, numbers are
    stringified for string targets. Nothing else is converted.
    """
    expected = param.type
    try:
        return _convert(expected, value)
    except (TypeError, ValueError, OverflowError) as e:
        raise TypeMismatchError(tool, param.name, expected.value, value) from e


def _convert(expected: ParameterType, value: Any) -> Any:
    """Raises TypeError when ``value`` has no conversion to ``expected``."""
    if expected is ParameterType.STRING:
        if isinstance(value, str):
            return value
        if isinstance(value, (int, float)) and not isinstance(value, bool):
            return str(value)

    elif expected is ParameterType.INTEGER:
        if isinstance(value, int) and not isinstance(value, bool):
            return value
        if isinstance(value, str) and _INTEGER_RE.fullmatch(value.strip()):
            return int(value.strip())

    elif expected is ParameterType.DOUBLE:
        if isinstance(value, (int, float)) and not isinstance(value, bool):
            return float(value)
        if isinstance(value, str) and _DOUBLE_RE.fullmatch(value.strip()):
            return float(value.strip())

    elif expected is ParameterType.BOOLEAN:
        if isinstance(value, bool):
            return value
        if isinstance(value, str) and value.strip().lower() in ("true", "false"):
            return value.strip().lower() == "true"

    raise TypeError(f"no conversion to {expected.value}")


class ToolRegistry:
    """Registry for agent tools with argument validation and Ollama schema conversion."""

    def __init__(self, strict: bool = False) -> None:
        self._tools: dict[str, Tool] = {}
        self._strict = strict
        self._frozen = False

    def register(self, tool: Tool) -> None:
        """Register a tool. Raises ValueError if name already taken."""
        if self._frozen:
            raise RuntimeError("Tool registry is frozen")
        name = tool.definition.name
        if name in self._tools:
            raise ValueError(f"Tool already registered: {name}")
        self._tools[name] = tool
        logger.info(f"Registered tool: {name}")

    def freeze(self) -> None:
        """Reject further registrations."""
        self._frozen = True

    @property
    def frozen(self) -> bool:
        return self._frozen

    def get(self, name: str) -> Tool | None:
        return self._tools.get(name)

    def list_tools(self) -> list[ToolDefinition]:
        return [t.definition for t in self._tools.values()]

    def to_ollama_tools(self) -> list[dict[str, Any]]:
        """Convert all tools to Ollama's tool calling format."""
        result: list[dict[str, Any]] = []
        for tool in self._tools.values():
            defn = tool.definition
            properties: dict[str, Any] = {}
            required: list[str] = []

            for param in defn.parameters:
                prop: dict[str, Any] = {
                    "type": param.type.value,
                    "description": param.description,
                }
                if param.enum:
                    prop["enum"] = param.enum
                properties[param.name] = prop
                if param.required:
                    required.append(param.name)

            result.append({
                "type": "function",
                "function": {
                    "name": defn.name,
                    "description": defn.description,
                    "parameters": {
                        "type": "object",
                        "properties": properties,
                        "required": required,
                    },
                },
            })
        return result

    def _validate(self, tool: Tool, raw_args: Mapping[str, Any]) -> dict[str, Any]:
        defn = tool.definition
        for param in defn.required_parameters:
            if raw_args.get(param.name) is None:
                raise MissingRequiredParameterError(defn.name, param.name)

        values: dict[str, Any] = {}
        for key, value in raw_args.items():
            param = defn.parameter(key)
            if param is None:
                if self._strict:
                    raise UnexpectedParameterError(defn.name, key)
                logger.debug(f"Ignoring unknown parameter '{key}' for tool '{defn.name}'")
                continue
            if value is None:
                continue
            values[key] = coerce_value(defn.name, param, value)
        return values

    async def invoke(self, name: str, raw_args: Mapping[str, Any]) -> ToolInvocationResult:
        """Validate, execute and format one tool call.

        Raises a ToolError subclass on any failure. Input errors are raised
        before the tool performs any side effect.
        """
        tool = self.get(name)
        if tool is None:
            raise UnknownToolError(name, list(self._tools.keys()))

        values = self._validate(tool, raw_args)
        try:
            args = tool.decode(values)
            logger.info(f"Calling tool '{name}' with args: {args}")
            result = await tool.execute(args)
            display = tool.format(result)
        except ToolError:
            raise
        except UpstreamTimeout as e:
            raise ToolTimeoutError(name) from e
        except UpstreamError as e:
            raise UpstreamFailureError(name, e.status_code, str(e)) from e
        except Exception as e:
            logger.exception(f"Tool '{name}' raised unexpected error")
            raise ToolExecutionError(name, str(e) or type(e).__name__) from e

        logger.info(f"Tool '{name}' returned {len(display)} chars")
        return ToolInvocationResult(tool_name=name, raw=result, display=display)

    async def call_tool(self, name: str, arguments: Mapping[str, Any]) -> str:
        """Execute a tool by name. Returns the display text or an error observation."""
        try:
            result = await self.invoke(name, arguments)
            return result.display
        except ToolError as e:
            logger.warning(f"Tool '{name}' failed ({e.kind}): {e.message}")
            return e.to_observation()
        except Exception as e:
            logger.exception(f"Tool '{name}' raised unexpected error")
            return f"Error executing tool '{name}': {e}"
