from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Mapping, Protocol

from toolrelay.tools.errors import InvalidEnumValueError


class ParameterType(Enum):
    STRING = "string"
    INTEGER = "integer"
    DOUBLE = "number"
    BOOLEAN = "boolean"


@dataclass(frozen=True)
class ToolParameter:
    name: str
    type: ParameterType
    description: str
    required: bool = True
    enum: list[str] | None = None


@dataclass(frozen=True)
class ToolDefinition:
    name: str
    description: str
    parameters: list[ToolParameter] = field(default_factory=list)

    def __post_init__(self) -> None:
        seen: set[str] = set()
        for param in self.parameters:
            if param.name in seen:
                raise ValueError(f"Duplicate parameter '{param.name}' in tool '{self.name}'")
            seen.add(param.name)

    @property
    def required_parameters(self) -> list[ToolParameter]:
        return [p for p in self.parameters if p.required]

    @property
    def optional_parameters(self) -> list[ToolParameter]:
        return [p for p in self.parameters if not p.required]

    def parameter(self, name: str) -> ToolParameter | None:
        for param in self.parameters:
            if param.name == name:
                return param
        return None


@dataclass(frozen=True)
class ToolInvocationResult:
    tool_name: str
    raw: Any
    display: str


class Tool(Protocol):
    """A named operation the agent can invoke.

    ``decode`` receives only declared parameters, already coerced to their
    declared types, and turns them into the tool's own argument bundle
    (applying defaults). ``format`` renders the value ``execute`` returned.
    """

    @property
    def definition(self) -> ToolDefinition: ...

    def decode(self, values: Mapping[str, Any]) -> Any: ...

    async def execute(self, args: Any) -> Any: ...

    def format(self, result: Any) -> str: ...


def choose_option(tool: str, param: str, value: str, allowed: list[str]) -> str:
    """Match ``value`` against ``allowed`` case-insensitively."""
    normalized = value.strip().lower()
    if normalized not in allowed:
        raise InvalidEnumValueError(tool, param, value, allowed)
    return normalized


def clamp(value: int, low: int, high: int) -> int:
    return max(low, min(high, value))
