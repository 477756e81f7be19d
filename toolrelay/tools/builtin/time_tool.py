from collections.abc import Callable
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Any, Mapping

from toolrelay.tools.base import ParameterType, ToolDefinition, ToolParameter

TIME_FORMATS = ["iso", "unix", "millis"]


@dataclass(frozen=True)
class TimeResult:
    format: str
    value: str | int


class TimeTool:
    """Report the current time. Unknown formats fall back to ISO 8601."""

    def __init__(self, clock: Callable[[], datetime] | None = None) -> None:
        self._clock = clock or (lambda: datetime.now(timezone.utc))

    @property
    def definition(self) -> ToolDefinition:
        return ToolDefinition(
            name="time",
            description="Get the current time in various formats.",
            parameters=[
                ToolParameter(
                    name="format",
                    type=ParameterType.STRING,
                    description="Time format: iso, unix, or millis (default: iso)",
                    required=False,
                    enum=TIME_FORMATS,
                ),
            ],
        )

    def decode(self, values: Mapping[str, Any]) -> str:
        fmt = values.get("format", "iso").strip().lower()
        return fmt if fmt in TIME_FORMATS else "iso"

    async def execute(self, args: str) -> TimeResult:
        now = self._clock()
        if args == "unix":
            return TimeResult(format="unix", value=int(now.timestamp()))
        if args == "millis":
            return TimeResult(format="millis", value=int(now.timestamp() * 1000))
        return TimeResult(format="iso", value=now.isoformat())

    def format(self, result: TimeResult) -> str:
        if result.format == "unix":
            return f"Unix timestamp: {result.value}"
        if result.format == "millis":
            return f"Milliseconds: {result.value}"
        return f"ISO format: {result.value}"
