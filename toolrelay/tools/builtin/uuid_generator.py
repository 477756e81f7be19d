import uuid
from dataclasses import dataclass
from typing import Any, Mapping

from toolrelay.tools.base import ParameterType, ToolDefinition, ToolParameter, clamp

MIN_COUNT = 1
MAX_COUNT = 10
UUID_FORMATS = ["standard", "compact", "uppercase"]


@dataclass(frozen=True)
class UUIDArgs:
    count: int = 1
    format: str = "standard"


@dataclass(frozen=True)
class UUIDBatch:
    format: str
    uuids: list[str]


def normalize_format(fmt: str) -> str:
    fmt = fmt.strip().lower()
    return fmt if fmt in UUID_FORMATS else "standard"


def format_uuid(value: str, fmt: str) -> str:
    if fmt == "compact":
        return value.replace("-", "")
    if fmt == "uppercase":
        return value.upper()
    return value


class UUIDGeneratorTool:
    """Generate random UUIDs.

    ``count`` is clamped into 1..10 rather than rejected, and an unknown
    ``format`` produces the standard hyphenated form.
    """

    @property
    def definition(self) -> ToolDefinition:
        return ToolDefinition(
            name="uuid_generator",
            description="Generate UUIDs (Universally Unique Identifiers).",
            parameters=[
                ToolParameter(
                    name="count",
                    type=ParameterType.INTEGER,
                    description=f"Number of UUIDs to generate ({MIN_COUNT}-{MAX_COUNT}, default: 1)",
                    required=False,
                ),
                ToolParameter(
                    name="format",
                    type=ParameterType.STRING,
                    description="UUID format (standard, compact, uppercase)",
                    required=False,
                    enum=UUID_FORMATS,
                ),
            ],
        )

    def decode(self, values: Mapping[str, Any]) -> UUIDArgs:
        return UUIDArgs(
            count=clamp(values.get("count", 1), MIN_COUNT, MAX_COUNT),
            format=normalize_format(values.get("format", "standard")),
        )

    async def execute(self, args: UUIDArgs) -> UUIDBatch:
        uuids = [format_uuid(str(uuid.uuid4()), args.format) for _ in range(args.count)]
        return UUIDBatch(format=args.format, uuids=uuids)

    def format(self, result: UUIDBatch) -> str:
        lines = [
            "[UUID generation result]",
            f"Count: {len(result.uuids)}",
            f"Format: {result.format}",
            "",
        ]
        lines.extend(f"{idx}. {value}" for idx, value in enumerate(result.uuids, start=1))
        return "\n".join(lines)
