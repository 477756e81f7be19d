import base64
import binascii
from dataclasses import dataclass
from typing import Any, Mapping

from toolrelay.tools.base import ParameterType, ToolDefinition, ToolParameter, choose_option
from toolrelay.tools.errors import ToolExecutionError

NAME = "base64_encoder"
OPERATIONS = ["encode", "decode"]


@dataclass(frozen=True)
class Base64Args:
    text: str
    operation: str = "encode"
    url_safe: bool = False


@dataclass(frozen=True)
class Base64Result:
    original_text: str
    processed_text: str
    operation: str
    url_safe: bool

    @property
    def original_length(self) -> int:
        return len(self.original_text)

    @property
    def processed_length(self) -> int:
        return len(self.processed_text)


def encode(text: str, url_safe: bool = False) -> str:
    data = text.encode("utf-8")
    encoded = base64.urlsafe_b64encode(data) if url_safe else base64.b64encode(data)
    return encoded.decode("ascii")


def decode(text: str, url_safe: bool = False) -> str:
    """Decode Base64 text to a UTF-8 string. Missing padding is tolerated."""
    data = text.strip()
    data += "=" * (-len(data) % 4)
    altchars = b"-_" if url_safe else None
    return base64.b64decode(data, altchars=altchars, validate=True).decode("utf-8")


class Base64EncoderTool:
    @property
    def definition(self) -> ToolDefinition:
        return ToolDefinition(
            name=NAME,
            description="Encode or decode text as Base64. Supports URL-safe encoding.",
            parameters=[
                ToolParameter(
                    name="text",
                    type=ParameterType.STRING,
                    description="Text to encode or decode",
                ),
                ToolParameter(
                    name="operation",
                    type=ParameterType.STRING,
                    description="Operation to perform (encode or decode)",
                    required=False,
                    enum=OPERATIONS,
                ),
                ToolParameter(
                    name="url_safe",
                    type=ParameterType.BOOLEAN,
                    description="Use the URL-safe Base64 alphabet (true or false)",
                    required=False,
                ),
            ],
        )

    def decode(self, values: Mapping[str, Any]) -> Base64Args:
        operation = choose_option(NAME, "operation", values.get("operation", "encode"), OPERATIONS)
        return Base64Args(
            text=values["text"],
            operation=operation,
            url_safe=values.get("url_safe", False),
        )

    async def execute(self, args: Base64Args) -> Base64Result:
        if args.operation == "encode":
            processed = encode(args.text, args.url_safe)
        else:
            try:
                processed = decode(args.text, args.url_safe)
            except (binascii.Error, UnicodeDecodeError) as e:
                raise ToolExecutionError(NAME, f"Base64 processing error: {e}") from e

        return Base64Result(
            original_text=args.text,
            processed_text=processed,
            operation=args.operation,
            url_safe=args.url_safe,
        )

    def format(self, result: Base64Result) -> str:
        return (
            "[Base64 result]\n"
            f"Operation: {result.operation}\n"
            f"URL-safe: {'yes' if result.url_safe else 'no'}\n"
            "\n"
            f"Original text ({result.original_length} chars):\n"
            f"{result.original_text}\n"
            "\n"
            f"Processed text ({result.processed_length} chars):\n"
            f"{result.processed_text}"
        )
