import logging
from typing import Any, Mapping

from toolrelay.tools.base import ParameterType, ToolDefinition, ToolParameter

logger = logging.getLogger(__name__)


class EchoTool:
    """Echo a message back unchanged."""

    @property
    def definition(self) -> ToolDefinition:
        return ToolDefinition(
            name="echo",
            description="Echo a message back to the user.",
            parameters=[
                ToolParameter(
                    name="message",
                    type=ParameterType.STRING,
                    description="The message to echo",
                ),
            ],
        )

    def decode(self, values: Mapping[str, Any]) -> str:
        return values["message"]

    async def execute(self, args: str) -> str:
        logger.info(f"Echo tool called with: {args}")
        return args

    def format(self, result: str) -> str:
        return f"Echo: {result}"
