import logging
import math
from dataclasses import dataclass
from enum import Enum
from typing import Any, Mapping

from toolrelay.tools.base import ParameterType, ToolDefinition, ToolParameter

logger = logging.getLogger(__name__)

OPERATIONS = ["add", "subtract", "multiply", "divide"]


class OperatorFallback(Enum):
    """What an unrecognized operator evaluates to."""

    ADD = "add"
    NAN = "nan"


@dataclass(frozen=True)
class CalculatorArgs:
    a: float
    b: float
    operation: str


@dataclass(frozen=True)
class CalculationResult:
    a: float
    b: float
    operation: str
    value: float

    @property
    def expression(self) -> str:
        return f"{self.a} {self.operation} {self.b} = {self.value}"


class CalculatorTool:
    """Basic arithmetic on two numbers.

    Division by zero yields NaN. An operator outside ``OPERATIONS`` is not
    rejected: it is either treated as addition or yields NaN, depending on
    the fallback the tool was built with.
    """

    def __init__(self, fallback: OperatorFallback = OperatorFallback.ADD) -> None:
        self._fallback = fallback

    @property
    def definition(self) -> ToolDefinition:
        return ToolDefinition(
            name="calculator",
            description="Perform basic mathematical calculations.",
            parameters=[
                ToolParameter(name="a", type=ParameterType.DOUBLE, description="First number"),
                ToolParameter(name="b", type=ParameterType.DOUBLE, description="Second number"),
                ToolParameter(
                    name="operation",
                    type=ParameterType.STRING,
                    description="Operation: add, subtract, multiply, divide (default: add)",
                    required=False,
                    enum=OPERATIONS,
                ),
            ],
        )

    def decode(self, values: Mapping[str, Any]) -> CalculatorArgs:
        return CalculatorArgs(
            a=values["a"],
            b=values["b"],
            operation=values.get("operation", "add"),
        )

    async def execute(self, args: CalculatorArgs) -> CalculationResult:
        op = args.operation.strip().lower()
        if op == "subtract":
            value = args.a - args.b
        elif op == "multiply":
            value = args.a * args.b
        elif op == "divide":
            value = args.a / args.b if args.b != 0 else math.nan
        elif op == "add" or self._fallback is OperatorFallback.ADD:
            value = args.a + args.b
        else:
            value = math.nan

        result = CalculationResult(a=args.a, b=args.b, operation=args.operation, value=value)
        logger.info(f"Calculator tool: {result.expression}")
        return result

    def format(self, result: CalculationResult) -> str:
        return result.expression
