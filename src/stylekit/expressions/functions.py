"""Math functions callable from stylesheet expressions.

The registry is populated once at import time and is read-only afterwards.
"""

import math
from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Callable, Mapping


@dataclass(frozen=True)
class FunctionDefinition:
    """Definition of an expression function.

    Attributes:
        name: Function name as used in expressions
        description: Human-readable description
        min_args: Minimum number of arguments
        max_args: Maximum number of arguments, None for variadic
        implementation: The Python callable
        examples: Example expressions using this function
    """

    name: str
    description: str
    min_args: int
    max_args: int | None
    implementation: Callable[..., float]
    examples: tuple[str, ...] = field(default=())

    def accepts(self, count: int) -> bool:
        if count < self.min_args:
            return False
        return self.max_args is None or count <= self.max_args


def _min_val(*values: float) -> float:
    return min(values)


def _max_val(*values: float) -> float:
    return max(values)


def _round_num(value: float, decimals: float = 0) -> float:
    return float(round(value, int(decimals)))


_DEFINITIONS = [
    FunctionDefinition(
        name="abs",
        description="Returns absolute value",
        min_args=1,
        max_args=1,
        implementation=abs,
        examples=("abs(-4)",),
    ),
    FunctionDefinition(
        name="min",
        description="Returns minimum value",
        min_args=1,
        max_args=None,
        implementation=_min_val,
        examples=("min(iPhone8.width, 360)",),
    ),
    FunctionDefinition(
        name="max",
        description="Returns maximum value",
        min_args=1,
        max_args=None,
        implementation=_max_val,
        examples=("max(12, iPhoneSE.width / 20)",),
    ),
    FunctionDefinition(
        name="floor",
        description="Rounds down to nearest integer",
        min_args=1,
        max_args=1,
        implementation=math.floor,
    ),
    FunctionDefinition(
        name="ceil",
        description="Rounds up to nearest integer",
        min_args=1,
        max_args=1,
        implementation=math.ceil,
    ),
    FunctionDefinition(
        name="round",
        description="Rounds to specified decimal places",
        min_args=1,
        max_args=2,
        implementation=_round_num,
        examples=("round(iPhoneX.height / 3)",),
    ),
    FunctionDefinition(
        name="sqrt",
        description="Returns the square root",
        min_args=1,
        max_args=1,
        implementation=math.sqrt,
    ),
    FunctionDefinition(
        name="pow",
        description="Raises a number to a power",
        min_args=2,
        max_args=2,
        implementation=math.pow,
    ),
]


FUNCTIONS: Mapping[str, FunctionDefinition] = MappingProxyType(
    {definition.name: definition for definition in _DEFINITIONS}
)


def get_function(name: str) -> FunctionDefinition | None:
    """Look up a function by name."""
    return FUNCTIONS.get(name)
