"""Stylesheet rules: value kinds, typed literals and conditional values.

A rule's right-hand side is one of:

- a plain scalar (bool, number or string), used verbatim
- an expression literal, ``${idiom == iPad ? 24 : 16}``
- a font literal, ``!!font(Helvetica, 12)`` or ``!!font(system, ${...})``
- a color literal, ``!!color(#FF0000)``
- a conditional mapping ``{"${condition}": value, "${default}": value}``

Conditional branches are stored in evaluation order: every non-default
branch is prepended as it is encountered and the branch whose condition
mentions ``default`` goes last.
"""

import re
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, NamedTuple, Union

from stylekit.diagnostics import (
    COMPILE_FAILED,
    HETEROGENEOUS_CONDITIONAL,
    INVALID_COLOR,
    INVALID_NUMBER,
    NO_MATCH,
    DiagnosticSink,
    Severity,
    record,
)
from stylekit.document import DocumentNode, MappingNode, ScalarNode
from stylekit.environment import EnvironmentProvider, StaticEnvironment
from stylekit.errors import IllegalArgumentCountError, MalformedDocumentError
from stylekit.expressions import Expression, compile_expression

FONT_FUNCTION = "!!font"
COLOR_FUNCTION = "!!color"
DEFAULT_CONDITION = "default"
SYSTEM_FONT = "system"

_EXPRESSION_LITERAL = re.compile(r"^\$\{(.*)\}$", re.DOTALL)
_NUMERAL_PREFIX = re.compile(r"^\s*[+-]?(?:\d+(?:\.\d*)?|\.\d+)(?:[eE][+-]?\d+)?")
_HEX_DIGITS = re.compile(r"^[0-9A-F]+$")


class ValueKind(Enum):
    """The type family of a rule's value."""

    EXPRESSION = "expression"
    BOOL = "bool"
    NUMBER = "number"
    STRING = "string"
    FONT = "font"
    COLOR = "color"
    UNDEFINED = "undefined"


# -----------------------------------------------------------------------------
# Typed literal descriptors
# -----------------------------------------------------------------------------


@dataclass(frozen=True)
class FontDescriptor:
    """A font request.

    Attributes:
        family: Font family name, or None for the system font
        size: Point size
    """

    family: str | None
    size: float

    @property
    def is_system(self) -> bool:
        return self.family is None

    @classmethod
    def system(cls, size: float) -> "FontDescriptor":
        return cls(None, float(size))

    def __str__(self) -> str:
        return f"{self.family or SYSTEM_FONT} {self.size:g}pt"


@dataclass(frozen=True)
class ColorDescriptor:
    """A color given as a hex string.

    The hex value is normalized to upper-case ``RRGGBB`` or ``RRGGBBAA``;
    a leading ``#`` or ``0x`` is dropped and 3/4 digit shorthand is expanded.

    Raises:
        ValueError: ``hex`` is not a valid hex color
    """

    hex: str

    def __post_init__(self) -> None:
        object.__setattr__(self, "hex", _normalize_hex(self.hex))

    @property
    def rgba(self) -> tuple[float, float, float, float]:
        """Red, green, blue and alpha components in 0..1."""
        digits = self.hex if len(self.hex) == 8 else self.hex + "FF"
        return tuple(int(digits[i:i + 2], 16) / 255.0 for i in range(0, 8, 2))

    def __str__(self) -> str:
        return f"#{self.hex}"


def _normalize_hex(value: str) -> str:
    digits = str(value).strip().upper()
    if digits.startswith("#"):
        digits = digits[1:]
    elif digits.startswith("0X"):
        digits = digits[2:]

    if not _HEX_DIGITS.match(digits):
        raise ValueError(f"Invalid hex color '{value}'")
    if len(digits) in (3, 4):
        digits = "".join(c * 2 for c in digits)
    if len(digits) not in (6, 8):
        raise ValueError(f"Invalid hex color '{value}'")
    return digits


BLACK = ColorDescriptor("000000")


# -----------------------------------------------------------------------------
# Rules
# -----------------------------------------------------------------------------


class ParsedValue(NamedTuple):
    """The result of parsing a rule's right-hand side."""

    kind: ValueKind
    store: Any
    is_conditional: bool


@dataclass(frozen=True)
class ConditionalBranch:
    """One ``condition: value`` pair of a conditional rule.

    Attributes:
        source: The condition key as written (e.g. "${idiom == iPad}")
        condition: The compiled condition
        value: The parsed branch value
    """

    source: str
    condition: Expression
    value: ParsedValue

    @property
    def is_default(self) -> bool:
        return DEFAULT_CONDITION in self.source


RuleStore = Union[
    bool,
    int,
    float,
    str,
    Expression,
    FontDescriptor,
    ColorDescriptor,
    tuple[ConditionalBranch, ...],
    None,
]


@dataclass(frozen=True)
class Rule:
    """A named, typed value definition within a style.

    Attributes:
        key: The rule name
        kind: The value kind; for conditional rules, the first branch's kind
        store: The typed value, or the tuple of branches when conditional
        is_conditional: Whether ``store`` is a tuple of ConditionalBranch
    """

    key: str
    kind: ValueKind
    store: RuleStore = field(default=None)
    is_conditional: bool = False

    @classmethod
    def from_value(cls, key: str, value: ParsedValue) -> "Rule":
        return cls(key, value.kind, value.store, value.is_conditional)

    @property
    def branches(self) -> tuple[ConditionalBranch, ...]:
        return self.store if self.is_conditional else ()

    def __str__(self) -> str:
        return self.kind.value


# -----------------------------------------------------------------------------
# Parsing
# -----------------------------------------------------------------------------


def parse_expression_literal(text: str) -> str | None:
    """Return the body of ``${...}``, or None if ``text`` is not one."""
    match = _EXPRESSION_LITERAL.match(text.strip())
    if match is None:
        return None
    return match.group(1).strip()


def _split_arguments(text: str) -> list[str]:
    """Split on commas that are not nested in () or {}."""
    arguments: list[str] = []
    depth = 0
    current: list[str] = []
    for char in text:
        if char in "({":
            depth += 1
        elif char in ")}":
            depth -= 1
        if char == "," and depth == 0:
            arguments.append("".join(current))
            current = []
        else:
            current.append(char)
    arguments.append("".join(current))
    return [argument.strip() for argument in arguments]


def function_arguments(text: str, function: str) -> list[str]:
    """Return the arguments of a typed-literal call such as ``!!font(a, b)``."""
    rest = text.strip()[len(function):].strip()
    if rest.startswith("(") and rest.endswith(")"):
        rest = rest[1:-1]
    if not rest.strip():
        return []
    return _split_arguments(rest)


def _unquote(text: str) -> str:
    if len(text) >= 2 and text[0] == text[-1] and text[0] in "'\"":
        return text[1:-1]
    return text


class RuleParser:
    """Builds rule values from document nodes.

    Font sizes written as expressions are evaluated while parsing, against
    ``environment``.

    Usage:
        parser = RuleParser(StaticEnvironment(), sink)
        rule = parser.parse_rule("width", ScalarNode("${iPhoneX.width}"))
    """

    def __init__(
        self,
        environment: EnvironmentProvider | None = None,
        diagnostics: DiagnosticSink | None = None,
    ):
        self.environment = environment or StaticEnvironment()
        self.diagnostics = diagnostics

    def parse_rule(self, key: str, node: DocumentNode) -> Rule:
        return Rule.from_value(key, self.parse_value(node, key=key))

    def parse_value(self, node: DocumentNode, *, key: str | None = None) -> ParsedValue:
        """Determine a node's value kind and build its store.

        Raises:
            IllegalArgumentCountError: A typed literal has the wrong arity
            MalformedDocumentError: A conditional key is not an expression
        """
        if isinstance(node, ScalarNode):
            value = node.value
            if isinstance(value, bool):
                return ParsedValue(ValueKind.BOOL, value, False)
            if isinstance(value, (int, float)):
                return ParsedValue(ValueKind.NUMBER, value, False)
            if isinstance(value, str):
                kind, store = self.parse_string(value, key=key)
                return ParsedValue(kind, store, False)

        if isinstance(node, MappingNode):
            kind, branches = self.parse_conditional(node, key=key)
            return ParsedValue(kind, branches, True)

        return ParsedValue(ValueKind.UNDEFINED, None, False)

    def parse_string(self, text: str, *, key: str | None = None) -> tuple[ValueKind, Any]:
        """Parse a string value: expression, font, color or plain string."""
        body = parse_expression_literal(text)
        if body is not None:
            return ValueKind.EXPRESSION, self._compile(body, key)

        if text.startswith(FONT_FUNCTION):
            args = function_arguments(text, FONT_FUNCTION)
            if len(args) != 2:
                raise IllegalArgumentCountError(FONT_FUNCTION, 2, len(args))
            family = _unquote(args[0])
            size = self._parse_number(args[1], key)
            if family.lower() == SYSTEM_FONT:
                return ValueKind.FONT, FontDescriptor.system(size)
            return ValueKind.FONT, FontDescriptor(family, size)

        if text.startswith(COLOR_FUNCTION):
            args = function_arguments(text, COLOR_FUNCTION)
            if len(args) != 1:
                raise IllegalArgumentCountError(COLOR_FUNCTION, 1, len(args))
            try:
                return ValueKind.COLOR, ColorDescriptor(_unquote(args[0]))
            except ValueError as e:
                record(self.diagnostics, INVALID_COLOR, f"{e}; using black", rule=key)
                return ValueKind.COLOR, BLACK

        return ValueKind.STRING, text

    def parse_conditional(
        self, node: MappingNode, *, key: str | None = None
    ) -> tuple[ValueKind, tuple[ConditionalBranch, ...]]:
        """Parse a ``{condition: value}`` mapping into ordered branches."""
        kinds: list[ValueKind] = []
        branches: list[ConditionalBranch] = []

        for condition_node, value_node in node:
            source = condition_node.value if isinstance(condition_node, ScalarNode) else None
            body = parse_expression_literal(source) if isinstance(source, str) else None
            if body is None:
                raise MalformedDocumentError(
                    f"{source if source is not None else condition_node} "
                    "is not a valid expression."
                )

            value = self.parse_value(value_node, key=key)
            branch = ConditionalBranch(source, self._compile(body, key), value)
            kinds.append(value.kind)

            if branch.is_default:
                branches.append(branch)
            else:
                branches.insert(0, branch)

        kind = kinds[0] if kinds else ValueKind.UNDEFINED
        if any(k != kind for k in kinds):
            record(
                self.diagnostics,
                HETEROGENEOUS_CONDITIONAL,
                "Conditional value has non-homogeneous return types: "
                + ", ".join(k.value for k in kinds),
                rule=key,
            )

        return kind, tuple(branches)

    def _compile(self, body: str, key: str | None) -> Expression:
        expression = compile_expression(body)
        if not expression.is_valid:
            record(
                self.diagnostics,
                COMPILE_FAILED,
                f"Expression '{body}' does not compile: {expression.error}",
                rule=key,
            )
        return expression

    def _parse_number(self, text: str, key: str | None) -> float:
        body = parse_expression_literal(text)
        if body is not None:
            return self._compile(body, key).evaluate(
                self.environment, self.diagnostics, rule=key
            )

        match = _NUMERAL_PREFIX.match(text)
        if match is None:
            record(self.diagnostics, INVALID_NUMBER, f"'{text}' is not a number", rule=key)
            return 0.0
        return float(match.group())


# -----------------------------------------------------------------------------
# Conditional evaluation
# -----------------------------------------------------------------------------


def resolve_value(
    value: ParsedValue,
    environment: EnvironmentProvider,
    default: Any,
    diagnostics: DiagnosticSink | None = None,
    *,
    rule: str | None = None,
) -> Any:
    """Resolve a parsed value to a concrete one.

    Expressions are evaluated to floats, or ``default`` when evaluation
    fails. Nested conditionals are evaluated recursively; other stores are
    returned as they are.
    """
    if value.is_conditional:
        return evaluate_conditional(value.store, environment, default, diagnostics, rule=rule)
    if isinstance(value.store, Expression):
        result = value.store.try_evaluate(environment, rule=rule)
        return result.value if result.report(diagnostics).ok else default
    return value.store


def evaluate_conditional(
    branches: tuple[ConditionalBranch, ...],
    environment: EnvironmentProvider,
    default: Any,
    diagnostics: DiagnosticSink | None = None,
    *,
    rule: str | None = None,
) -> Any:
    """Return the value of the first branch whose condition is non-zero.

    Branches are tried in stored order. Undefined branch values are
    skipped. ``default`` is returned when nothing matches.
    """
    for branch in branches:
        if branch.value.store is None:
            continue
        if branch.condition.evaluate(environment, diagnostics, rule=rule) != 0:
            return resolve_value(branch.value, environment, default, diagnostics, rule=rule)

    record(
        diagnostics,
        NO_MATCH,
        "No conditional branch matched; using default",
        rule=rule,
        severity=Severity.INFO,
    )
    return default
