"""Typed access to rule values.

Reading a rule never raises. A rule of the wrong kind, a value that does
not fit the requested type and an expression that fails to evaluate all
yield the caller's default together with a diagnostic.

Type families:
- integer, float, boolean: NUMBER, BOOL and EXPRESSION rules
- string: STRING rules
- font: FONT rules
- color: COLOR rules
"""

import math
from typing import Any, Callable

from stylekit.diagnostics import TYPE_MISMATCH, UNKNOWN_RULE, DiagnosticSink, record
from stylekit.environment import EnvironmentProvider, StaticEnvironment
from stylekit.expressions import Expression
from stylekit.loader import Stylesheet
from stylekit.rules import ColorDescriptor, FontDescriptor, Rule, ValueKind, evaluate_conditional

NUMERIC_KINDS = frozenset({ValueKind.NUMBER, ValueKind.BOOL, ValueKind.EXPRESSION})

# Returned by conditional evaluation when no branch matched or the matched
# branch failed to evaluate.
_NO_MATCH = object()


def _as_number(value: Any) -> float | None:
    if isinstance(value, bool):
        return 1.0 if value else 0.0
    if isinstance(value, (int, float)):
        return float(value)
    return None


class RuleAccessor:
    """Reads rules as concrete Python values.

    Usage:
        accessor = RuleAccessor(StaticEnvironment(current_idiom=Idiom.iPad), sink)
        width = accessor.float(sheet.rule("card", "width"), 320.0)
    """

    def __init__(
        self,
        environment: EnvironmentProvider | None = None,
        diagnostics: DiagnosticSink | None = None,
    ):
        self.environment = environment or StaticEnvironment()
        self.diagnostics = diagnostics

    # -------------------------------------------------------------------------
    # Typed accessors
    # -------------------------------------------------------------------------

    def integer(self, rule: Rule, default: int = 0) -> int:
        def coerce(value: Any) -> int | None:
            number = _as_number(value)
            if number is None or not math.isfinite(number):
                return None
            return int(number)

        return self._read(rule, NUMERIC_KINDS, default, "integer", coerce)

    def float(self, rule: Rule, default: float = 0.0) -> float:
        return self._read(rule, NUMERIC_KINDS, default, "float", _as_number)

    def boolean(self, rule: Rule, default: bool = False) -> bool:
        def coerce(value: Any) -> bool | None:
            number = _as_number(value)
            return None if number is None else number != 0

        return self._read(rule, NUMERIC_KINDS, default, "boolean", coerce)

    def string(self, rule: Rule, default: str = "") -> str:
        return self._read(
            rule, {ValueKind.STRING}, default, "string", _instance_of(str)
        )

    def font(self, rule: Rule, default: FontDescriptor | None = None) -> FontDescriptor | None:
        return self._read(
            rule, {ValueKind.FONT}, default, "font", _instance_of(FontDescriptor)
        )

    def color(
        self, rule: Rule, default: ColorDescriptor | None = None
    ) -> ColorDescriptor | None:
        return self._read(
            rule, {ValueKind.COLOR}, default, "color", _instance_of(ColorDescriptor)
        )

    def resolve(self, rule: Rule, default: Any = None) -> Any:
        """Read a rule with the accessor matching its own kind."""
        readers: dict[ValueKind, Callable[[Rule], Any]] = {
            ValueKind.NUMBER: self.float,
            ValueKind.EXPRESSION: self.float,
            ValueKind.BOOL: self.boolean,
            ValueKind.STRING: self.string,
            ValueKind.FONT: self.font,
            ValueKind.COLOR: self.color,
        }
        reader = readers.get(rule.kind)
        if reader is None:
            return default
        value = reader(rule)
        return default if value is None else value

    # -------------------------------------------------------------------------
    # Helpers
    # -------------------------------------------------------------------------

    def _read(
        self,
        rule: Rule,
        kinds: set[ValueKind] | frozenset[ValueKind],
        default: Any,
        wanted: str,
        coerce: Callable[[Any], Any],
    ) -> Any:
        if rule.kind not in kinds:
            self._mismatch(rule, f"wanted {wanted}, found {rule.kind.value}")
            return default

        if rule.is_conditional:
            value = evaluate_conditional(
                rule.store, self.environment, _NO_MATCH, self.diagnostics, rule=rule.key
            )
            if value is _NO_MATCH:
                return default
        elif isinstance(rule.store, Expression):
            evaluation = rule.store.try_evaluate(self.environment, rule=rule.key)
            if not evaluation.report(self.diagnostics).ok:
                return default
            value = evaluation.value
        else:
            value = rule.store

        result = coerce(value)
        if result is None:
            self._mismatch(rule, f"wanted {wanted}, found {type(value).__name__}")
            return default
        return result

    def _mismatch(self, rule: Rule, detail: str) -> None:
        record(self.diagnostics, TYPE_MISMATCH, f"Type mismatch: {detail}", rule=rule.key)


def _instance_of(cls: type) -> Callable[[Any], Any]:
    def coerce(value: Any) -> Any:
        return value if isinstance(value, cls) else None

    return coerce


class StyleReader:
    """Reads rules of a stylesheet by style and rule name.

    A missing rule yields the default with an UNKNOWN_RULE diagnostic.

    Usage:
        reader = StyleReader(sheet, environment, sink)
        reader.float("title", "size", 14.0)
    """

    def __init__(
        self,
        stylesheet: Stylesheet,
        environment: EnvironmentProvider | None = None,
        diagnostics: DiagnosticSink | None = None,
    ):
        self.stylesheet = stylesheet
        self.accessor = RuleAccessor(environment, diagnostics)

    def integer(self, style: str, name: str, default: int = 0) -> int:
        return self._read(style, name, default, self.accessor.integer)

    def float(self, style: str, name: str, default: float = 0.0) -> float:
        return self._read(style, name, default, self.accessor.float)

    def boolean(self, style: str, name: str, default: bool = False) -> bool:
        return self._read(style, name, default, self.accessor.boolean)

    def string(self, style: str, name: str, default: str = "") -> str:
        return self._read(style, name, default, self.accessor.string)

    def font(
        self, style: str, name: str, default: FontDescriptor | None = None
    ) -> FontDescriptor | None:
        return self._read(style, name, default, self.accessor.font)

    def color(
        self, style: str, name: str, default: ColorDescriptor | None = None
    ) -> ColorDescriptor | None:
        return self._read(style, name, default, self.accessor.color)

    def _read(self, style: str, name: str, default: Any, read: Callable[[Rule, Any], Any]) -> Any:
        rule = self.stylesheet.rule(style, name)
        if rule is None:
            record(
                self.accessor.diagnostics,
                UNKNOWN_RULE,
                f"No rule '{name}' in style '{style}'",
                rule=name,
            )
            return default
        return read(rule, default)
