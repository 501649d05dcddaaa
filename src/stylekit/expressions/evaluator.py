"""Evaluator for stylesheet expressions.

Walks the AST and computes a float against the constant table and an
environment provider. Booleans are represented as 1.0 / 0.0.

Evaluation never raises to the caller: ``Expression.evaluate`` converts any
failure into a diagnostic and returns 0.0.
"""

import logging
import math
from dataclasses import dataclass

from stylekit.diagnostics import (
    EVALUATION_FAILED,
    Diagnostic,
    DiagnosticSink,
    Severity,
    emit,
)
from stylekit.environment import ENVIRONMENT_SYMBOLS, EnvironmentProvider
from stylekit.expressions.constants import CONSTANTS
from stylekit.expressions.functions import get_function
from stylekit.expressions.lexer import LexerError
from stylekit.expressions.parser import (
    ASTNode,
    BinaryOp,
    Conditional,
    ExpressionSyntaxError,
    FunctionCall,
    Identifier,
    Literal,
    UnaryOp,
    parse,
)

logger = logging.getLogger(__name__)


class EvaluationError(Exception):
    """Error during expression evaluation."""
    pass


def _to_bool(value: float) -> bool:
    return value != 0


def _from_bool(value: bool) -> float:
    return 1.0 if value else 0.0


class Evaluator:
    """Evaluates an expression AST against an environment.

    Usage:
        evaluator = Evaluator(StaticEnvironment(current_idiom=Idiom.iPad))
        result = evaluator.evaluate(parse("idiom == iPad"))  # 1.0
    """

    def __init__(self, environment: EnvironmentProvider):
        self.environment = environment

    def evaluate(self, node: ASTNode) -> float:
        """Evaluate an AST node and return the result."""
        method_name = f"_eval_{type(node).__name__.lower()}"
        method = getattr(self, method_name, None)

        if method is None:
            raise EvaluationError(f"Unknown node type: {type(node).__name__}")

        return method(node)

    # -------------------------------------------------------------------------
    # Node type evaluators
    # -------------------------------------------------------------------------

    def _eval_literal(self, node: Literal) -> float:
        if isinstance(node.value, bool):
            return _from_bool(node.value)
        return float(node.value)

    def _eval_identifier(self, node: Identifier) -> float:
        name = node.name

        if name in CONSTANTS:
            return CONSTANTS[name]

        try:
            resolver = ENVIRONMENT_SYMBOLS.get(name)
            if resolver is not None:
                return resolver(self.environment)

            value = self.environment.variable(name)
        except Exception as e:
            raise EvaluationError(f"Unable to resolve symbol {name}: {e}")

        if value is not None:
            return float(value)

        raise EvaluationError(f"Unknown symbol: {name}")

    def _eval_unaryop(self, node: UnaryOp) -> float:
        operand = self.evaluate(node.operand)

        if node.operator == "!":
            return _from_bool(not _to_bool(operand))
        if node.operator == "-":
            return -operand

        raise EvaluationError(f"Unknown unary operator: {node.operator}")

    def _eval_conditional(self, node: Conditional) -> float:
        if _to_bool(self.evaluate(node.condition)):
            return self.evaluate(node.when_true)
        return self.evaluate(node.when_false)

    def _eval_binaryop(self, node: BinaryOp) -> float:
        op = node.operator

        # Short-circuit evaluation for logical operators
        if op == "&&":
            if not _to_bool(self.evaluate(node.left)):
                return 0.0
            return _from_bool(_to_bool(self.evaluate(node.right)))

        if op == "||":
            if _to_bool(self.evaluate(node.left)):
                return 1.0
            return _from_bool(_to_bool(self.evaluate(node.right)))

        left = self.evaluate(node.left)
        right = self.evaluate(node.right)

        if op == "==":
            return _from_bool(left == right)
        if op == "!=":
            return _from_bool(left != right)
        if op == "<":
            return _from_bool(left < right)
        if op == "<=":
            return _from_bool(left <= right)
        if op == ">":
            return _from_bool(left > right)
        if op == ">=":
            return _from_bool(left >= right)

        if op == "+":
            return left + right
        if op == "-":
            return left - right
        if op == "*":
            return left * right
        if op == "/":
            if right == 0:
                raise EvaluationError("Division by zero")
            return left / right
        if op == "%":
            if right == 0:
                raise EvaluationError("Modulo by zero")
            if not math.isfinite(left):
                raise EvaluationError(f"Modulo of non-finite value {left}")
            return math.fmod(left, right)

        raise EvaluationError(f"Unknown operator: {op}")

    def _eval_functioncall(self, node: FunctionCall) -> float:
        definition = get_function(node.name)
        if definition is None:
            raise EvaluationError(f"Unknown function: {node.name}")

        if not definition.accepts(len(node.arguments)):
            raise EvaluationError(
                f"Wrong number of arguments for {node.name}: {len(node.arguments)}"
            )

        args = [self.evaluate(arg) for arg in node.arguments]

        try:
            return float(definition.implementation(*args))
        except (ValueError, OverflowError, TypeError) as e:
            raise EvaluationError(f"Error calling {node.name}: {e}")


# -----------------------------------------------------------------------------
# Compiled expressions
# -----------------------------------------------------------------------------


@dataclass(frozen=True)
class EvaluationResult:
    """Outcome of evaluating an expression.

    Attributes:
        value: The numeric result, 0.0 on failure
        diagnostic: Why the evaluation failed, or None on success
    """

    value: float
    diagnostic: Diagnostic | None = None

    @property
    def ok(self) -> bool:
        return self.diagnostic is None

    def report(self, diagnostics: DiagnosticSink | None = None) -> "EvaluationResult":
        """Log the diagnostic, if any, and record it in ``diagnostics``."""
        if self.diagnostic is not None:
            emit(self.diagnostic, diagnostics)
        return self


@dataclass(frozen=True)
class Expression:
    """A compiled expression.

    Compilation never raises; a syntax error is kept in ``error`` and
    reported each time the expression is evaluated. Two compilations of the
    same text compare equal.

    Attributes:
        source: The expression text (without the ``${}`` delimiters)
        ast: The parsed tree, or None if the text does not parse
        error: The syntax error message, or None
    """

    source: str
    ast: ASTNode | None = None
    error: str | None = None

    @property
    def is_valid(self) -> bool:
        return self.ast is not None

    def try_evaluate(
        self, environment: EnvironmentProvider, *, rule: str | None = None
    ) -> EvaluationResult:
        """Evaluate and return the value together with any diagnostic.

        ``rule`` is attached to the diagnostic of a failed evaluation.
        """
        if self.ast is None:
            return EvaluationResult(
                0.0, _failure(self.source, self.error or "not compiled", rule)
            )

        try:
            return EvaluationResult(Evaluator(environment).evaluate(self.ast))
        except RecursionError:
            reason = "expression is nested too deeply"
        except (EvaluationError, ArithmeticError, ValueError) as e:
            reason = str(e)
        return EvaluationResult(0.0, _failure(self.source, reason, rule))

    def evaluate(
        self,
        environment: EnvironmentProvider,
        diagnostics: DiagnosticSink | None = None,
        *,
        rule: str | None = None,
    ) -> float:
        """Evaluate to a float; failures are reported and yield 0.0."""
        return self.try_evaluate(environment, rule=rule).report(diagnostics).value

    def __str__(self) -> str:
        return f"${{{self.source}}}"


def _failure(source: str, reason: str, rule: str | None) -> Diagnostic:
    return Diagnostic(
        EVALUATION_FAILED,
        f"Unable to evaluate expression '{source}': {reason}",
        Severity.WARNING,
        rule,
    )


def compile_expression(source: str) -> Expression:
    """Compile expression text into an ``Expression``."""
    try:
        return Expression(source, parse(source))
    except (LexerError, ExpressionSyntaxError) as e:
        error = str(e)
    except RecursionError:
        error = "Expression is nested too deeply"
    logger.debug("Expression '%s' does not compile: %s", source, error)
    return Expression(source, None, error)


def evaluate(
    source: str,
    environment: EnvironmentProvider,
    diagnostics: DiagnosticSink | None = None,
) -> float:
    """Compile and evaluate an expression string.

    Example:
        evaluate("iPhoneX.width", StaticEnvironment())  # 375.0
    """
    return compile_expression(source).evaluate(environment, diagnostics)


def evaluate_bool(
    source: str,
    environment: EnvironmentProvider,
    diagnostics: DiagnosticSink | None = None,
) -> bool:
    """Evaluate an expression and treat any non-zero result as true."""
    return _to_bool(evaluate(source, environment, diagnostics))
