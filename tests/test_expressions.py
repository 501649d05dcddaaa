"""Tests for the stylesheet expression language.

Tests cover:
- Lexer: Tokenization of expression strings
- Parser: AST generation from tokens
- Evaluator: Evaluation against constants and the environment
- Failure handling: errors become diagnostics and 0.0
"""

import logging

import pytest

from stylekit.diagnostics import EVALUATION_FAILED, DiagnosticSink
from stylekit.environment import Idiom, Orientation, SizeClass, StaticEnvironment
from stylekit.expressions import (
    CONSTANTS,
    BinaryOp,
    Conditional,
    Expression,
    ExpressionSyntaxError,
    FunctionCall,
    Identifier,
    Lexer,
    LexerError,
    Literal,
    Token,
    TokenType,
    UnaryOp,
    compile_expression,
    evaluate,
    evaluate_bool,
    parse,
)


@pytest.fixture
def env():
    return StaticEnvironment()


@pytest.fixture
def sink():
    return DiagnosticSink()


# =============================================================================
# Lexer Tests
# =============================================================================


class TestLexer:
    """Tests for the expression lexer."""

    def test_tokenize_numbers(self):
        tokens = Lexer("42 3.14 .5").tokenize()

        assert tokens[0] == Token(TokenType.NUMBER, 42.0, 0)
        assert tokens[1] == Token(TokenType.NUMBER, 3.14, 3)
        assert tokens[2] == Token(TokenType.NUMBER, 0.5, 8)

    def test_tokenize_dotted_identifiers(self):
        tokens = Lexer("iPhoneX.width FontWeight.bold idiom").tokenize()

        assert tokens[0] == Token(TokenType.IDENTIFIER, "iPhoneX.width", 0)
        assert tokens[1] == Token(TokenType.IDENTIFIER, "FontWeight.bold", 14)
        assert tokens[2] == Token(TokenType.IDENTIFIER, "idiom", 30)

    def test_tokenize_booleans(self):
        tokens = Lexer("true false TRUE").tokenize()

        assert [t.value for t in tokens[:-1]] == [True, False, True]
        assert all(t.type == TokenType.BOOLEAN for t in tokens[:-1])

    def test_tokenize_operators(self):
        tokens = Lexer("== != < <= > >= && || ! + - * / % ? :").tokenize()

        types = [t.type for t in tokens[:-1]]
        assert types == [
            TokenType.EQ,
            TokenType.NEQ,
            TokenType.LT,
            TokenType.LTE,
            TokenType.GT,
            TokenType.GTE,
            TokenType.AND,
            TokenType.OR,
            TokenType.NOT,
            TokenType.PLUS,
            TokenType.MINUS,
            TokenType.MULTIPLY,
            TokenType.DIVIDE,
            TokenType.MODULO,
            TokenType.QUESTION,
            TokenType.COLON,
        ]

    def test_tokenize_word_operators(self):
        tokens = Lexer("and or not").tokenize()

        assert [t.type for t in tokens[:-1]] == [TokenType.AND, TokenType.OR, TokenType.NOT]

    def test_ends_with_eof(self):
        tokens = Lexer("").tokenize()

        assert tokens == [Token(TokenType.EOF, None, 0)]

    def test_unexpected_character(self):
        with pytest.raises(LexerError) as exc_info:
            Lexer("1 @ 2").tokenize()

        assert exc_info.value.position == 2


# =============================================================================
# Parser Tests
# =============================================================================


class TestParser:
    """Tests for the expression parser."""

    def test_parse_literal(self):
        assert parse("42") == Literal(42.0)
        assert parse("true") == Literal(True)

    def test_parse_identifier(self):
        assert parse("iPhoneX.height") == Identifier("iPhoneX.height")

    def test_multiplication_binds_tighter(self):
        assert parse("1 + 2 * 3") == BinaryOp(
            "+", Literal(1.0), BinaryOp("*", Literal(2.0), Literal(3.0))
        )

    def test_comparison_below_arithmetic(self):
        assert parse("a + 1 > b") == BinaryOp(
            ">", BinaryOp("+", Identifier("a"), Literal(1.0)), Identifier("b")
        )

    def test_and_binds_tighter_than_or(self):
        ast = parse("a || b && c")

        assert ast == BinaryOp(
            "||", Identifier("a"), BinaryOp("&&", Identifier("b"), Identifier("c"))
        )

    def test_unary(self):
        assert parse("!a") == UnaryOp("!", Identifier("a"))
        assert parse("-2") == UnaryOp("-", Literal(2.0))
        assert parse("+2") == Literal(2.0)

    def test_ternary_is_right_associative(self):
        ast = parse("a ? 1 : b ? 2 : 3")

        assert ast == Conditional(
            Identifier("a"),
            Literal(1.0),
            Conditional(Identifier("b"), Literal(2.0), Literal(3.0)),
        )

    def test_function_call(self):
        assert parse("max(1, a)") == FunctionCall("max", (Literal(1.0), Identifier("a")))

    def test_empty_expression(self):
        with pytest.raises(ExpressionSyntaxError):
            parse("   ")

    def test_trailing_tokens(self):
        with pytest.raises(ExpressionSyntaxError):
            parse("1 2")

    def test_unbalanced_parenthesis(self):
        with pytest.raises(ExpressionSyntaxError):
            parse("(1 + 2")

    def test_missing_ternary_colon(self):
        with pytest.raises(ExpressionSyntaxError):
            parse("a ? 1")


# =============================================================================
# Evaluator Tests
# =============================================================================


class TestEvaluator:
    """Tests for evaluation against constants and environment."""

    @pytest.mark.parametrize(
        "source,expected",
        [
            ("1 + 2 * 3", 7.0),
            ("(1 + 2) * 3", 9.0),
            ("10 % 4", 2.0),
            ("7 / 2", 3.5),
            ("-iPhoneSE.width", -320.0),
            ("1 == 1", 1.0),
            ("1 != 1", 0.0),
            ("2 <= 1", 0.0),
            ("!true", 0.0),
            ("not 0", 1.0),
            ("true && false || true", 1.0),
            ("0 ? 1 : 0 ? 2 : 3", 3.0),
        ],
    )
    def test_arithmetic_and_logic(self, env, source, expected):
        assert evaluate(source, env) == expected

    def test_reference_width(self, env):
        assert evaluate("iPhoneX.width", env) == 375.0

    def test_one_equals_one_is_truthy(self, env):
        assert evaluate_bool("1 == 1", env) is True

    def test_default_is_truthy(self, env):
        assert evaluate_bool("default", env) is True

    def test_constant_values(self):
        assert CONSTANTS["iPad"] == float(Idiom.iPad)
        assert CONSTANTS["landscape"] == 1.0
        assert CONSTANTS["regular"] == float(SizeClass.regular)
        assert CONSTANTS["spaceBetween"] == 6.0
        assert CONSTANTS["TextAlignment.natural"] == 4.0
        assert CONSTANTS["LineBreakMode.byTruncatingMiddle"] == 5.0
        assert CONSTANTS["ImageOrientation.rightMirrored"] == 7.0
        assert CONSTANTS["FontWeight.bold"] == pytest.approx(0.4)

    def test_constant_table_is_read_only(self):
        with pytest.raises(TypeError):
            CONSTANTS["iPad"] = 99.0  # type: ignore[index]

    def test_environment_symbols(self):
        env = StaticEnvironment(
            current_idiom=Idiom.iPad,
            current_orientation=Orientation.landscape,
            vertical=SizeClass.compact,
            horizontal=SizeClass.regular,
        )

        assert evaluate("idiom == iPad", env) == 1.0
        assert evaluate("orientation == landscape", env) == 1.0
        assert evaluate("verticalSizeClass == compact", env) == 1.0
        assert evaluate("horizontalSizeClass == regular", env) == 1.0

    def test_environment_is_queried_on_every_evaluation(self):
        expression = compile_expression("idiom == iPad ? 24 : 16")

        assert expression.evaluate(StaticEnvironment(current_idiom=Idiom.iPad)) == 24.0
        assert expression.evaluate(StaticEnvironment(current_idiom=Idiom.phone)) == 16.0

    def test_environment_variables(self):
        env = StaticEnvironment().with_variables(x=5)

        assert evaluate("x > 0", env) == 1.0
        assert evaluate("x * 2", env) == 10.0

    @pytest.mark.parametrize(
        "source,expected",
        [
            ("abs(-4)", 4.0),
            ("min(4)", 4.0),
            ("max(1, 5, 3)", 5.0),
            ("floor(2.7)", 2.0),
            ("ceil(2.1)", 3.0),
            ("round(3.7)", 4.0),
            ("sqrt(16)", 4.0),
            ("pow(2, 10)", 1024.0),
            ("max(12, iPhoneSE.width / 20)", 16.0),
        ],
    )
    def test_functions(self, env, source, expected):
        assert evaluate(source, env) == expected

    def test_compiled_expressions_are_value_equal(self):
        assert compile_expression("idiom == iPad") == compile_expression("idiom == iPad")
        assert compile_expression("1 +") == compile_expression("1 +")

    def test_str_restores_delimiters(self):
        assert str(compile_expression("1 + 1")) == "${1 + 1}"


# =============================================================================
# Failure Tests
# =============================================================================


class TestEvaluationFailures:
    """Evaluation never raises; failures yield 0.0 and a diagnostic."""

    @pytest.mark.parametrize(
        "source",
        [
            "unknownSymbol + 1",
            "1 / 0",
            "1 % 0",
            "nope(1)",
            "abs(1, 2)",
            "sqrt(-1)",
            "1 +",
            "1 @ 2",
            "pow(10, 300) * pow(10, 300) % 2",
            "floor(pow(10, 300) * pow(10, 300))",
        ],
    )
    def test_failure_yields_zero(self, env, sink, source):
        assert evaluate(source, env, sink) == 0.0
        assert sink.codes() == [EVALUATION_FAILED]

    def test_syntax_error_is_kept_on_expression(self):
        expression = compile_expression("(1 + 2")

        assert isinstance(expression, Expression)
        assert expression.is_valid is False
        assert expression.error is not None

    def test_try_evaluate_returns_diagnostic(self, env):
        result = compile_expression("missing").try_evaluate(env)

        assert result.value == 0.0
        assert result.ok is False
        assert result.diagnostic.code == EVALUATION_FAILED
        assert "missing" in result.diagnostic.message

    def test_try_evaluate_success(self, env):
        result = compile_expression("iPhone8Plus.height").try_evaluate(env)

        assert result.ok
        assert result.value == 736.0

    def test_failing_provider_is_reported(self, sink):
        class BrokenEnvironment(StaticEnvironment):
            def idiom(self):
                raise RuntimeError("no screen")

        assert evaluate("idiom", BrokenEnvironment(), sink) == 0.0
        assert sink.codes() == [EVALUATION_FAILED]

    def test_failure_is_logged(self, env, caplog):
        with caplog.at_level(logging.WARNING):
            evaluate("unknownSymbol", env)

        assert "unknownSymbol" in caplog.text

    def test_rule_key_attached(self, env, sink):
        compile_expression("nothing").evaluate(env, sink, rule="width")

        assert [d.rule for d in sink] == ["width"]

    def test_deep_nesting_does_not_compile(self, env, sink):
        expression = compile_expression("(" * 400 + "1" + ")" * 400)

        assert expression.is_valid is False
        assert "nested too deeply" in expression.error
        assert expression.evaluate(env, sink) == 0.0
        assert sink.codes() == [EVALUATION_FAILED]

    def test_deep_unary_chain_yields_zero(self, env, sink):
        assert evaluate("-" * 600 + "1", env, sink) == 0.0
        assert sink.codes() == [EVALUATION_FAILED]

    def test_report_records_diagnostic(self, env, sink):
        result = compile_expression("missing").try_evaluate(env, rule="gap")

        assert result.report(sink) is result
        assert [d.rule for d in sink] == ["gap"]

    def test_diagnostic_to_dict(self, env):
        result = compile_expression("1 / 0").try_evaluate(env, rule="gap")

        assert result.diagnostic.to_dict() == {
            "code": EVALUATION_FAILED,
            "message": result.diagnostic.message,
            "severity": "warning",
            "rule": "gap",
        }
