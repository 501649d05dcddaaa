"""Parser for stylesheet expressions.

Converts a stream of tokens into an Abstract Syntax Tree (AST).
Uses recursive descent parsing with operator precedence.

Operator Precedence (lowest to highest):
1. ?: (ternary, right associative)
2. || (or)
3. && (and)
4. == != < <= > >=
5. + -
6. * / %
7. ! (not) - (unary) + (unary)
8. () (function call)
"""

from dataclasses import dataclass

from stylekit.expressions.lexer import Lexer, Token, TokenType


# -----------------------------------------------------------------------------
# AST Node Types
# -----------------------------------------------------------------------------


@dataclass(frozen=True)
class ASTNode:
    """Base class for AST nodes."""
    pass


@dataclass(frozen=True)
class Literal(ASTNode):
    """A numeric or boolean literal."""
    value: float | bool


@dataclass(frozen=True)
class Identifier(ASTNode):
    """A constant, environment symbol or variable reference."""
    name: str


@dataclass(frozen=True)
class BinaryOp(ASTNode):
    """Binary operation (e.g., a + b, x == y)."""
    operator: str
    left: ASTNode
    right: ASTNode


@dataclass(frozen=True)
class UnaryOp(ASTNode):
    """Unary operation (e.g., !x, -y)."""
    operator: str
    operand: ASTNode


@dataclass(frozen=True)
class Conditional(ASTNode):
    """Ternary selection (e.g., idiom == iPad ? 20 : 10)."""
    condition: ASTNode
    when_true: ASTNode
    when_false: ASTNode


@dataclass(frozen=True)
class FunctionCall(ASTNode):
    """Function call (e.g., max(a, b))."""
    name: str
    arguments: tuple[ASTNode, ...]


# -----------------------------------------------------------------------------
# Parser
# -----------------------------------------------------------------------------


class ExpressionSyntaxError(Exception):
    """Error during parsing."""

    def __init__(self, message: str, token: Token):
        self.token = token
        super().__init__(f"{message} at position {token.position}")


# Binary operators by precedence level, loosest first. Every level is
# left associative.
_BINARY_LEVELS: tuple[dict[TokenType, str], ...] = (
    {TokenType.OR: "||"},
    {TokenType.AND: "&&"},
    {
        TokenType.EQ: "==",
        TokenType.NEQ: "!=",
        TokenType.LT: "<",
        TokenType.LTE: "<=",
        TokenType.GT: ">",
        TokenType.GTE: ">=",
    },
    {TokenType.PLUS: "+", TokenType.MINUS: "-"},
    {TokenType.MULTIPLY: "*", TokenType.DIVIDE: "/", TokenType.MODULO: "%"},
)


class Parser:
    """Recursive descent parser for the expression language.

    Usage:
        ast = Parser("idiom == iPad ? 24 : 16").parse()
    """

    def __init__(self, source: str):
        self.source = source
        self.tokens = Lexer(source).tokenize()
        self.position = 0

    def parse(self) -> ASTNode:
        """Parse the whole source; trailing tokens are an error."""
        if self._peek().type == TokenType.EOF:
            raise ExpressionSyntaxError("Empty expression", self._peek())

        ast = self._expression()

        trailing = self._peek()
        if trailing.type != TokenType.EOF:
            raise ExpressionSyntaxError(f"Unexpected token '{trailing.value}'", trailing)
        return ast

    def _peek(self) -> Token:
        return self.tokens[min(self.position, len(self.tokens) - 1)]

    def _take(self) -> Token:
        token = self._peek()
        self.position += 1
        return token

    def _accept(self, token_type: TokenType) -> bool:
        if self._peek().type != token_type:
            return False
        self.position += 1
        return True

    def _expect(self, token_type: TokenType, message: str) -> Token:
        if self._peek().type != token_type:
            raise ExpressionSyntaxError(message, self._peek())
        return self._take()

    def _expression(self) -> ASTNode:
        condition = self._binary(0)
        if not self._accept(TokenType.QUESTION):
            return condition

        when_true = self._expression()
        self._expect(TokenType.COLON, "Expected ':' in conditional expression")
        return Conditional(condition, when_true, self._expression())

    def _binary(self, level: int) -> ASTNode:
        if level == len(_BINARY_LEVELS):
            return self._unary()

        operators = _BINARY_LEVELS[level]
        left = self._binary(level + 1)
        while self._peek().type in operators:
            operator = operators[self._take().type]
            left = BinaryOp(operator, left, self._binary(level + 1))
        return left

    def _unary(self) -> ASTNode:
        if self._accept(TokenType.NOT):
            return UnaryOp("!", self._unary())
        if self._accept(TokenType.MINUS):
            return UnaryOp("-", self._unary())
        if self._accept(TokenType.PLUS):
            return self._unary()
        return self._primary()

    def _primary(self) -> ASTNode:
        token = self._take()

        if token.type in (TokenType.NUMBER, TokenType.BOOLEAN):
            return Literal(token.value)

        if token.type == TokenType.IDENTIFIER:
            if self._accept(TokenType.LPAREN):
                return FunctionCall(str(token.value), self._arguments())
            return Identifier(str(token.value))

        if token.type == TokenType.LPAREN:
            inner = self._expression()
            self._expect(TokenType.RPAREN, "Expected ')' after expression")
            return inner

        raise ExpressionSyntaxError(f"Unexpected token '{token.value}'", token)

    def _arguments(self) -> tuple[ASTNode, ...]:
        if self._accept(TokenType.RPAREN):
            return ()

        arguments = [self._expression()]
        while self._accept(TokenType.COMMA):
            arguments.append(self._expression())
        self._expect(TokenType.RPAREN, "Expected ')' after arguments")
        return tuple(arguments)


def parse(source: str) -> ASTNode:
    """Convenience function to parse an expression string.

    Args:
        source: The expression string

    Returns:
        The AST root node

    Raises:
        LexerError: The source contains a character outside the language
        ExpressionSyntaxError: The tokens do not form an expression
    """
    return Parser(source).parse()
