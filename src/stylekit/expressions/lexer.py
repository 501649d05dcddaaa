"""Tokenizer for stylesheet expressions.

Turns the body of an expression literal (the text inside ``${...}``) into
tokens for the parser. Dotted names such as ``iPhoneX.width`` or
``FontWeight.bold`` are a single IDENTIFIER; every number is a float.
"""

import re
from dataclasses import dataclass
from enum import Enum, auto
from typing import Iterator


class TokenType(Enum):
    NUMBER = auto()
    BOOLEAN = auto()
    IDENTIFIER = auto()

    EQ = auto()
    NEQ = auto()
    LT = auto()
    LTE = auto()
    GT = auto()
    GTE = auto()

    AND = auto()
    OR = auto()
    NOT = auto()

    PLUS = auto()
    MINUS = auto()
    MULTIPLY = auto()
    DIVIDE = auto()
    MODULO = auto()

    QUESTION = auto()
    COLON = auto()

    LPAREN = auto()
    RPAREN = auto()
    COMMA = auto()

    EOF = auto()


@dataclass(frozen=True)
class Token:
    """A lexed token and the offset it starts at."""

    type: TokenType
    value: str | float | bool | None
    position: int

    def __repr__(self) -> str:
        return f"Token({self.type.name}, {self.value!r}, pos={self.position})"


class LexerError(Exception):
    """An expression contains a character no token starts with."""

    def __init__(self, message: str, position: int):
        self.position = position
        super().__init__(f"{message} at position {position}")


# Two-character operators are listed first so "<=" wins over "<".
OPERATORS: dict[str, TokenType] = {
    "==": TokenType.EQ,
    "!=": TokenType.NEQ,
    "<=": TokenType.LTE,
    ">=": TokenType.GTE,
    "&&": TokenType.AND,
    "||": TokenType.OR,
    "<": TokenType.LT,
    ">": TokenType.GT,
    "!": TokenType.NOT,
    "+": TokenType.PLUS,
    "-": TokenType.MINUS,
    "*": TokenType.MULTIPLY,
    "/": TokenType.DIVIDE,
    "%": TokenType.MODULO,
    "?": TokenType.QUESTION,
    ":": TokenType.COLON,
    "(": TokenType.LPAREN,
    ")": TokenType.RPAREN,
    ",": TokenType.COMMA,
}

# Word forms, matched case-insensitively.
KEYWORDS: dict[str, tuple[TokenType, bool | str]] = {
    "true": (TokenType.BOOLEAN, True),
    "false": (TokenType.BOOLEAN, False),
    "and": (TokenType.AND, "and"),
    "or": (TokenType.OR, "or"),
    "not": (TokenType.NOT, "not"),
}

_NAME = r"[A-Za-z_][A-Za-z0-9_]*"
_OPERATOR = "|".join(re.escape(op) for op in OPERATORS)

_SCANNER = re.compile(
    rf"""
    (?P<space>\s+)
    | (?P<number>\d+(?:\.\d+)?|\.\d+)
    | (?P<name>{_NAME}(?:\.{_NAME})*)
    | (?P<operator>{_OPERATOR})
    """,
    re.VERBOSE,
)


class Lexer:
    """Tokenizer for the expression language.

    Usage:
        tokens = Lexer("idiom == iPad ? 24 : 16").tokenize()
    """

    def __init__(self, source: str):
        self.source = source
        self.position = 0

    def __iter__(self) -> Iterator[Token]:
        while True:
            token = self.next_token()
            yield token
            if token.type == TokenType.EOF:
                return

    def next_token(self) -> Token:
        """Scan the next token, skipping whitespace."""
        while self.position < len(self.source):
            match = _SCANNER.match(self.source, self.position)
            if match is None:
                raise LexerError(
                    f"Unexpected character '{self.source[self.position]}'",
                    self.position,
                )

            start, self.position = self.position, match.end()
            kind, text = match.lastgroup, match.group()

            if kind == "number":
                return Token(TokenType.NUMBER, float(text), start)
            if kind == "name":
                keyword = KEYWORDS.get(text.lower())
                if keyword is not None:
                    return Token(keyword[0], keyword[1], start)
                return Token(TokenType.IDENTIFIER, text, start)
            if kind == "operator":
                return Token(OPERATORS[text], text, start)

        return Token(TokenType.EOF, None, self.position)

    def tokenize(self) -> list[Token]:
        """Tokenize the whole source; the last token is always EOF."""
        return list(self)
