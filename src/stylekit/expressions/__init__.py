"""Expression language for stylesheet rules.

This module provides:
- Lexer: Tokenizes expression strings
- Parser: Produces AST from tokens
- Evaluator: Evaluates AST against constants and an environment
- CONSTANTS: The read-only constant table
- FUNCTIONS: The read-only math function table
"""

from stylekit.environment import ENVIRONMENT_SYMBOLS
from stylekit.expressions.constants import CONSTANTS
from stylekit.expressions.evaluator import (
    EvaluationError,
    EvaluationResult,
    Evaluator,
    Expression,
    compile_expression,
    evaluate,
    evaluate_bool,
)
from stylekit.expressions.functions import FUNCTIONS, FunctionDefinition, get_function
from stylekit.expressions.lexer import Lexer, LexerError, Token, TokenType
from stylekit.expressions.parser import (
    ASTNode,
    BinaryOp,
    Conditional,
    ExpressionSyntaxError,
    FunctionCall,
    Identifier,
    Literal,
    Parser,
    UnaryOp,
    parse,
)

__all__ = [
    # Constants
    "CONSTANTS",
    # Evaluator
    "ENVIRONMENT_SYMBOLS",
    "EvaluationError",
    "EvaluationResult",
    "Evaluator",
    "Expression",
    "compile_expression",
    "evaluate",
    "evaluate_bool",
    # Functions
    "FUNCTIONS",
    "FunctionDefinition",
    "get_function",
    # Lexer
    "Lexer",
    "LexerError",
    "Token",
    "TokenType",
    # Parser
    "ASTNode",
    "BinaryOp",
    "Conditional",
    "ExpressionSyntaxError",
    "FunctionCall",
    "Identifier",
    "Literal",
    "Parser",
    "UnaryOp",
    "parse",
]
