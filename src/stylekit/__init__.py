"""stylekit: a stylesheet rule engine.

Loads YAML stylesheets into immutable rule tables and resolves rule values
(numbers, booleans, strings, fonts, colors) against a runtime environment.
"""

from stylekit.accessors import RuleAccessor, StyleReader
from stylekit.diagnostics import Diagnostic, DiagnosticSink, Severity
from stylekit.environment import (
    EnvironmentProvider,
    Idiom,
    Orientation,
    SizeClass,
    StaticEnvironment,
)
from stylekit.errors import IllegalArgumentCountError, MalformedDocumentError, StylesheetError
from stylekit.expressions import Expression, compile_expression
from stylekit.loader import Stylesheet, StylesheetLoader, parse
from stylekit.rules import (
    ColorDescriptor,
    ConditionalBranch,
    FontDescriptor,
    Rule,
    ValueKind,
)

__all__ = [
    "ColorDescriptor",
    "ConditionalBranch",
    "Diagnostic",
    "DiagnosticSink",
    "EnvironmentProvider",
    "Expression",
    "FontDescriptor",
    "Idiom",
    "IllegalArgumentCountError",
    "MalformedDocumentError",
    "Orientation",
    "Rule",
    "RuleAccessor",
    "Severity",
    "SizeClass",
    "StaticEnvironment",
    "StyleReader",
    "Stylesheet",
    "StylesheetError",
    "StylesheetLoader",
    "ValueKind",
    "compile_expression",
    "parse",
]
