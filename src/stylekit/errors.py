"""Errors raised while loading a stylesheet.

Loading fails loudly: a malformed document is an authoring bug. Evaluation
never raises; see :mod:`stylekit.diagnostics`.
"""


class StylesheetError(Exception):
    """Base class for stylesheet load failures."""
    pass


class MalformedDocumentError(StylesheetError):
    """The document does not have the expected structure."""

    def __init__(self, message: str):
        self.message = message
        super().__init__(message)


class IllegalArgumentCountError(StylesheetError):
    """A ``!!font``/``!!color`` literal has the wrong number of arguments."""

    def __init__(self, function: str, expected: int | None = None, found: int | None = None):
        self.function = function
        self.expected = expected
        self.found = found
        detail = ""
        if expected is not None and found is not None:
            detail = f": expected {expected}, found {found}"
        super().__init__(f"Illegal number of arguments for '{function}'{detail}")
