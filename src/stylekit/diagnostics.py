"""Non-fatal diagnostics emitted while loading and reading rules.

Every diagnostic is logged at its severity and, when a sink is supplied,
recorded so callers can assert on it.
"""

import logging
import threading
from dataclasses import dataclass
from enum import Enum
from typing import Any, Iterator

logger = logging.getLogger(__name__)


class Severity(Enum):
    """Diagnostic severity.

    INFO: Expected fallback (e.g. a conditional with no matching branch)
    WARNING: The value degraded to a default
    ERROR: Reserved for sinks that promote warnings
    """

    INFO = "info"
    WARNING = "warning"
    ERROR = "error"


_LOG_LEVELS = {
    Severity.INFO: logging.INFO,
    Severity.WARNING: logging.WARNING,
    Severity.ERROR: logging.ERROR,
}


# Diagnostic codes
TYPE_MISMATCH = "TYPE_MISMATCH"
EVALUATION_FAILED = "EVALUATION_FAILED"
COMPILE_FAILED = "COMPILE_FAILED"
HETEROGENEOUS_CONDITIONAL = "HETEROGENEOUS_CONDITIONAL"
INVALID_COLOR = "INVALID_COLOR"
INVALID_NUMBER = "INVALID_NUMBER"
NO_MATCH = "NO_MATCH"
UNKNOWN_RULE = "UNKNOWN_RULE"


@dataclass(frozen=True)
class Diagnostic:
    """A single non-fatal finding.

    Attributes:
        code: Machine-readable code (e.g., "TYPE_MISMATCH")
        message: Human-readable message
        severity: How serious the finding is
        rule: Key of the rule involved, if any
    """

    code: str
    message: str
    severity: Severity = Severity.WARNING
    rule: str | None = None

    def to_dict(self) -> dict[str, Any]:
        return {
            "code": self.code,
            "message": self.message,
            "severity": self.severity.value,
            "rule": self.rule,
        }

    def __str__(self) -> str:
        loc = f" [{self.rule}]" if self.rule else ""
        return f"{self.severity.value}: {self.code}{loc}: {self.message}"


class DiagnosticSink:
    """Collects diagnostics.

    Usage:
        sink = DiagnosticSink()
        accessor = RuleAccessor(environment, sink)
        accessor.float(rule, 0.0)
        assert TYPE_MISMATCH in sink.codes()
    """

    def __init__(self) -> None:
        self._items: list[Diagnostic] = []
        self._lock = threading.Lock()

    def add(self, diagnostic: Diagnostic) -> None:
        with self._lock:
            self._items.append(diagnostic)

    def codes(self) -> list[str]:
        return [d.code for d in self]

    def clear(self) -> None:
        with self._lock:
            self._items.clear()

    def __iter__(self) -> Iterator[Diagnostic]:
        with self._lock:
            snapshot = list(self._items)
        return iter(snapshot)

    def __len__(self) -> int:
        with self._lock:
            return len(self._items)


def emit(diagnostic: Diagnostic, sink: DiagnosticSink | None = None) -> Diagnostic:
    """Log a diagnostic and record it in ``sink`` when one is given."""
    logger.log(_LOG_LEVELS[diagnostic.severity], "%s", diagnostic)
    if sink is not None:
        sink.add(diagnostic)
    return diagnostic


def record(
    sink: DiagnosticSink | None,
    code: str,
    message: str,
    *,
    rule: str | None = None,
    severity: Severity = Severity.WARNING,
) -> Diagnostic:
    """Build, log and record a diagnostic."""
    return emit(Diagnostic(code, message, severity, rule), sink)
