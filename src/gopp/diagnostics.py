"""gopp Diagnostics

Collects malformed-directive warnings. Reporting never raises: a bad
directive is logged, recorded and skipped.
"""

import logging
from dataclasses import dataclass
from typing import Iterator, List, Optional


logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Diagnostic:
    """One malformed directive."""
    line: int
    column: int
    raw: str
    reason: str
    path: Optional[str] = None

    def __str__(self) -> str:
        loc = f"{self.path}:{self.line}:{self.column}" if self.path else f"{self.line}:{self.column}"
        return f"{loc}: invalid gopp comment: {self.raw} ({self.reason})"


class DiagnosticsSink:
    """Receives diagnostics from the engine."""

    def __init__(self, path: Optional[str] = None):
        self.path = path
        self.diagnostics: List[Diagnostic] = []

    def report(self, line: int, column: int, raw: str, reason: str) -> Diagnostic:
        diagnostic = Diagnostic(line, column, raw, reason, self.path)
        self.diagnostics.append(diagnostic)
        logger.warning("%s", diagnostic)
        return diagnostic

    def clear(self) -> None:
        self.diagnostics = []

    def __len__(self) -> int:
        return len(self.diagnostics)

    def __iter__(self) -> Iterator[Diagnostic]:
        return iter(self.diagnostics)
