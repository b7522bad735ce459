"""Caller-visible channel for recoverable parse problems.

Every record is kept in scan order and mirrored to the package logger, so a
caller can either inspect ``metadata.diagnostics`` or configure logging.
"""

import logging
from typing import Iterator, List, NamedTuple, Optional

INFO = "info"
WARNING = "warning"
ERROR = "error"

_LOG_LEVELS = {
    INFO: logging.INFO,
    WARNING: logging.WARNING,
    ERROR: logging.ERROR,
}


class Diagnostic(NamedTuple):
    """One recorded problem: severity, 1-based line number (if known) and message."""

    severity: str
    line_number: Optional[int]
    message: str

    def __str__(self) -> str:
        if self.line_number is None:
            return f"{self.severity.upper()}: {self.message}"
        return f"{self.severity.upper()} line {self.line_number}: {self.message}"


class Diagnostics:
    """Ordered collector of :class:`Diagnostic` records."""

    def __init__(self, logger: Optional[logging.Logger] = None):
        self._records: List[Diagnostic] = []
        self._logger = logger or logging.getLogger(__name__)

    def add(self, severity: str, message: str, line_number: Optional[int] = None) -> Diagnostic:
        if severity not in _LOG_LEVELS:
            raise ValueError(f"Unknown severity '{severity}', expected one of {list(_LOG_LEVELS)}")
        record = Diagnostic(severity, line_number, message)
        self._records.append(record)
        self._logger.log(_LOG_LEVELS[severity], str(record))
        return record

    def warning(self, message: str, line_number: Optional[int] = None) -> Diagnostic:
        return self.add(WARNING, message, line_number)

    @property
    def records(self) -> tuple:
        return tuple(self._records)

    @property
    def warnings(self) -> tuple:
        return tuple(r for r in self._records if r.severity in (WARNING, ERROR))

    def __iter__(self) -> Iterator[Diagnostic]:
        return iter(self._records)

    def __len__(self) -> int:
        return len(self._records)

    def __repr__(self) -> str:
        return f"Diagnostics(records={len(self._records)}, warnings={len(self.warnings)})"


def record(
    diagnostics: Optional[Diagnostics],
    severity: str,
    message: str,
    line_number: Optional[int] = None,
) -> None:
    """Add to ``diagnostics`` when given, otherwise log on this module's logger."""
    if diagnostics is not None:
        diagnostics.add(severity, message, line_number)
    else:
        logging.getLogger(__name__).log(_LOG_LEVELS[severity], str(Diagnostic(severity, line_number, message)))
