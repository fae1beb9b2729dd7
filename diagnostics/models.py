"""Result types shared by every diagnostics probe."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum


class DiagnosticStatus(str, Enum):
    """Outcome of a probe, ordered ``PASS < WARN < FAIL``."""

    PASS = "PASS"
    WARN = "WARN"
    FAIL = "FAIL"

    @property
    def severity(self) -> int:
        return _STATUS_SEVERITY[self]


_STATUS_SEVERITY = {
    DiagnosticStatus.PASS: 0,
    DiagnosticStatus.WARN: 1,
    DiagnosticStatus.FAIL: 2,
}


@dataclass(frozen=True)
class DiagnosticResult:
    """Outcome of one probe with a one-line explanation."""

    name: str
    status: DiagnosticStatus
    details: str

    @property
    def failed(self) -> bool:
        return self.status is DiagnosticStatus.FAIL
