"""Severity counters shared by every rule kind."""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass

from repo_contract.contract import Severity


@dataclass(slots=True)
class Summary:
    """Number of failed checks per severity."""

    error: int = 0
    warning: int = 0
    info: int = 0

    def record(self, severity: Severity) -> None:
        if severity == "error":
            self.error += 1
        elif severity == "warning":
            self.warning += 1
        else:
            self.info += 1

    def add(self, other: Summary) -> None:
        self.error += other.error
        self.warning += other.warning
        self.info += other.info

    def has_failures(self, *, strict: bool = False) -> bool:
        return self.error > 0 or (strict and self.warning > 0)

    def to_dict(self) -> dict[str, int]:
        return {"error": self.error, "warning": self.warning, "info": self.info}


def summarize(outcomes: Iterable[tuple[bool, Severity]]) -> Summary:
    """Count ``(passed, severity)`` outcomes that did not pass."""
    summary = Summary()
    for passed, severity in outcomes:
        if not passed:
            summary.record(severity)
    return summary
