"""
Outcome bookkeeping for the calendar reconcilers.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Optional


class Outcome(Enum):
    CREATED = "created"
    UPDATED = "updated"
    UNCHANGED = "unchanged"
    SKIPPED = "skipped"
    FAILED = "failed"


@dataclass(frozen=True)
class ReconciliationResult:
    outcome: Outcome
    identifier: str
    reason: str = ""
    error: Optional[Exception] = None

    @classmethod
    def created(cls, identifier: str) -> "ReconciliationResult":
        return cls(Outcome.CREATED, identifier)

    @classmethod
    def updated(cls, identifier: str) -> "ReconciliationResult":
        return cls(Outcome.UPDATED, identifier)

    @classmethod
    def unchanged(cls, identifier: str) -> "ReconciliationResult":
        return cls(Outcome.UNCHANGED, identifier)

    @classmethod
    def skipped(cls, identifier: str, reason: str) -> "ReconciliationResult":
        return cls(Outcome.SKIPPED, identifier, reason=reason)

    @classmethod
    def failed(cls, identifier: str, error: Exception) -> "ReconciliationResult":
        return cls(Outcome.FAILED, identifier, reason=str(error), error=error)


@dataclass
class SectionChanges:
    """Created/updated identifiers of one reconciler, plus counters for the log."""
    created: list[str] = field(default_factory=list)
    updated: list[str] = field(default_factory=list)
    unchanged: int = 0
    skipped: int = 0
    errors: int = 0

    def record(self, result: ReconciliationResult) -> None:
        if result.outcome is Outcome.CREATED:
            self.created.append(result.identifier)
        elif result.outcome is Outcome.UPDATED:
            self.updated.append(result.identifier)
        elif result.outcome is Outcome.UNCHANGED:
            self.unchanged += 1
        elif result.outcome is Outcome.SKIPPED:
            self.skipped += 1
        else:
            self.errors += 1

    @property
    def processed(self) -> int:
        return len(self.created) + len(self.updated) + self.unchanged + self.skipped + self.errors

    def has_changes(self) -> bool:
        return bool(self.created or self.updated)

    def summary(self) -> str:
        return (
            f"processed={self.processed} created={len(self.created)} "
            f"updated={len(self.updated)} unchanged={self.unchanged} "
            f"skipped={self.skipped} errors={self.errors}"
        )


@dataclass
class ChangeReport:
    individual: SectionChanges = field(default_factory=SectionChanges)
    summary: SectionChanges = field(default_factory=SectionChanges)

    @property
    def errors(self) -> int:
        return self.individual.errors + self.summary.errors


def merge(individual: Optional[SectionChanges], summary: Optional[SectionChanges]) -> ChangeReport:
    """Combine the two reconciler outputs; a disabled reconciler contributes nothing."""
    return ChangeReport(
        individual=individual or SectionChanges(),
        summary=summary or SectionChanges(),
    )


def has_any_change(report: ChangeReport) -> bool:
    return report.individual.has_changes() or report.summary.has_changes()
