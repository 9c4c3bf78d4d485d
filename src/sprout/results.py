from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any


class SeederStatus(str, Enum):
    PENDING = "pending"
    RUNNING = "running"
    COMPLETED = "completed"
    FAILED = "failed"
    SKIPPED = "skipped"


class InvalidTransitionError(RuntimeError):
    pass


_ALLOWED = {
    SeederStatus.PENDING: {SeederStatus.RUNNING, SeederStatus.SKIPPED},
    SeederStatus.RUNNING: {SeederStatus.COMPLETED, SeederStatus.FAILED},
}


@dataclass
class SeederResult:
    """Outcome of one seeder within a run.

    Status moves pending -> running -> completed|failed, or pending -> skipped,
    and never changes again once terminal.
    """

    name: str
    status: SeederStatus = SeederStatus.PENDING
    duration_ms: float | None = None
    output: Any = None
    error: Exception | None = None

    def _transition(self, status: SeederStatus) -> None:
        if status not in _ALLOWED.get(self.status, set()):
            raise InvalidTransitionError(
                f"Seeder {self.name!r} cannot move from {self.status.value} to {status.value}"
            )
        self.status = status

    def start(self) -> None:
        self._transition(SeederStatus.RUNNING)

    def complete(self, output: Any, duration_ms: float) -> None:
        self._transition(SeederStatus.COMPLETED)
        self.output = output
        self.duration_ms = duration_ms

    def fail(self, error: Exception, duration_ms: float) -> None:
        self._transition(SeederStatus.FAILED)
        self.error = error
        self.duration_ms = duration_ms

    def skip(self) -> None:
        self._transition(SeederStatus.SKIPPED)


@dataclass
class RunLedger:
    results: list[SeederResult] = field(default_factory=list)
    order: list[str] = field(default_factory=list)
    # Structural error that prevented the run from starting
    error: Exception | None = None

    @property
    def success(self) -> bool:
        if self.error is not None:
            return False
        return not any(r.status is SeederStatus.FAILED for r in self.results)

    @property
    def outputs(self) -> dict[str, Any]:
        return {r.name: r.output for r in self.results if r.status is SeederStatus.COMPLETED}

    def get(self, name: str) -> SeederResult | None:
        for r in self.results:
            if r.name == name:
                return r
        return None

    def failed(self) -> list[SeederResult]:
        return [r for r in self.results if r.status is SeederStatus.FAILED]

    def counts(self) -> dict[SeederStatus, int]:
        counts = {status: 0 for status in SeederStatus}
        for r in self.results:
            counts[r.status] += 1
        return counts
