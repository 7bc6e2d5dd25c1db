"""Progress and throughput tracking for a translation run."""

import time
from dataclasses import dataclass, field
from typing import Callable, Optional

from subbatch.common.schemas import StatsSnapshot
from subbatch.common.utils import MathUtils

Clock = Callable[[], float]


def elapsed_seconds(stats: "TranslationStats", now: float) -> float:
    """
    Elapsed run time.

    now - started_at while running, completed_at - started_at once complete,
    0 before the run starts.
    """
    if stats.started_at is None:
        return 0.0
    end = stats.completed_at if stats.completed_at is not None else now
    return max(0.0, end - stats.started_at)


def throughput(stats: "TranslationStats", now: float) -> float:
    """Processed segments per second; 0 when no time has elapsed."""
    elapsed = elapsed_seconds(stats, now)
    if elapsed <= 0:
        return 0.0
    return stats.processed / elapsed


@dataclass
class TranslationStats:
    """
    Counters and timestamps for one translation run.

    Derived values are recomputed from these fields on every read.
    """

    total: int = 0
    processed: int = 0
    started_at: Optional[float] = None
    completed_at: Optional[float] = None
    clock: Clock = field(default=time.monotonic, repr=False, compare=False)

    @property
    def running(self) -> bool:
        return self.started_at is not None and self.completed_at is None

    @property
    def complete(self) -> bool:
        return self.completed_at is not None

    def start(self, total: int) -> None:
        """
        Record the total and the start time.

        Raises:
            ValueError: If the run was already started or total is negative
        """
        if self.started_at is not None:
            raise ValueError("Translation stats already started")
        if total < 0:
            raise ValueError(f"total must not be negative, got {total}")
        self.total = total
        self.processed = 0
        self.started_at = self.clock()

    def advance(self, count: int) -> None:
        """
        Add a completed batch to the processed count.

        Raises:
            ValueError: If not running, count is negative, or the total would be exceeded
        """
        if not self.running:
            raise ValueError("Cannot advance stats outside a running translation")
        if count < 0:
            raise ValueError(f"count must not be negative, got {count}")
        if self.processed + count > self.total:
            raise ValueError(
                f"Processed count {self.processed + count} would exceed total {self.total}"
            )
        self.processed += count

    def finish(self) -> None:
        """
        Freeze the completion time.

        Raises:
            ValueError: If the run is not running
        """
        if not self.running:
            raise ValueError("Cannot finish stats outside a running translation")
        self.completed_at = self.clock()

    def elapsed_seconds(self) -> float:
        return elapsed_seconds(self, self.clock())

    def throughput(self) -> float:
        return throughput(self, self.clock())

    def progress_percent(self) -> float:
        return MathUtils.calculate_percentage(self.processed, self.total)

    def snapshot(self) -> StatsSnapshot:
        now = self.clock()
        return StatsSnapshot(
            total=self.total,
            processed=self.processed,
            elapsed_seconds=elapsed_seconds(self, now),
            throughput=throughput(self, now),
            progress_percent=self.progress_percent(),
            complete=self.complete,
        )
