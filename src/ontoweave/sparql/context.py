"""
Query execution context with an optional budget.

Provides:
- Query timeout (checked after every join step)
- Solution budget (maximum intermediate solutions)
- Query statistics
"""

from __future__ import annotations
from dataclasses import dataclass, field
from enum import IntEnum, auto
from typing import Optional
import time

from ontoweave.config import QueryConfig


class QueryState(IntEnum):
    """Query execution states."""
    PENDING = auto()     # Created but not started
    RUNNING = auto()     # Currently executing
    COMPLETED = auto()   # Finished successfully
    TIMEOUT = auto()     # Exceeded timeout
    EXHAUSTED = auto()   # Exceeded solution budget
    FAILED = auto()      # Failed with error


@dataclass
class QueryStats:
    """Statistics for query execution."""
    start_time: Optional[float] = None
    end_time: Optional[float] = None
    state: QueryState = QueryState.PENDING
    rows_scanned: int = 0
    rows_returned: int = 0
    pattern_count: int = 0
    join_count: int = 0
    peak_solutions: int = 0
    error: Optional[str] = None

    @property
    def duration_ms(self) -> float:
        """Query duration in milliseconds."""
        if self.start_time is None:
            return 0.0
        end = self.end_time or time.perf_counter()
        return (end - self.start_time) * 1000

    def to_dict(self) -> dict:
        """Convert to dictionary."""
        return {
            "duration_ms": self.duration_ms,
            "state": self.state.name,
            "rows_scanned": self.rows_scanned,
            "rows_returned": self.rows_returned,
            "pattern_count": self.pattern_count,
            "join_count": self.join_count,
            "peak_solutions": self.peak_solutions,
            "error": self.error,
        }


class QueryTimeoutException(Exception):
    """Exception raised when a query times out."""
    pass


class QueryBudgetExceeded(Exception):
    """Exception raised when intermediate solutions exceed the configured maximum."""
    pass


@dataclass
class QueryContext:
    """
    Execution context for a query.

    Provides timeout, solution budget and statistics tracking. A context
    without limits never raises.
    """
    timeout_seconds: Optional[float] = None
    max_solutions: Optional[int] = None
    stats: QueryStats = field(default_factory=QueryStats)

    @classmethod
    def from_config(cls, config: Optional[QueryConfig]) -> "QueryContext":
        if config is None:
            return cls()
        return cls(timeout_seconds=config.timeout_seconds, max_solutions=config.max_solutions)

    def start(self):
        """Mark query as started."""
        self.stats.start_time = time.perf_counter()
        self.stats.state = QueryState.RUNNING

    def complete(self, rows_returned: int = 0):
        """Mark query as completed."""
        self.stats.end_time = time.perf_counter()
        self.stats.state = QueryState.COMPLETED
        self.stats.rows_returned = rows_returned

    def fail(self, error: str):
        """Mark query as failed."""
        self.stats.end_time = time.perf_counter()
        self.stats.state = QueryState.FAILED
        self.stats.error = error

    def check_timeout(self):
        """Check if query has exceeded timeout."""
        if self.timeout_seconds is not None and self.stats.start_time is not None:
            elapsed = time.perf_counter() - self.stats.start_time
            if elapsed > self.timeout_seconds:
                self.stats.end_time = time.perf_counter()
                self.stats.state = QueryState.TIMEOUT
                raise QueryTimeoutException(
                    f"Query exceeded timeout of {self.timeout_seconds}s"
                )

    def check_solutions(self, count: int):
        """Check the number of intermediate solutions against the budget."""
        self.stats.peak_solutions = max(self.stats.peak_solutions, count)
        if self.max_solutions is not None and count > self.max_solutions:
            self.stats.end_time = time.perf_counter()
            self.stats.state = QueryState.EXHAUSTED
            raise QueryBudgetExceeded(
                f"Query produced {count} solutions, over the budget of {self.max_solutions}"
            )

    def check(self, solution_count: int):
        """Check both budgets; called after every join step."""
        self.check_timeout()
        self.check_solutions(solution_count)

    def record_pattern(self, rows_scanned: int):
        """Record a pattern evaluation."""
        self.stats.pattern_count += 1
        self.stats.rows_scanned += rows_scanned

    def record_join(self):
        """Record a join operation."""
        self.stats.join_count += 1
