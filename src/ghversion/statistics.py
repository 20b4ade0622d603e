"""Request accounting for a version resolution.

The GitHub client reports every request it makes to the active
``ResolutionStatistics`` instance, which attributes it to the stage that was
running at the time. ``ghversion -v`` prints the result.
"""

from __future__ import annotations

import time
from collections import Counter
from dataclasses import dataclass, field
from datetime import timedelta
from typing import TYPE_CHECKING, ClassVar

from rich.table import Table

if TYPE_CHECKING:
    from rich.console import Console

# Request kinds reported by GitHubClient, with their summary labels
CALL_LABELS: dict[str, str] = {
    "github_commits": "Commit pages",
    "github_content": "File contents",
    "github_compare": "Comparisons",
}


@dataclass
class PhaseStats:
    """One stage of a resolution and the requests made while it ran."""

    name: str
    started_at: float = 0.0
    ended_at: float = 0.0
    requests: int = 0

    @property
    def duration(self) -> timedelta:
        end = self.ended_at or time.perf_counter()
        return timedelta(seconds=end - self.started_at)


@dataclass
class ResolutionStatistics:
    """Counts GitHub requests by kind and by stage for one run.

        stats = ResolutionStatistics()
        stats.start()
        stats.start_phase("Walking history")
        ...
        stats.stop()
        stats.print_summary(console)
    """

    api_calls: Counter[str] = field(default_factory=Counter)
    phases: list[PhaseStats] = field(default_factory=list)
    _current_phase: PhaseStats | None = field(default=None, repr=False)
    _started_at: float = field(default=0.0, repr=False)
    _ended_at: float = field(default=0.0, repr=False)

    _instance: ClassVar[ResolutionStatistics | None] = None

    def start(self) -> None:
        """Start the clock and make this the instance clients report to."""
        self._started_at = time.perf_counter()
        ResolutionStatistics._instance = self

    def stop(self) -> None:
        """Stop the clock, closing any open phase."""
        self._ended_at = time.perf_counter()
        self.end_phase()

    @classmethod
    def get_current(cls) -> ResolutionStatistics | None:
        return cls._instance

    @classmethod
    def reset_current(cls) -> None:
        cls._instance = None

    @property
    def total_duration(self) -> timedelta:
        """Wall time from start to stop (or to now while running)."""
        if not self._started_at:
            return timedelta(0)
        end = self._ended_at or time.perf_counter()
        return timedelta(seconds=end - self._started_at)

    @property
    def commit_page_requests(self) -> int:
        return self.api_calls["github_commits"]

    @property
    def content_requests(self) -> int:
        return self.api_calls["github_content"]

    @property
    def compare_requests(self) -> int:
        return self.api_calls["github_compare"]

    @property
    def total_api_calls(self) -> int:
        return sum(self.api_calls[kind] for kind in CALL_LABELS)

    def start_phase(self, name: str) -> None:
        """Begin a stage, ending the previous one."""
        self.end_phase()
        self._current_phase = PhaseStats(name=name, started_at=time.perf_counter())

    def end_phase(self) -> None:
        if self._current_phase is None:
            return
        self._current_phase.ended_at = time.perf_counter()
        self.phases.append(self._current_phase)
        self._current_phase = None

    def record_api_call(self, call_type: str) -> None:
        """Count one request of the given kind.

        Args:
            call_type: One of the keys of ``CALL_LABELS``; other kinds are
                ignored.
        """
        if call_type not in CALL_LABELS:
            return
        self.api_calls[call_type] += 1
        if self._current_phase is not None:
            self._current_phase.requests += 1

    @staticmethod
    def _format_duration(td: timedelta) -> str:
        total_seconds = td.total_seconds()
        if total_seconds < 60:
            return f"{total_seconds:.1f}s"
        minutes, seconds = divmod(total_seconds, 60)
        return f"{int(minutes)}m {seconds:.1f}s"

    def print_summary(self, console: Console) -> None:
        """Print stage timings and request counts."""
        console.print()
        console.print("[bold]Resolution Summary[/bold]")

        if self.phases:
            table = Table(show_header=True, header_style="dim", box=None, padding=(0, 2))
            table.add_column("Stage")
            table.add_column("Requests", justify="right")
            table.add_column("Time", justify="right")
            for phase in self.phases:
                table.add_row(
                    phase.name, str(phase.requests), self._format_duration(phase.duration)
                )
            console.print(table)

        console.print(f"[bold]Total time:[/bold] {self._format_duration(self.total_duration)}")

        if self.total_api_calls:
            console.print(f"[bold]API calls:[/bold] {self.total_api_calls}")
            for kind, label in CALL_LABELS.items():
                if self.api_calls[kind]:
                    console.print(f"  {label}: {self.api_calls[kind]}")
