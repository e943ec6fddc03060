# src/s3_mover/collector.py
"""Collects move results and renders the final report."""

import asyncio
import logging
from collections import Counter
from dataclasses import dataclass, field
from typing import Dict, List, Optional

from rich.console import Console
from rich.table import Table
from rich.text import Text

from s3_mover.tasks import MoveStatus, TaskResult

logger: logging.Logger = logging.getLogger(__name__)

_STATUS_STYLES: Dict[MoveStatus, str] = {
    MoveStatus.ALREADY_EXISTS: "yellow",
    MoveStatus.MOVED: "green",
    MoveStatus.MOVED_NOT_DELETED: "magenta",
    MoveStatus.ERROR: "bold red",
}


@dataclass
class MigrationReport:
    """
    The results of a migration run.

    Attributes:
        results (List[TaskResult]): Results in the order they were received.
    """

    results: List[TaskResult] = field(default_factory=list)

    @property
    def total(self) -> int:
        return len(self.results)

    @property
    def has_failures(self) -> bool:
        return any(result.status.is_failure for result in self.results)

    def counts(self) -> Dict[MoveStatus, int]:
        """
        Count results by status.

        Returns:
            Dict[MoveStatus, int]: A count for every status, zero included.
        """
        counter: Counter = Counter(result.status for result in self.results)
        return {status: counter.get(status, 0) for status in MoveStatus}

    def summary(self) -> str:
        counts: Dict[MoveStatus, int] = self.counts()
        parts: List[str] = [f"{status.value}={counts[status]}" for status in MoveStatus]
        return f"{self.total} object(s): " + ", ".join(parts)


class ResultCollector:
    """Drains the result queue until it is closed."""

    def __init__(self, result_queue: "asyncio.Queue[Optional[TaskResult]]") -> None:
        """
        Initialize the collector.

        Args:
            result_queue (asyncio.Queue[Optional[TaskResult]]): The queue the
                workers report to. It is closed with a single sentinel once
                every worker has exited.
        """
        self._result_queue: "asyncio.Queue[Optional[TaskResult]]" = result_queue

    async def run(self) -> MigrationReport:
        """
        Receives results until the sentinel arrives.

        Returns:
            MigrationReport: Every result received.
        """
        report: MigrationReport = MigrationReport()
        while True:
            result: Optional[TaskResult] = await self._result_queue.get()
            self._result_queue.task_done()
            if result is None:  # Sentinel value to signal completion
                break
            report.results.append(result)
        logger.debug(f"Collector received {report.total} result(s).")
        return report


def render_report(report: MigrationReport, console: Optional[Console] = None) -> None:
    """
    Print one row per result followed by the counts by status.

    Args:
        report (MigrationReport): The report to render.
        console (Console, optional): The rich console to print to.
    """
    console = console or Console()
    if report.results:
        table: Table = Table(title="Migration results")
        table.add_column("Source key")
        table.add_column("Target key")
        table.add_column("Status")
        table.add_column("Error", overflow="fold")
        for result in report.results:
            table.add_row(
                Text(result.object_key),
                Text(result.target_key),
                Text(result.status.value, style=_STATUS_STYLES[result.status]),
                Text(result.error or ""),
            )
        console.print(table)
    console.print(report.summary())
