"""Structured logging and verbosity levels for Tenet validation runs."""

from __future__ import annotations

import json
import time
from dataclasses import dataclass
from datetime import datetime, timezone
from enum import IntEnum
from pathlib import Path
from typing import Any

from rich.markup import escape


class Verbosity(IntEnum):
    """Verbosity levels for console output."""

    DEFAULT = 0   # Summary only
    VERBOSE = 1   # + cascade and group-sequence decisions
    DEBUG = 2     # + every node and dispatched constraint


@dataclass
class RunLog:
    """Counters for a single validation run.

    The dict format is::

        {
            "run_id": "20260101T120000Z",
            "root_type": "User",
            "nodes_visited": 12,
            "constraints_dispatched": 30,
            "cascades_skipped": 1,
            "batches_skipped": 0,
            "violations": 2,
            "time_seconds": 0.002,
        }
    """

    run_id: str = ""
    root_type: str = ""
    nodes_visited: int = 0
    constraints_dispatched: int = 0
    cascades_skipped: int = 0
    batches_skipped: int = 0
    violations: int = 0
    time_seconds: float = 0.0

    def to_dict(self) -> dict[str, Any]:
        return {
            "run_id": self.run_id,
            "root_type": self.root_type,
            "nodes_visited": self.nodes_visited,
            "constraints_dispatched": self.constraints_dispatched,
            "cascades_skipped": self.cascades_skipped,
            "batches_skipped": self.batches_skipped,
            "violations": self.violations,
            "time_seconds": self.time_seconds,
        }


class ValidationLogger:
    """Structured logger for Tenet validation runs.

    Writes JSONL log files to log_dir/ and optionally emits console output
    via Rich based on verbosity level. One logger may observe several runs;
    ``run_log`` always holds the counters of the latest one.
    """

    def __init__(
        self,
        verbosity: Verbosity = Verbosity.DEFAULT,
        log_dir: Path | None = None,
    ):
        self.verbosity = verbosity
        self.log_dir = log_dir
        self.run_log = RunLog()
        self._log_path: Path | None = None
        self._run_start: float = 0.0

        if log_dir is not None:
            log_dir.mkdir(parents=True, exist_ok=True)
            self._log_path = log_dir / "runs.jsonl"

    def _write_event(self, event: dict[str, Any]) -> None:
        """Append a JSON event to the JSONL log file."""
        if self._log_path is None:
            return
        event["run_id"] = self.run_log.run_id
        event["timestamp"] = datetime.now(timezone.utc).isoformat()
        with open(self._log_path, "a") as f:
            f.write(json.dumps(event, default=str) + "\n")

    def _console_print(self, message: str, min_verbosity: Verbosity) -> None:
        """Print to console if verbosity is high enough."""
        if self.verbosity >= min_verbosity:
            from rich.console import Console

            Console(stderr=True).print(message)

    # -- Run lifecycle --

    def run_start(self, root: Any) -> None:
        """Reset counters and log the start of a run."""
        self.run_log = RunLog(
            run_id=datetime.now(timezone.utc).strftime("%Y%m%dT%H%M%S%fZ"),
            root_type=type(root).__name__,
        )
        self._run_start = time.monotonic()
        self._write_event({"event": "run_start", "root_type": self.run_log.root_type})

    def run_finish(self, violation_count: int) -> None:
        """Log the completion of a run and finalize counters."""
        self.run_log.time_seconds = round(time.monotonic() - self._run_start, 6)
        self.run_log.violations = violation_count
        self._write_event({"event": "run_finish", **self.run_log.to_dict()})
        self._console_print(
            f"[dim]{self.run_log.nodes_visited} node(s), "
            f"{self.run_log.constraints_dispatched} check(s), "
            f"{violation_count} violation(s)[/dim]",
            Verbosity.VERBOSE,
        )

    # -- Traversal events --

    def node_visited(self, kind: str, property_path: str, groups: tuple) -> None:
        self.run_log.nodes_visited += 1
        self._console_print(
            f"  [blue]{kind}[/blue] {escape(property_path or '<root>')} [dim]{', '.join(map(str, groups))}[/dim]",
            Verbosity.DEBUG,
        )

    def constraint_dispatched(self, variant: str, property_path: str, group: str) -> None:
        self.run_log.constraints_dispatched += 1
        self._console_print(
            f"    [cyan]{variant}[/cyan] at {escape(property_path or '<root>')} ({group})",
            Verbosity.DEBUG,
        )

    def cascade_skipped(self, property_path: str, group: str) -> None:
        """An object was already cascaded in this group."""
        self.run_log.cascades_skipped += 1
        self._write_event({"event": "cascade_skipped", "path": property_path, "group": group})
        self._console_print(
            f"  [yellow]=[/yellow] {escape(property_path or '<root>')} already validated in {group}",
            Verbosity.VERBOSE,
        )

    def batch_skipped(self, property_path: str, groups: tuple[str, ...]) -> None:
        """A group-sequence batch was skipped after an earlier one failed."""
        self.run_log.batches_skipped += 1
        self._write_event({"event": "batch_skipped", "path": property_path, "groups": list(groups)})
        self._console_print(
            f"  [yellow]-[/yellow] skipped {', '.join(groups)} at {escape(property_path or '<root>')}",
            Verbosity.VERBOSE,
        )
