# RsyncPilot Run History
# Persist the outcome of recent sync runs

import logging
import threading
from dataclasses import asdict, dataclass, field
from datetime import datetime
from pathlib import Path
from typing import Any, Optional

import yaml

from rsyncpilot.config.loader import get_config_dir
from rsyncpilot.utils.paths import atomic_write

logger = logging.getLogger(__name__)

DEFAULT_HISTORY_LIMIT = 50


@dataclass
class RunRecord:
    """Outcome of a single sync run."""

    started: str  # ISO format datetime
    direction: str
    dry_run: bool = False
    trigger: str = "manual"
    status: str = "running"
    finished: Optional[str] = None
    returncode: Optional[int] = None
    message: str = ""

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary."""
        return {k: v for k, v in asdict(self).items() if v is not None}

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "RunRecord":
        """Create from dictionary."""
        return cls(
            started=data.get("started", ""),
            direction=data.get("direction", ""),
            dry_run=bool(data.get("dry_run", False)),
            trigger=data.get("trigger", "manual"),
            status=data.get("status", "running"),
            finished=data.get("finished"),
            returncode=data.get("returncode"),
            message=data.get("message", ""),
        )


@dataclass
class RunHistory:
    """Most recent runs, oldest first."""

    version: str = "1.0"
    runs: list[RunRecord] = field(default_factory=list)

    def to_dict(self) -> dict[str, Any]:
        return {"version": self.version, "runs": [run.to_dict() for run in self.runs]}

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "RunHistory":
        runs = [RunRecord.from_dict(item) for item in data.get("runs") or []]
        return cls(version=data.get("version", "1.0"), runs=runs)


class HistoryManager:
    """
    Manages run history persistence.

    Completions arrive on supervisor threads, so writes are serialized.
    """

    def __init__(self, history_path: Optional[Path] = None, limit: int = DEFAULT_HISTORY_LIMIT):
        """
        Initialize history manager.

        Args:
            history_path: Path to history file. Defaults to ~/.config/rsyncpilot/history.yaml
            limit: Number of runs to keep.
        """
        if history_path is None:
            history_path = get_config_dir() / "history.yaml"
        self.history_path = history_path
        self.limit = limit
        self._history: Optional[RunHistory] = None
        self._lock = threading.Lock()

    @property
    def history(self) -> RunHistory:
        """Get current history, loading if necessary."""
        if self._history is None:
            self._history = self.load()
        return self._history

    @property
    def last_run(self) -> Optional[RunRecord]:
        runs = self.history.runs
        return runs[-1] if runs else None

    def load(self) -> RunHistory:
        """Load history from file."""
        if not self.history_path.exists():
            return RunHistory()

        try:
            with open(self.history_path, encoding="utf-8") as f:
                data = yaml.safe_load(f)
        except yaml.YAMLError as exc:
            logger.warning("Ignoring unreadable history file %s: %s", self.history_path, exc)
            return RunHistory()

        if not isinstance(data, dict):
            return RunHistory()
        return RunHistory.from_dict(data)

    def save(self) -> None:
        """Save history to file."""
        content = yaml.dump(self.history.to_dict(), default_flow_style=False, sort_keys=False, allow_unicode=True)
        atomic_write(self.history_path, content)

    def record(self, run: RunRecord) -> RunRecord:
        """Append a finished run, trim to the limit, and save."""
        with self._lock:
            runs = self.history.runs
            runs.append(run)
            del runs[: max(0, len(runs) - self.limit)]
            self.save()
        return run

    def recent(self, count: int = 10) -> list[RunRecord]:
        """Return up to ``count`` most recent runs, newest first."""
        if count <= 0:
            return []
        return list(reversed(self.history.runs[-count:]))

    def clear(self) -> None:
        """Reset history to empty."""
        with self._lock:
            self._history = RunHistory()
            self.save()


def now_iso() -> str:
    """Current local time as an ISO string."""
    return datetime.now().isoformat(timespec="seconds")
