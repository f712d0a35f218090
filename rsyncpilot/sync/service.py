# RsyncPilot Sync Service
# Entry points used by the CLI: manual runs, config changes, shutdown

import logging
from collections.abc import Callable
from typing import Any, Optional

from rsyncpilot.config.schema import SyncConfig, SyncDirection
from rsyncpilot.sync.command import build_command
from rsyncpilot.sync.errors import InvalidConfigError
from rsyncpilot.sync.history import HistoryManager, RunRecord, now_iso
from rsyncpilot.sync.scheduler import RecurringTimer, Scheduler, ScheduleState, Timer
from rsyncpilot.sync.supervisor import (
    CompletionSink,
    InvocationHandle,
    Outcome,
    ProcessSupervisor,
    ProgressSink,
)

logger = logging.getLogger(__name__)

Notifier = Callable[[str], Any]


class SyncService:
    """
    Ties together command building, process supervision and scheduling.

    Every run works on the config snapshot current when it starts; a later
    ``on_config_changed`` never affects a command already dispatched.
    """

    def __init__(
        self,
        config: SyncConfig,
        *,
        supervisor: Optional[ProcessSupervisor] = None,
        notify: Optional[Notifier] = None,
        history: Optional[HistoryManager] = None,
        timer_factory: Callable[[float, Callable[[], Any]], Timer] = RecurringTimer,
    ):
        """
        Initialize the service.

        Args:
            config: Initial sync settings.
            supervisor: Process supervisor (a new one by default).
            notify: Receives short status messages such as "Rsync completed".
            history: Optional run history to record outcomes in.
            timer_factory: Timer implementation for the scheduler.
        """
        self._config = config
        self.supervisor = supervisor or ProcessSupervisor()
        self.history = history
        self._notify = notify
        self.scheduler = Scheduler(self._run_scheduled, timer_factory=timer_factory)

    @property
    def config(self) -> SyncConfig:
        return self._config

    @property
    def schedule_state(self) -> ScheduleState:
        return self.scheduler.state

    def start(self) -> ScheduleState:
        """Arm the schedule from the current config."""
        return self.scheduler.schedule_sync(self._config.schedule_interval_minutes)

    def run_now(
        self,
        on_progress: Optional[ProgressSink] = None,
        on_complete: Optional[CompletionSink] = None,
    ) -> InvocationHandle:
        """
        Start a sync immediately.

        Raises:
            InvalidConfigError: If the current config cannot be built.
        """
        return self._dispatch(self._config, on_progress, on_complete, trigger="manual")

    def on_config_changed(self, new_config: SyncConfig) -> ScheduleState:
        """Adopt new settings and re-arm or cancel the schedule."""
        self._config = new_config
        return self.scheduler.schedule_sync(new_config.schedule_interval_minutes)

    def shutdown(self) -> None:
        """Cancel the schedule. Running syncs are left to finish."""
        self.scheduler.cancel()

    def _run_scheduled(self) -> None:
        config = self._config
        try:
            self._dispatch(config, None, None, trigger="scheduled")
        except InvalidConfigError as exc:
            logger.error("Scheduled sync skipped: %s", exc.message)
            self._send(f"Rsync not started: {exc.message}")

    def _dispatch(
        self,
        config: SyncConfig,
        on_progress: Optional[ProgressSink],
        on_complete: Optional[CompletionSink],
        *,
        trigger: str,
    ) -> InvocationHandle:
        command = build_command(config)
        record = RunRecord(
            started=now_iso(),
            direction=SyncDirection(config.direction).value,
            dry_run=config.dry_run,
            trigger=trigger,
        )

        def complete(outcome: Outcome) -> None:
            self._finish(record, outcome)
            if on_complete is not None:
                on_complete(outcome)

        logger.debug("Dispatching %s sync", trigger)
        return self.supervisor.run(command, on_progress, complete)

    def _finish(self, record: RunRecord, outcome: Outcome) -> None:
        record.finished = now_iso()
        record.status = outcome.status.value
        record.returncode = outcome.returncode
        record.message = outcome.message

        if self.history is not None:
            try:
                self.history.record(record)
            except OSError as exc:
                logger.warning("Could not write run history: %s", exc)

        if outcome.succeeded:
            self._send("Rsync completed")
        else:
            self._send(f"Rsync failed: {outcome.message}")

    def _send(self, message: str) -> None:
        if self._notify is None:
            return
        try:
            self._notify(message)
        except Exception:
            logger.exception("Notifier raised")
