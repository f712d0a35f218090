# RsyncPilot Process Supervisor
# Spawn rsync, stream its output, and report progress and completion

import logging
import subprocess
import threading
from collections.abc import Callable
from dataclasses import dataclass
from enum import Enum
from typing import IO, Any, Optional

from rsyncpilot.sync.command import CommandLine
from rsyncpilot.sync.errors import ProcessFailure, SpawnError, SyncError
from rsyncpilot.sync.progress import ProgressParser

logger = logging.getLogger(__name__)


class InvocationStatus(str, Enum):
    """Lifecycle state of one rsync invocation."""

    RUNNING = "running"
    SUCCEEDED = "succeeded"
    FAILED = "failed"


@dataclass(frozen=True)
class Outcome:
    """Terminal (or running) state of an invocation."""

    status: InvocationStatus
    message: str = ""
    returncode: Optional[int] = None
    error: Optional[SyncError] = None

    @property
    def succeeded(self) -> bool:
        return self.status == InvocationStatus.SUCCEEDED

    @property
    def failed(self) -> bool:
        return self.status == InvocationStatus.FAILED


ProgressSink = Callable[[int], Any]
CompletionSink = Callable[[Outcome], Any]


class InvocationHandle:
    """
    Handle to a single rsync run.

    The outcome is set exactly once. ``wait`` returns only after the
    completion callback has been delivered.
    """

    def __init__(self, command: CommandLine):
        self.command = command
        self.outcome = Outcome(InvocationStatus.RUNNING)
        self.last_reported_percent = 0
        self.process: Optional[subprocess.Popen[str]] = None
        self._completed = False
        self._lock = threading.Lock()
        self._done = threading.Event()

    @property
    def pid(self) -> Optional[int]:
        return self.process.pid if self.process else None

    @property
    def done(self) -> bool:
        return self._done.is_set()

    def wait(self, timeout: Optional[float] = None) -> Optional[Outcome]:
        """Block until the run has completed; None on timeout."""
        if self._done.wait(timeout):
            return self.outcome
        return None

    def terminate(self) -> None:
        """Ask a still-running rsync process to stop."""
        if self.process is not None and self.process.poll() is None:
            logger.info("Terminating rsync (pid %s)", self.process.pid)
            self.process.terminate()

    def _claim_completion(self) -> bool:
        with self._lock:
            if self._completed:
                return False
            self._completed = True
            return True


class ProcessSupervisor:
    """
    Runs rsync command lines as child processes.

    ``run`` returns as soon as the process is spawned. Output is read on
    daemon threads; callbacks are invoked from those threads.
    """

    def run(
        self,
        command: CommandLine,
        on_progress: Optional[ProgressSink] = None,
        on_complete: Optional[CompletionSink] = None,
    ) -> InvocationHandle:
        """
        Start a command and supervise it.

        Args:
            command: Built rsync command line.
            on_progress: Called with each non-decreasing percentage.
            on_complete: Called exactly once with the final Outcome.

        Returns:
            InvocationHandle for the run.
        """
        handle = InvocationHandle(command)
        logger.info("Starting: %s", command.display())

        try:
            process = subprocess.Popen(
                list(command.argv),
                stdout=subprocess.PIPE,
                stderr=subprocess.PIPE,
                text=True,
                encoding="utf-8",
                errors="replace",
                bufsize=1,
            )
        except (OSError, ValueError, subprocess.SubprocessError) as exc:
            error = SpawnError(f"Failed to start {command.executable}: {exc}")
            logger.error("%s", error.message)
            self._complete(handle, Outcome(InvocationStatus.FAILED, error.message, None, error), on_complete)
            return handle

        handle.process = process
        thread = threading.Thread(
            target=self._supervise,
            args=(handle, process, on_progress, on_complete),
            name=f"rsync-{process.pid}",
            daemon=True,
        )
        thread.start()
        return handle

    def _supervise(
        self,
        handle: InvocationHandle,
        process: subprocess.Popen,
        on_progress: Optional[ProgressSink],
        on_complete: Optional[CompletionSink],
    ) -> None:
        try:
            stderr_lines: list[str] = []
            stderr_thread = threading.Thread(
                target=_drain,
                args=(process.stderr, stderr_lines),
                name=f"rsync-{process.pid}-stderr",
                daemon=True,
            )
            stderr_thread.start()

            parser = ProgressParser()
            assert process.stdout is not None
            for line in process.stdout:
                logger.debug("rsync: %s", line.rstrip())
                percent = parser.feed(line)
                if percent is not None and percent >= handle.last_reported_percent:
                    handle.last_reported_percent = percent
                    _deliver(on_progress, percent)

            returncode = process.wait()
            stderr_thread.join()
            process.stdout.close()
            stderr_text = "".join(stderr_lines).strip()

            if returncode == 0:
                handle.last_reported_percent = 100
                _deliver(on_progress, 100)
                outcome = Outcome(InvocationStatus.SUCCEEDED, "Rsync completed", returncode)
                logger.info("Rsync completed")
            else:
                failure = ProcessFailure(
                    stderr_text or f"rsync exited with status {returncode}",
                    returncode=returncode,
                    stderr=stderr_text,
                )
                outcome = Outcome(InvocationStatus.FAILED, failure.message, returncode, failure)
                logger.error("Rsync failed (exit %s): %s", returncode, failure.message)
        except Exception as exc:
            logger.exception("Supervising rsync failed")
            error = SyncError(f"Supervising rsync failed: {exc}")
            outcome = Outcome(InvocationStatus.FAILED, error.message, process.poll(), error)

        self._complete(handle, outcome, on_complete)

    def _complete(
        self,
        handle: InvocationHandle,
        outcome: Outcome,
        on_complete: Optional[CompletionSink],
    ) -> None:
        if not handle._claim_completion():
            return
        handle.outcome = outcome
        try:
            _deliver(on_complete, outcome)
        finally:
            handle._done.set()


def _drain(stream: Optional[IO[str]], sink: list[str]) -> None:
    """Read a stream to EOF into a list."""
    if stream is None:
        return
    try:
        for line in stream:
            sink.append(line)
    finally:
        stream.close()


def _deliver(callback: Optional[Callable[[Any], Any]], value: Any) -> None:
    """Invoke a caller-supplied sink, containing its errors."""
    if callback is None:
        return
    try:
        callback(value)
    except Exception:
        logger.exception("Callback %r raised", callback)
