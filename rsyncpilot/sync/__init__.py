# RsyncPilot Sync Module
# Command building, process supervision, progress parsing and scheduling

from rsyncpilot.sync.command import CommandLine, build_command, find_config_problems
from rsyncpilot.sync.errors import InvalidConfigError, ProcessFailure, SpawnError, SyncError
from rsyncpilot.sync.history import HistoryManager, RunRecord
from rsyncpilot.sync.progress import ProgressParser, parse_progress
from rsyncpilot.sync.scheduler import RecurringTimer, Scheduler, ScheduleState
from rsyncpilot.sync.service import SyncService
from rsyncpilot.sync.supervisor import InvocationHandle, InvocationStatus, Outcome, ProcessSupervisor

__all__ = [
    # Command
    "CommandLine",
    "build_command",
    "find_config_problems",
    # Errors
    "SyncError",
    "InvalidConfigError",
    "SpawnError",
    "ProcessFailure",
    # Progress
    "ProgressParser",
    "parse_progress",
    # Supervisor
    "ProcessSupervisor",
    "InvocationHandle",
    "InvocationStatus",
    "Outcome",
    # Scheduler
    "Scheduler",
    "ScheduleState",
    "RecurringTimer",
    # Service
    "SyncService",
    # History
    "HistoryManager",
    "RunRecord",
]
