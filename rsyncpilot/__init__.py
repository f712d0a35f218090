"""RsyncPilot - scheduled one-way rsync over SSH.

Builds rsync command lines from a YAML configuration, runs them as
supervised child processes with live progress, and re-runs them on a
recurring schedule.
"""

__version__ = "1.0.0"

__all__ = [
    "__version__",
    "SyncConfig",
    "SyncDirection",
    "SyncService",
    "build_command",
    "ProcessSupervisor",
    "Scheduler",
    "ProgressParser",
]


def __getattr__(name: str):
    """Lazy import to avoid loading dependencies during setup."""
    if name in ("SyncConfig", "SyncDirection"):
        from rsyncpilot.config import schema

        return getattr(schema, name)
    if name in ("SyncService", "build_command", "ProcessSupervisor", "Scheduler", "ProgressParser"):
        from rsyncpilot import sync

        return getattr(sync, name)
    raise AttributeError(f"module {__name__!r} has no attribute {name!r}")
