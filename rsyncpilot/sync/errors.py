# RsyncPilot Sync Errors
# Exception taxonomy for command building and process supervision


class SyncError(Exception):
    """Base exception for sync orchestration errors."""

    def __init__(self, message: str):
        self.message = message
        super().__init__(message)


class InvalidConfigError(SyncError):
    """Raised when a configuration cannot be turned into a command."""

    def __init__(self, problems: list[str]):
        self.problems = list(problems)
        super().__init__("Invalid sync configuration: " + "; ".join(self.problems))


class SpawnError(SyncError):
    """The external sync tool could not be started."""


class ProcessFailure(SyncError):
    """The external sync tool exited with a non-zero status."""

    def __init__(self, message: str, returncode: int = 1, stderr: str = ""):
        self.returncode = returncode
        self.stderr = stderr
        super().__init__(message)
