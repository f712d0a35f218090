# RsyncPilot Configuration Schema
# Pydantic models for YAML configuration validation

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Union

from pydantic import BaseModel, ConfigDict, Field, field_validator

from rsyncpilot.utils.paths import expand_user_path


class SyncDirection(str, Enum):
    """Transfer direction relative to the local machine."""

    PUSH = "push"
    PULL = "pull"


@dataclass(frozen=True)
class PrivateKeyAuth:
    """Authenticate with an SSH private key file."""

    path: str


@dataclass(frozen=True)
class PasswordAuth:
    """Authenticate with a username and password through sshpass."""

    username: str
    password: str = field(repr=False)


@dataclass(frozen=True)
class AgentOrDefaultAuth:
    """Let ssh pick credentials (agent, default keys, ssh config)."""


AuthMethod = Union[PrivateKeyAuth, PasswordAuth, AgentOrDefaultAuth]


class SyncConfig(BaseModel):
    """
    Connection, path and policy settings for one sync.

    Instances are frozen; edits produce a new instance so that a command
    already built from a snapshot is never affected.
    """

    model_config = ConfigDict(frozen=True)

    tool_path: str = Field(default="", description="Path to the rsync binary")
    remote_host: str = Field(default="", description="Remote host name or IP address")
    ssh_port: int = Field(default=22, ge=1, le=65535, description="SSH port on the remote host")
    ssh_username: str = Field(default="", description="SSH username")
    ssh_password: str = Field(default="", repr=False, description="SSH password (requires sshpass)")
    private_key_path: str = Field(default="", description="Path to the SSH private key")
    local_path: str = Field(default="", description="Local directory to sync")
    remote_path: str = Field(default="", description="Remote directory to sync")
    direction: SyncDirection = Field(default=SyncDirection.PUSH, description="push (local to remote) or pull")
    dry_run: bool = Field(default=False, description="Trial run with no changes made")
    log_file_path: str = Field(default="", description="File rsync writes its transfer log to")
    exclude_patterns: tuple[str, ...] = Field(default=(), description="rsync exclusion rules")
    schedule_interval_minutes: int = Field(default=0, ge=0, description="Minutes between scheduled syncs (0 = off)")

    @field_validator("tool_path", "private_key_path", "local_path", "log_file_path")
    @classmethod
    def expand_paths(cls, v: str) -> str:
        """Expand ~ in local-side paths."""
        return expand_user_path(v)

    @field_validator("exclude_patterns", mode="before")
    @classmethod
    def split_patterns(cls, v: Any) -> Any:
        """Accept newline separated text as well as a list."""
        if v is None:
            return ()
        if isinstance(v, str):
            return tuple(v.split("\n"))
        return v

    @property
    def auth_method(self) -> AuthMethod:
        """Resolve the authentication method: private key > password > default."""
        if self.private_key_path:
            return PrivateKeyAuth(path=self.private_key_path)
        if self.ssh_username and self.ssh_password:
            return PasswordAuth(username=self.ssh_username, password=self.ssh_password)
        return AgentOrDefaultAuth()

    @property
    def remote_spec(self) -> str:
        """Remote side of the transfer in ``user@host:path`` form."""
        if self.ssh_username:
            return f"{self.ssh_username}@{self.remote_host}:{self.remote_path}"
        return f"{self.remote_host}:{self.remote_path}"


class OutputConfig(BaseModel):
    """Output and logging configuration."""

    verbose: bool = Field(default=False, description="Enable verbose output")
    colored: bool = Field(default=True, description="Enable colored output")
    log_file: str | None = Field(default=None, description="Path to diagnostic log file")
    history_file: str | None = Field(default=None, description="Path to run history file")
    history_limit: int = Field(default=50, ge=1, description="Number of runs kept in history")

    @field_validator("log_file", "history_file")
    @classmethod
    def expand_optional_paths(cls, v: str | None) -> str | None:
        """Expand ~ in optional paths."""
        if v is None:
            return None
        return expand_user_path(v)


class RsyncPilotConfig(BaseModel):
    """Root configuration model for RsyncPilot."""

    sync: SyncConfig = Field(default_factory=SyncConfig, description="Sync settings")
    output: OutputConfig = Field(default_factory=OutputConfig, description="Output settings")
