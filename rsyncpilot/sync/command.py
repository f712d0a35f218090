# RsyncPilot Command Builder
# Translate a SyncConfig into an rsync argument vector

import shlex
from dataclasses import dataclass, field

from rsyncpilot.config.schema import AuthMethod, PasswordAuth, PrivateKeyAuth, SyncConfig, SyncDirection
from rsyncpilot.sync.errors import InvalidConfigError

# archive, verbose, compress, progress, stats, no symlinks, delete extraneous
BASE_FLAGS: tuple[str, ...] = ("-avz", "--progress", "--stats", "--no-links", "--delete")

PASSWORD_MASK = "****"


@dataclass(frozen=True)
class CommandLine:
    """
    A built rsync invocation.

    ``argv`` is passed to the process as-is, never through a shell.
    ``redacted`` is the same vector with secrets masked, used for display.
    """

    argv: tuple[str, ...]
    redacted: tuple[str, ...] = field(default=(), compare=False)

    @property
    def executable(self) -> str:
        return self.argv[0]

    @property
    def source(self) -> str:
        return self.argv[-2]

    @property
    def destination(self) -> str:
        return self.argv[-1]

    def display(self) -> str:
        """Shell-style rendering with any password masked."""
        return shlex.join(self.redacted or self.argv)

    def __str__(self) -> str:
        return self.display()

    def __repr__(self) -> str:
        return f"CommandLine({self.display()!r})"


def find_config_problems(config: SyncConfig) -> list[str]:
    """
    List the reasons a config cannot be turned into a command.

    Returns:
        Human-readable problems; empty when the config is usable.
    """
    problems: list[str] = []

    if not config.tool_path:
        problems.append("tool_path is required (path to the rsync binary)")
    if not config.remote_host:
        problems.append("remote_host is required")
    if not config.local_path:
        problems.append("local_path is required")
    if not config.remote_path:
        problems.append("remote_path is required")

    try:
        SyncDirection(config.direction)
    except ValueError:
        problems.append(f"direction must be 'push' or 'pull', got {config.direction!r}")

    if not isinstance(config.ssh_port, int) or not 0 < config.ssh_port <= 65535:
        problems.append(f"ssh_port must be between 1 and 65535, got {config.ssh_port!r}")

    if config.schedule_interval_minutes < 0:
        problems.append(f"schedule_interval_minutes must not be negative, got {config.schedule_interval_minutes}")

    return problems


def build_remote_shell(auth: AuthMethod, port: int, *, mask_secrets: bool = False) -> str:
    """
    Build the value of rsync's ``-e`` option for the given auth method.

    Every token is shell-quoted since rsync splits the string itself.
    """
    ssh = ["ssh", "-p", str(port)]

    if isinstance(auth, PrivateKeyAuth):
        parts = [*ssh, "-i", auth.path]
    elif isinstance(auth, PasswordAuth):
        password = PASSWORD_MASK if mask_secrets else auth.password
        parts = ["sshpass", "-p", password, *ssh, "-o", "StrictHostKeyChecking=no"]
    else:
        parts = ssh

    return " ".join(shlex.quote(part) for part in parts)


def build_command(config: SyncConfig) -> CommandLine:
    """
    Map a config snapshot to an rsync command line.

    Args:
        config: Sync settings.

    Returns:
        CommandLine whose last two tokens are source and destination.

    Raises:
        InvalidConfigError: If required settings are missing or invalid.
    """
    problems = find_config_problems(config)
    if problems:
        raise InvalidConfigError(problems)

    if SyncDirection(config.direction) == SyncDirection.PUSH:
        source, destination = config.local_path, config.remote_spec
    else:
        source, destination = config.remote_spec, config.local_path

    options: list[str] = list(BASE_FLAGS)
    if config.dry_run:
        options.append("--dry-run")
    if config.log_file_path:
        options.append(f"--log-file={config.log_file_path}")
    options.extend(f"--exclude={pattern}" for pattern in config.exclude_patterns)

    auth = config.auth_method
    shell = build_remote_shell(auth, config.ssh_port)
    argv = (config.tool_path, *options, "-e", shell, source, destination)

    redacted: tuple[str, ...] = ()
    if isinstance(auth, PasswordAuth):
        masked_shell = build_remote_shell(auth, config.ssh_port, mask_secrets=True)
        redacted = (config.tool_path, *options, "-e", masked_shell, source, destination)

    return CommandLine(argv=argv, redacted=redacted)
