"""Click-based CLI for RsyncPilot - scheduled one-way rsync over SSH."""

from __future__ import annotations

import signal
import sys
import threading
from collections.abc import Callable
from pathlib import Path
from typing import Optional

import click
from pydantic import ValidationError

from rsyncpilot import __version__
from rsyncpilot.config import (
    ConfigError,
    RsyncPilotConfig,
    SyncConfig,
    SyncDirection,
    ensure_config_exists,
    generate_default_config,
    get_config_path,
    load_config,
    update_sync_setting,
    validate_config_file,
)
from rsyncpilot.logger import configure_logging
from rsyncpilot.output import Console, create_console
from rsyncpilot.sync import HistoryManager, InvalidConfigError, SyncService, build_command
from rsyncpilot.utils.paths import atomic_write
from rsyncpilot.utils.platform import find_rsync_binary


@click.group()
@click.version_option(version=__version__, prog_name="rsyncpilot")
@click.option(
    "--config",
    "config_path",
    type=click.Path(dir_okay=False, path_type=Path),
    default=None,
    help="Configuration file (default: ~/.config/rsyncpilot/config.yaml or $RSYNCPILOT_CONFIG)",
)
@click.pass_context
def cli(ctx: click.Context, config_path: Optional[Path]) -> None:
    """RsyncPilot - one-way rsync over SSH, on demand or on a schedule.

    \b
    Push: local_path -> user@remote_host:remote_path
    Pull: user@remote_host:remote_path -> local_path
    """
    ctx.ensure_object(dict)
    ctx.obj["config_path"] = config_path


# =============================================================================
# Helpers
# =============================================================================


def _config_path(ctx: click.Context) -> Path:
    return (ctx.obj or {}).get("config_path") or get_config_path()


def _load_or_exit(ctx: click.Context) -> RsyncPilotConfig:
    """Load the configuration, printing the problem and exiting on failure."""
    console = create_console()
    try:
        return load_config(_config_path(ctx))
    except (FileNotFoundError, ConfigError) as e:
        console.print_error(str(e))
        sys.exit(1)
    except ValidationError as e:
        console.print_error(f"Invalid configuration:\n{e}")
        sys.exit(1)


def _setup(config: RsyncPilotConfig, verbose: bool) -> Console:
    verbose = verbose or config.output.verbose
    console = create_console(verbose=verbose, colored=config.output.colored)
    configure_logging(verbose=verbose, log_file=config.output.log_file)
    return console


def _history_manager(config: RsyncPilotConfig) -> HistoryManager:
    history_file = config.output.history_file
    return HistoryManager(Path(history_file) if history_file else None, limit=config.output.history_limit)


def _print_invalid(console: Console, error: InvalidConfigError) -> None:
    console.print_error("Configuration is not ready for a sync:")
    for problem in error.problems:
        console.print(f"  • {problem}", markup=False)
    console.print_info("Fix with 'rsyncpilot config set KEY VALUE'.")


# =============================================================================
# Sync Commands
# =============================================================================


@cli.command()
@click.option(
    "--direction",
    type=click.Choice([d.value for d in SyncDirection]),
    default=None,
    help="Override the configured direction",
)
@click.option("--dry-run/--no-dry-run", default=None, help="Override the configured dry-run setting")
@click.option("--verbose", "-v", is_flag=True, help="Show the command and rsync output")
@click.pass_context
def run(ctx: click.Context, direction: Optional[str], dry_run: Optional[bool], verbose: bool) -> None:
    """Run one sync now with a live progress bar.

    \b
    Examples:
      rsyncpilot run                         # Sync as configured
      rsyncpilot run --direction pull        # Fetch remote changes
      rsyncpilot run --dry-run               # Preview without changes
    """
    app_config = _load_or_exit(ctx)
    console = _setup(app_config, verbose)

    overrides: dict[str, object] = {}
    if direction:
        overrides["direction"] = SyncDirection(direction)
    if dry_run is not None:
        overrides["dry_run"] = dry_run
    sync_config = app_config.sync.model_copy(update=overrides)

    service = SyncService(sync_config, history=_history_manager(app_config))

    try:
        if console.verbose:
            console.print_command(build_command(sync_config))

        label = f"{SyncDirection(sync_config.direction).value.capitalize()}ing"
        if sync_config.dry_run:
            label += " (dry run)"

        with console.progress_bar(label) as on_progress:
            handle = service.run_now(on_progress=on_progress)
            try:
                outcome = handle.wait()
            except KeyboardInterrupt:
                handle.terminate()
                outcome = handle.wait()
    except InvalidConfigError as e:
        _print_invalid(console, e)
        sys.exit(1)

    console.print_outcome(outcome)
    if not outcome.succeeded:
        sys.exit(1)


def reload_sync_config(config_path: Path, console: Console) -> Optional[SyncConfig]:
    """Re-read the sync settings, or None to keep the current ones."""
    try:
        new_config = load_config(config_path).sync
    except (FileNotFoundError, ConfigError, ValidationError) as e:
        console.print_warning(f"Keeping previous configuration: {e}")
        return None
    console.print_info("Configuration reloaded")
    console.print_schedule(new_config.schedule_interval_minutes)
    return new_config


def run_watch_loop(
    service: SyncService,
    stop: threading.Event,
    reload_requested: threading.Event,
    reload_config: Callable[[], Optional[SyncConfig]],
    *,
    poll_interval: float = 1.0,
) -> None:
    """
    Block until ``stop`` is set, applying config reloads on request.

    All scheduler changes happen on the calling thread.
    """
    try:
        while not stop.is_set():
            if reload_requested.is_set():
                reload_requested.clear()
                new_config = reload_config()
                if new_config is not None:
                    service.on_config_changed(new_config)
                continue
            stop.wait(poll_interval)
    finally:
        service.shutdown()


@cli.command()
@click.option("--run-on-start", is_flag=True, help="Sync once immediately instead of waiting one interval")
@click.option("--verbose", "-v", is_flag=True, help="Show detailed output")
@click.pass_context
def watch(ctx: click.Context, run_on_start: bool, verbose: bool) -> None:
    """Run syncs on the configured schedule until interrupted.

    Send SIGHUP to reload the configuration file; SIGINT or SIGTERM stops.
    Syncs already running are not interrupted.
    """
    app_config = _load_or_exit(ctx)
    console = _setup(app_config, verbose)

    interval = app_config.sync.schedule_interval_minutes
    if interval <= 0:
        console.print_error("No schedule configured. Set sync.schedule_interval_minutes to a positive value.")
        sys.exit(1)

    service = SyncService(app_config.sync, notify=console.notify, history=_history_manager(app_config))
    stop = threading.Event()
    reload_requested = threading.Event()

    def handle_signal(signum, frame):  # pragma: no cover
        if signum == getattr(signal, "SIGHUP", None):
            reload_requested.set()
            return
        stop.set()

    signal.signal(signal.SIGINT, handle_signal)
    signal.signal(signal.SIGTERM, handle_signal)
    if hasattr(signal, "SIGHUP"):
        signal.signal(signal.SIGHUP, handle_signal)

    service.start()
    console.print_schedule(interval)

    if run_on_start:
        try:
            service.run_now()
        except InvalidConfigError as e:
            _print_invalid(console, e)

    config_path = _config_path(ctx)
    run_watch_loop(service, stop, reload_requested, lambda: reload_sync_config(config_path, console))
    console.print_info("Schedule stopped")


@cli.command()
@click.pass_context
def command(ctx: click.Context) -> None:
    """Show the rsync command that a sync would run (password masked)."""
    app_config = _load_or_exit(ctx)
    console = create_console(verbose=True, colored=app_config.output.colored)
    try:
        console.print_command(build_command(app_config.sync))
    except InvalidConfigError as e:
        _print_invalid(console, e)
        sys.exit(1)


@cli.command()
@click.option(
    "--limit", "-n", default=10, show_default=True, type=click.IntRange(min=1), help="Number of runs to show"
)
@click.option("--verbose", "-v", is_flag=True, help="Show run messages")
@click.pass_context
def status(ctx: click.Context, limit: int, verbose: bool) -> None:
    """Show the schedule and recent sync runs."""
    app_config = _load_or_exit(ctx)
    console = create_console(verbose=verbose, colored=app_config.output.colored)

    sync_config = app_config.sync
    direction = SyncDirection(sync_config.direction)
    if direction == SyncDirection.PUSH:
        console.print(f"[bold]{direction.value}[/bold]: {sync_config.local_path or '?'} → {sync_config.remote_spec}")
    else:
        console.print(f"[bold]{direction.value}[/bold]: {sync_config.remote_spec} → {sync_config.local_path or '?'}")
    console.print_schedule(sync_config.schedule_interval_minutes)
    console.print_history(_history_manager(app_config).recent(limit))


# =============================================================================
# Config Commands
# =============================================================================


@cli.group()
def config() -> None:
    """Manage the RsyncPilot configuration file."""
    pass


@config.command("init")
@click.option("--force", "-f", is_flag=True, help="Overwrite an existing configuration")
@click.pass_context
def config_init(ctx: click.Context, force: bool) -> None:
    """Create a default configuration file."""
    console = create_console()
    path = _config_path(ctx)
    tool_path = find_rsync_binary() or ""

    if force and path.exists():
        atomic_write(path, generate_default_config(tool_path))
        created = True
    else:
        path, created = ensure_config_exists(path, tool_path=tool_path)

    if not created:
        console.print_warning(f"Configuration already exists: {path} (use --force to overwrite)")
        return

    console.print_success(f"Created configuration: {path}")
    if not tool_path:
        console.print_warning("rsync was not found on PATH; set sync.tool_path before syncing.")


@config.command("show")
@click.option("--verbose", "-v", is_flag=True, help="Also show output settings")
@click.pass_context
def config_show(ctx: click.Context, verbose: bool) -> None:
    """Show the current sync settings (password masked)."""
    app_config = _load_or_exit(ctx)
    console = create_console(verbose=verbose, colored=app_config.output.colored)
    console.print_config(app_config)


@config.command("set")
@click.argument("key")
@click.argument("value")
@click.pass_context
def config_set(ctx: click.Context, key: str, value: str) -> None:
    """Set one sync setting.

    \b
    Examples:
      rsyncpilot config set remote_host 192.168.1.20
      rsyncpilot config set direction pull
      rsyncpilot config set exclude_patterns "*.log,tmp/*"
      rsyncpilot config set schedule_interval_minutes 30
    """
    console = create_console()
    try:
        updated = update_sync_setting(key, value, _config_path(ctx))
    except KeyError:
        console.print_error(f"Unknown setting '{key}'")
        console.print_info("Valid settings: " + ", ".join(SyncConfig.model_fields))
        sys.exit(1)
    except (FileNotFoundError, ConfigError) as e:
        console.print_error(str(e))
        sys.exit(1)
    except ValidationError as e:
        messages = "; ".join(error["msg"] for error in e.errors())
        console.print_error(f"Invalid value for {key}: {messages}")
        sys.exit(1)

    shown = "****" if key == "ssh_password" else repr(getattr(updated.sync, key))
    console.print_success(f"{key} = {shown}")


@config.command("validate")
@click.argument("file", required=False, type=click.Path(dir_okay=False, path_type=Path))
@click.pass_context
def config_validate(ctx: click.Context, file: Optional[Path]) -> None:
    """Check a configuration file for errors."""
    console = create_console()
    path = file or _config_path(ctx)
    is_valid, errors = validate_config_file(path)

    if is_valid:
        console.print_success(f"Configuration is valid: {path}")
        return

    console.print_error(f"Configuration has problems: {path}")
    for error in errors:
        console.print(f"  • {error}", markup=False)
    sys.exit(1)


@config.command("path")
@click.pass_context
def config_path_cmd(ctx: click.Context) -> None:
    """Print the configuration file path."""
    click.echo(str(_config_path(ctx)))


if __name__ == "__main__":
    cli()
