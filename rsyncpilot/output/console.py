# RsyncPilot Console Output
# Rich-based console output for user-friendly display

from collections.abc import Callable, Iterator
from contextlib import contextmanager

from rich.console import Console as RichConsole
from rich.markup import escape
from rich.panel import Panel
from rich.progress import BarColumn, Progress, TaskProgressColumn, TextColumn, TimeElapsedColumn
from rich.table import Table

from rsyncpilot.config.schema import RsyncPilotConfig, SyncConfig
from rsyncpilot.sync.command import PASSWORD_MASK, CommandLine
from rsyncpilot.sync.history import RunRecord
from rsyncpilot.sync.supervisor import Outcome

_STATUS_STYLES = {
    "succeeded": "green",
    "failed": "red",
    "running": "yellow",
}


class Console:
    """
    Console output manager using Rich.

    Provides formatted output for sync runs, settings and history.
    """

    def __init__(self, *, verbose: bool = False, colored: bool = True):
        """
        Initialize console.

        Args:
            verbose: Enable verbose output.
            colored: Enable colored output.
        """
        self.verbose = verbose
        self._console = RichConsole(no_color=not colored, highlight=colored)

    @property
    def rich(self) -> RichConsole:
        """Underlying Rich console."""
        return self._console

    def print(self, *args, **kwargs) -> None:
        """Print to console."""
        self._console.print(*args, **kwargs)

    def print_error(self, message: str) -> None:
        """Print error message."""
        self._console.print(f"[red]Error:[/red] {escape(message)}")

    def print_warning(self, message: str) -> None:
        """Print warning message."""
        self._console.print(f"[yellow]Warning:[/yellow] {escape(message)}")

    def print_success(self, message: str) -> None:
        """Print success message."""
        self._console.print(f"[green]{escape(message)}[/green]")

    def print_info(self, message: str) -> None:
        """Print info message."""
        self._console.print(f"[blue]{escape(message)}[/blue]")

    def notify(self, message: str) -> None:
        """Notification sink for status strings from the sync service."""
        if message.startswith("Rsync completed"):
            self.print_success(message)
        else:
            self.print_warning(message)

    def print_command(self, command: CommandLine) -> None:
        """Print a built command line, secrets masked."""
        self._console.print(Panel(escape(command.display()), title="rsync command", border_style="cyan", expand=False))
        if self.verbose:
            self._console.print(f"  [dim]source:[/dim]      {escape(command.source)}")
            self._console.print(f"  [dim]destination:[/dim] {escape(command.destination)}")

    def print_config(self, config: RsyncPilotConfig) -> None:
        """Print sync settings as a table."""
        table = Table(title="Sync Settings", show_header=True, header_style="bold")
        table.add_column("Setting", style="cyan")
        table.add_column("Value")

        for name, value in _setting_rows(config.sync):
            table.add_row(name, escape(value))

        self._console.print()
        self._console.print(table)

        if self.verbose:
            output = config.output
            self._console.print(f"[dim]Log file: {output.log_file or '-'}[/dim]")
            self._console.print(f"[dim]History:  {output.history_file or '-'}[/dim]")
        self._console.print()

    def print_schedule(self, interval_minutes: int) -> None:
        """Print the configured schedule."""
        if interval_minutes > 0:
            self._console.print(f"[green]●[/green] Scheduled every [bold]{interval_minutes}[/bold] minute(s)")
        else:
            self._console.print("[dim]○ No recurring schedule[/dim]")

    def print_history(self, records: list[RunRecord]) -> None:
        """Print recent runs, newest first."""
        if not records:
            self._console.print("[dim]No runs recorded[/dim]")
            return

        table = Table(title="Recent Runs", show_header=True, header_style="bold")
        table.add_column("Started")
        table.add_column("Trigger", style="magenta")
        table.add_column("Direction", justify="center")
        table.add_column("Status")
        if self.verbose:
            table.add_column("Message", style="dim")

        for record in records:
            style = _STATUS_STYLES.get(record.status, "white")
            direction = record.direction + (" (dry-run)" if record.dry_run else "")
            row = [record.started, record.trigger, direction, f"[{style}]{record.status}[/{style}]"]
            if self.verbose:
                row.append(escape(_first_line(record.message)))
            table.add_row(*row)

        self._console.print()
        self._console.print(table)
        self._console.print()

    def print_outcome(self, outcome: Outcome) -> None:
        """Print the result of a finished run."""
        if outcome.succeeded:
            self._console.print(Panel("[green]✓ Sync completed successfully[/green]", border_style="green"))
            return

        text = "[red]✗ Sync failed[/red]"
        if outcome.returncode is not None:
            text += f" [dim](exit {outcome.returncode})[/dim]"
        if outcome.message:
            text += f"\n\n{escape(outcome.message)}"
        self._console.print(Panel(text, border_style="red"))

    @contextmanager
    def progress_bar(self, description: str = "Syncing") -> Iterator[Callable[[int], None]]:
        """
        Show a live progress bar.

        Yields:
            A progress sink accepting a percentage.
        """
        progress = Progress(
            TextColumn("[bold blue]{task.description}"),
            BarColumn(),
            TaskProgressColumn(),
            TimeElapsedColumn(),
            console=self._console,
        )
        with progress:
            task = progress.add_task(description, total=100)

            def update(percent: int) -> None:
                progress.update(task, completed=percent)

            yield update


def _setting_rows(sync: SyncConfig) -> list[tuple[str, str]]:
    """Display rows for every sync setting."""
    rows = []
    for name in SyncConfig.model_fields:
        value = getattr(sync, name)
        if name == "ssh_password":
            text = PASSWORD_MASK if value else ""
        elif name == "exclude_patterns":
            text = "\n".join(repr(pattern) for pattern in value)
        elif hasattr(value, "value"):
            text = str(value.value)
        else:
            text = str(value)
        rows.append((name, text))
    return rows


def _first_line(text: str) -> str:
    return text.splitlines()[0] if text else ""


def create_console(*, verbose: bool = False, colored: bool = True) -> Console:
    """
    Create a console instance.

    Args:
        verbose: Enable verbose output.
        colored: Enable colored output.

    Returns:
        Console instance.
    """
    return Console(verbose=verbose, colored=colored)
