# RsyncPilot Output Module
# Rich console output and progress display

from rsyncpilot.output.console import Console, create_console

__all__ = [
    "Console",
    "create_console",
]
