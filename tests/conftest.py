# RsyncPilot Test Fixtures
# Pytest fixtures for RsyncPilot tests

import tempfile
from collections.abc import Generator
from pathlib import Path

import pytest
import yaml

from rsyncpilot.config.schema import SyncConfig


@pytest.fixture
def temp_dir() -> Generator[Path, None, None]:
    """Create a temporary directory for tests."""
    with tempfile.TemporaryDirectory() as tmpdir:
        yield Path(tmpdir)


@pytest.fixture
def temp_home(temp_dir: Path, monkeypatch: pytest.MonkeyPatch) -> Path:
    """Create a temporary home directory."""
    home = temp_dir / "home"
    home.mkdir()
    monkeypatch.setenv("HOME", str(home))
    monkeypatch.delenv("RSYNCPILOT_CONFIG", raising=False)
    monkeypatch.delenv("RSYNCPILOT_SSH_PASSWORD", raising=False)
    return home


@pytest.fixture
def sync_config() -> SyncConfig:
    """A complete, valid push configuration."""
    return SyncConfig(
        tool_path="/usr/bin/rsync",
        remote_host="192.168.1.20",
        ssh_port=22,
        ssh_username="deck",
        local_path="/data/notes/",
        remote_path="/home/deck/notes/",
    )


@pytest.fixture
def sample_config(temp_home: Path) -> dict:
    """Create sample configuration dict."""
    return {
        "sync": {
            "tool_path": "/usr/bin/rsync",
            "remote_host": "nas.local",
            "ssh_port": 2222,
            "ssh_username": "backup",
            "local_path": str(temp_home / "notes") + "/",
            "remote_path": "/srv/notes/",
            "direction": "push",
            "dry_run": False,
            "exclude_patterns": ["*.log", "tmp/*"],
            "schedule_interval_minutes": 15,
        },
        "output": {
            "verbose": False,
            "colored": False,
            "log_file": None,
            "history_file": str(temp_home / ".config" / "rsyncpilot" / "history.yaml"),
        },
    }


@pytest.fixture
def config_file(temp_home: Path, sample_config: dict) -> Path:
    """Create a configuration file."""
    config_dir = temp_home / ".config" / "rsyncpilot"
    config_dir.mkdir(parents=True)
    config_path = config_dir / "config.yaml"

    with open(config_path, "w", encoding="utf-8") as f:
        yaml.dump(sample_config, f, default_flow_style=False)

    return config_path
