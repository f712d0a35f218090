# RsyncPilot Default Configuration
# Full default configuration as Python dict and YAML generator

import copy
from typing import Any

import yaml

DEFAULT_CONFIG: dict[str, Any] = {
    "sync": {
        "tool_path": "",
        "remote_host": "",
        "ssh_port": 22,
        "ssh_username": "",
        "ssh_password": "",
        "private_key_path": "",
        "local_path": "",
        "remote_path": "",
        "direction": "push",
        "dry_run": False,
        "log_file_path": "",
        "exclude_patterns": [],
        "schedule_interval_minutes": 0,
    },
    "output": {
        "verbose": False,
        "colored": True,
        "log_file": "~/.config/rsyncpilot/rsyncpilot.log",
        "history_file": "~/.config/rsyncpilot/history.yaml",
        "history_limit": 50,
    },
}


def get_default_config() -> dict[str, Any]:
    """Return a deep copy of the default configuration."""
    return copy.deepcopy(DEFAULT_CONFIG)


def generate_default_config(tool_path: str = "") -> str:
    """Generate default configuration as YAML string with comments."""
    header = """# RsyncPilot Configuration
#
# One-directional rsync over SSH, run on demand or on a schedule.
#
# Direction:
#   - push: local_path -> user@remote_host:remote_path
#   - pull: user@remote_host:remote_path -> local_path
#
# Authentication (first match wins):
#   1. private_key_path
#   2. ssh_username + ssh_password (needs sshpass; or set RSYNCPILOT_SSH_PASSWORD)
#   3. ssh agent / default keys
#
# schedule_interval_minutes: 0 disables the recurring schedule.

"""
    data = get_default_config()
    if tool_path:
        data["sync"]["tool_path"] = tool_path
    return header + yaml.dump(data, default_flow_style=False, sort_keys=False, allow_unicode=True)
