# RsyncPilot Configuration Loader
# Load, save, and manage YAML configuration files

import os
from pathlib import Path
from typing import Any, Optional

import yaml
from pydantic import ValidationError

from rsyncpilot.config.defaults import generate_default_config, get_default_config
from rsyncpilot.config.schema import RsyncPilotConfig, SyncConfig
from rsyncpilot.utils.paths import atomic_write

CONFIG_ENV = "RSYNCPILOT_CONFIG"
PASSWORD_ENV = "RSYNCPILOT_SSH_PASSWORD"


class ConfigError(Exception):
    """Configuration file cannot be parsed."""


def get_config_dir() -> Path:
    """Get the RsyncPilot configuration directory."""
    return Path.home() / ".config" / "rsyncpilot"


def get_config_path() -> Path:
    """Get the path to the configuration file."""
    env_path = os.environ.get(CONFIG_ENV)
    if env_path:
        return Path(env_path).expanduser()
    return get_config_dir() / "config.yaml"


def load_config(config_path: Optional[Path] = None, *, apply_env: bool = True) -> RsyncPilotConfig:
    """
    Load configuration from YAML file.

    Args:
        config_path: Optional path to config file. Uses default if not provided.
        apply_env: Fill ``ssh_password`` from RSYNCPILOT_SSH_PASSWORD when set.

    Returns:
        RsyncPilotConfig: Validated configuration object.

    Raises:
        FileNotFoundError: If config file doesn't exist.
        ConfigError: If config file is not valid YAML or not a mapping.
        ValidationError: If config file is invalid.
    """
    if config_path is None:
        config_path = get_config_path()

    if not config_path.exists():
        raise FileNotFoundError(
            f"Configuration file not found: {config_path}\nRun 'rsyncpilot config init' to create one."
        )

    try:
        with open(config_path, encoding="utf-8") as f:
            data = yaml.safe_load(f)
    except yaml.YAMLError as e:
        raise ConfigError(f"Invalid YAML syntax in {config_path}: {e}") from e

    if data is None:
        data = {}

    if not isinstance(data, dict):
        raise ConfigError(f"Configuration root must be a mapping: {config_path}")

    merged = _merge_with_defaults(data)

    if apply_env:
        env_password = os.environ.get(PASSWORD_ENV)
        if env_password:
            merged["sync"]["ssh_password"] = env_password

    return RsyncPilotConfig.model_validate(merged)


def save_config(config: RsyncPilotConfig, config_path: Optional[Path] = None) -> Path:
    """
    Save configuration to YAML file.

    Args:
        config: Configuration object to save.
        config_path: Optional path to config file. Uses default if not provided.

    Returns:
        Path: Path where config was saved.
    """
    if config_path is None:
        config_path = get_config_path()

    # Use mode='json' to serialize Enums and tuples as plain values
    data = config.model_dump(exclude_none=True, mode="json")
    content = yaml.dump(data, default_flow_style=False, sort_keys=False, allow_unicode=True)
    atomic_write(config_path, content)

    return config_path


def ensure_config_exists(config_path: Optional[Path] = None, *, tool_path: str = "") -> tuple[Path, bool]:
    """
    Ensure configuration file exists, creating default if needed.

    Args:
        config_path: Optional path to config file.
        tool_path: rsync binary to prefill in a newly created file.

    Returns:
        Tuple of (config_path, was_created).
    """
    if config_path is None:
        config_path = get_config_path()

    if config_path.exists():
        return config_path, False

    atomic_write(config_path, generate_default_config(tool_path))
    return config_path, True


def validate_config_file(config_path: Optional[Path] = None) -> tuple[bool, list[str]]:
    """
    Validate a configuration file without loading it into the system.

    Besides schema errors, reports settings that would prevent a sync
    command from being built (missing paths, host, or rsync binary).

    Args:
        config_path: Path to config file to validate.

    Returns:
        Tuple of (is_valid, error_messages).
    """
    from rsyncpilot.sync.command import find_config_problems

    if config_path is None:
        config_path = get_config_path()

    if not config_path.exists():
        return False, [f"Configuration file not found: {config_path}"]

    try:
        with open(config_path, encoding="utf-8") as f:
            data = yaml.safe_load(f)
    except yaml.YAMLError as e:
        return False, [f"Invalid YAML syntax: {e}"]

    if data is None:
        return False, ["Configuration file is empty"]

    if not isinstance(data, dict):
        return False, ["Configuration root must be a mapping"]

    try:
        config = RsyncPilotConfig.model_validate(_merge_with_defaults(data))
    except ValidationError as e:
        errors = []
        for error in e.errors():
            loc = " -> ".join(str(part) for part in error["loc"])
            errors.append(f"{loc}: {error['msg']}")
        return False, errors

    errors = [f"sync: {problem}" for problem in find_config_problems(config.sync)]
    return len(errors) == 0, errors


def update_sync_setting(key: str, raw_value: str, config_path: Optional[Path] = None) -> RsyncPilotConfig:
    """
    Update a single sync setting from its text form and save.

    Args:
        key: SyncConfig field name.
        raw_value: Value as typed by the user.
        config_path: Optional path to config file.

    Returns:
        Updated RsyncPilotConfig.

    Raises:
        KeyError: If the setting doesn't exist.
        ConfigError: If the config file cannot be parsed.
        ValidationError: If the value is invalid for the setting.
    """
    if key not in SyncConfig.model_fields:
        raise KeyError(f"Unknown sync setting '{key}'")

    # Never persist a password that only came from the environment
    config = load_config(config_path, apply_env=False)

    data = config.sync.model_dump()
    data[key] = _coerce_setting(key, raw_value)
    config.sync = SyncConfig.model_validate(data)

    save_config(config, config_path)
    return config


def _coerce_setting(key: str, raw_value: str) -> Any:
    """Convert CLI text into the shape the schema expects."""
    if key == "exclude_patterns":
        if not raw_value:
            return []
        if "\n" in raw_value:
            return raw_value.split("\n")
        return [part.strip() for part in raw_value.split(",")]
    return raw_value


def _merge_with_defaults(data: dict) -> dict:
    """Merge loaded data with default values for missing keys."""
    result = get_default_config()

    for section in ("sync", "output"):
        value = data.get(section)
        if isinstance(value, dict):
            result[section] = {**result[section], **value}
        elif value:
            # Leave non-mapping sections for the schema to reject
            result[section] = value

    return result
