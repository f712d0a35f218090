# RsyncPilot Configuration Module
# Handles YAML-based configuration loading, validation, and defaults

from rsyncpilot.config.schema import (
    AgentOrDefaultAuth,
    AuthMethod,
    OutputConfig,
    PasswordAuth,
    PrivateKeyAuth,
    RsyncPilotConfig,
    SyncConfig,
    SyncDirection,
)
from rsyncpilot.config.defaults import DEFAULT_CONFIG, generate_default_config
from rsyncpilot.config.loader import (
    ConfigError,
    ensure_config_exists,
    get_config_path,
    load_config,
    save_config,
    update_sync_setting,
    validate_config_file,
)

__all__ = [
    # Schema
    "RsyncPilotConfig",
    "SyncConfig",
    "OutputConfig",
    "SyncDirection",
    "AuthMethod",
    "PrivateKeyAuth",
    "PasswordAuth",
    "AgentOrDefaultAuth",
    # Loader
    "ConfigError",
    "load_config",
    "save_config",
    "get_config_path",
    "ensure_config_exists",
    "validate_config_file",
    "update_sync_setting",
    # Defaults
    "DEFAULT_CONFIG",
    "generate_default_config",
]
