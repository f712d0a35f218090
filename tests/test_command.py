# RsyncPilot Command Builder Tests
# Argument vector construction from SyncConfig

import shlex

import pytest

from rsyncpilot.config.schema import SyncConfig, SyncDirection
from rsyncpilot.sync.command import (
    BASE_FLAGS,
    PASSWORD_MASK,
    CommandLine,
    build_command,
    build_remote_shell,
    find_config_problems,
)
from rsyncpilot.sync.errors import InvalidConfigError


def _remote_shell(command: CommandLine) -> str:
    """Return the value of the single -e option."""
    assert command.argv.count("-e") == 1
    return command.argv[command.argv.index("-e") + 1]


class TestDirection:
    """Source and destination by direction."""

    def test_push(self, sync_config: SyncConfig):
        command = build_command(sync_config)
        assert command.source == "/data/notes/"
        assert command.destination == "deck@192.168.1.20:/home/deck/notes/"

    def test_pull_swaps_source_and_destination(self, sync_config: SyncConfig):
        push = build_command(sync_config)
        pull = build_command(sync_config.model_copy(update={"direction": SyncDirection.PULL}))
        assert pull.source == push.destination
        assert pull.destination == push.source

    def test_pull_from_plain_string(self, sync_config: SyncConfig):
        config = SyncConfig.model_validate({**sync_config.model_dump(), "direction": "pull"})
        command = build_command(config)
        assert command.source == "deck@192.168.1.20:/home/deck/notes/"

    def test_no_username_omits_at_sign(self, sync_config: SyncConfig):
        command = build_command(sync_config.model_copy(update={"ssh_username": ""}))
        assert command.destination == "192.168.1.20:/home/deck/notes/"

    def test_executable_first(self, sync_config: SyncConfig):
        command = build_command(sync_config)
        assert command.executable == "/usr/bin/rsync"
        assert command.argv[0] == "/usr/bin/rsync"


class TestFlags:
    """Fixed and optional flags."""

    def test_base_flags_present(self, sync_config: SyncConfig):
        command = build_command(sync_config)
        for flag in BASE_FLAGS:
            assert flag in command.argv
        assert "-avz" in command.argv
        assert "--no-links" in command.argv
        assert "--delete" in command.argv

    def test_dry_run_flag(self, sync_config: SyncConfig):
        assert "--dry-run" not in build_command(sync_config).argv
        dry = build_command(sync_config.model_copy(update={"dry_run": True}))
        assert "--dry-run" in dry.argv

    def test_log_file(self, sync_config: SyncConfig):
        assert not any(arg.startswith("--log-file") for arg in build_command(sync_config).argv)
        command = build_command(sync_config.model_copy(update={"log_file_path": "/var/log/rsync.log"}))
        assert "--log-file=/var/log/rsync.log" in command.argv

    def test_exclusions_in_order(self, sync_config: SyncConfig):
        config = sync_config.model_copy(update={"exclude_patterns": ("*.log", "tmp/*")})
        command = build_command(config)
        excludes = [arg for arg in command.argv if arg.startswith("--exclude")]
        assert excludes == ["--exclude=*.log", "--exclude=tmp/*"]

    def test_empty_pattern_passes_through(self, sync_config: SyncConfig):
        config = sync_config.model_copy(update={"exclude_patterns": ("",)})
        command = build_command(config)
        assert "--exclude=" in command.argv

    def test_hostile_values_stay_single_tokens(self, sync_config: SyncConfig):
        config = sync_config.model_copy(
            update={
                "local_path": "/data/my notes; rm -rf ~",
                "exclude_patterns": ("$(reboot)",),
            }
        )
        command = build_command(config)
        assert command.source == "/data/my notes; rm -rf ~"
        assert "--exclude=$(reboot)" in command.argv

    def test_source_and_destination_are_last(self, sync_config: SyncConfig):
        config = sync_config.model_copy(update={"dry_run": True, "exclude_patterns": ("a",)})
        command = build_command(config)
        assert command.argv[-2:] == (command.source, command.destination)


class TestAuthentication:
    """Exactly one auth clause, by precedence."""

    def test_private_key_wins_over_password(self, sync_config: SyncConfig):
        config = sync_config.model_copy(
            update={"private_key_path": "/keys/id_ed25519", "ssh_password": "hunter2"}
        )
        shell = _remote_shell(build_command(config))
        assert shell == "ssh -p 22 -i /keys/id_ed25519"
        assert "sshpass" not in shell

    def test_password_when_no_key(self, sync_config: SyncConfig):
        config = sync_config.model_copy(update={"ssh_password": "hunter2", "ssh_port": 2222})
        shell = _remote_shell(build_command(config))
        assert shlex.split(shell) == [
            "sshpass", "-p", "hunter2", "ssh", "-p", "2222", "-o", "StrictHostKeyChecking=no",
        ]

    def test_password_requires_username(self, sync_config: SyncConfig):
        config = sync_config.model_copy(update={"ssh_password": "hunter2", "ssh_username": ""})
        assert _remote_shell(build_command(config)) == "ssh -p 22"

    def test_default_names_only_port(self, sync_config: SyncConfig):
        config = sync_config.model_copy(update={"ssh_port": 2200})
        assert _remote_shell(build_command(config)) == "ssh -p 2200"

    def test_password_with_quotes_is_quoted(self):
        auth = SyncConfig(ssh_username="u", ssh_password="it's a secret").auth_method
        shell = build_remote_shell(auth, 22)
        assert shlex.split(shell)[2] == "it's a secret"

    def test_key_path_with_spaces_is_quoted(self):
        auth = SyncConfig(private_key_path="/my keys/id_rsa").auth_method
        assert shlex.split(build_remote_shell(auth, 22))[-1] == "/my keys/id_rsa"


class TestDisplay:
    """Rendering for logs and the console."""

    def test_password_masked(self, sync_config: SyncConfig):
        command = build_command(sync_config.model_copy(update={"ssh_password": "hunter2"}))
        assert "hunter2" not in command.display()
        assert "hunter2" not in repr(command)
        assert "hunter2" not in str(command)
        assert PASSWORD_MASK in command.display()
        assert "hunter2" in _remote_shell(command)

    def test_display_without_secret(self, sync_config: SyncConfig):
        command = build_command(sync_config)
        assert shlex.split(command.display()) == list(command.argv)


class TestValidation:
    """InvalidConfigError before anything is spawned."""

    def test_empty_local_path(self, sync_config: SyncConfig):
        with pytest.raises(InvalidConfigError) as exc_info:
            build_command(sync_config.model_copy(update={"local_path": ""}))
        assert any("local_path" in p for p in exc_info.value.problems)

    @pytest.mark.parametrize("field", ["tool_path", "remote_path", "remote_host"])
    def test_required_fields(self, sync_config: SyncConfig, field: str):
        with pytest.raises(InvalidConfigError, match=field):
            build_command(sync_config.model_copy(update={field: ""}))

    def test_invalid_direction(self, sync_config: SyncConfig):
        config = SyncConfig.model_construct(**{**dict(sync_config), "direction": "sideways"})
        with pytest.raises(InvalidConfigError, match="direction"):
            build_command(config)

    def test_invalid_port(self, sync_config: SyncConfig):
        config = SyncConfig.model_construct(**{**dict(sync_config), "ssh_port": 0})
        with pytest.raises(InvalidConfigError, match="ssh_port"):
            build_command(config)

    def test_negative_interval(self, sync_config: SyncConfig):
        config = SyncConfig.model_construct(**{**dict(sync_config), "schedule_interval_minutes": -1})
        with pytest.raises(InvalidConfigError, match="schedule_interval_minutes"):
            build_command(config)

    def test_collects_all_problems(self):
        problems = find_config_problems(SyncConfig())
        assert len(problems) == 4

    def test_valid_config_has_no_problems(self, sync_config: SyncConfig):
        assert find_config_problems(sync_config) == []

    def test_empty_config_error_message(self):
        with pytest.raises(InvalidConfigError) as exc_info:
            build_command(SyncConfig())
        assert str(exc_info.value).startswith("Invalid sync configuration:")
