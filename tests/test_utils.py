# RsyncPilot Utility Tests
# Path helpers and platform detection

import logging
from pathlib import Path
from unittest.mock import patch

import pytest

from rsyncpilot.logger import configure_logging
from rsyncpilot.utils.paths import atomic_write, ensure_dir, expand_user_path
from rsyncpilot.utils.platform import find_rsync_binary, get_current_platform


class TestPaths:
    """Tests for path helpers."""

    def test_expand_user_path(self, temp_home: Path):
        assert expand_user_path("~/notes/") == f"{temp_home}/notes/"
        assert expand_user_path("") == ""
        assert expand_user_path("/abs/path") == "/abs/path"

    def test_ensure_dir(self, temp_dir: Path):
        target = temp_dir / "a" / "b"
        assert ensure_dir(target) == target
        assert target.is_dir()

    def test_atomic_write(self, temp_dir: Path):
        target = temp_dir / "sub" / "file.yaml"
        atomic_write(target, "first")
        atomic_write(target, "second")
        assert target.read_text() == "second"
        assert [p.name for p in target.parent.iterdir()] == ["file.yaml"]


class TestPlatform:
    """Tests for platform helpers."""

    @patch("rsyncpilot.utils.platform.platform.system", return_value="Darwin")
    def test_darwin_maps_to_macos(self, mock_system):
        assert get_current_platform() == "macos"

    @patch("rsyncpilot.utils.platform.platform.system", return_value="FreeBSD")
    def test_unknown_lowercased(self, mock_system):
        assert get_current_platform() == "freebsd"

    @patch("rsyncpilot.utils.platform.shutil.which", return_value="/usr/bin/rsync")
    def test_find_rsync_on_path(self, mock_which):
        assert find_rsync_binary() == "/usr/bin/rsync"

    @patch("rsyncpilot.utils.platform.shutil.which", return_value=None)
    def test_find_rsync_missing(self, mock_which):
        assert find_rsync_binary() is None

    @patch("rsyncpilot.utils.platform.get_current_platform", return_value="linux")
    def test_find_rsync_fallback(self, mock_platform):
        def which(name):
            return name if name == "/usr/local/bin/rsync" else None

        with patch("rsyncpilot.utils.platform.shutil.which", side_effect=which):
            assert find_rsync_binary() == "/usr/local/bin/rsync"


class TestLogging:
    """Tests for configure_logging."""

    @pytest.fixture(autouse=True)
    def _reset(self):
        yield
        logger = logging.getLogger("rsyncpilot")
        for handler in list(logger.handlers):
            logger.removeHandler(handler)
            handler.close()

    def test_console_only(self):
        logger = configure_logging()
        assert len(logger.handlers) == 1
        assert logger.handlers[0].level == logging.WARNING
        assert logger.propagate is False

    def test_verbose(self):
        logger = configure_logging(verbose=True)
        assert logger.handlers[0].level == logging.DEBUG

    def test_log_file(self, temp_dir: Path):
        path = temp_dir / "logs" / "rsyncpilot.log"
        logger = configure_logging(log_file=str(path))
        logging.getLogger("rsyncpilot.sync.service").info("dispatching")
        for handler in logger.handlers:
            handler.flush()
        assert "dispatching" in path.read_text()

    def test_reconfigure_replaces_handlers(self):
        configure_logging()
        logger = configure_logging()
        assert len(logger.handlers) == 1
