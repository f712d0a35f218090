# RsyncPilot Utilities Module
# Helper functions for path handling and platform detection

from rsyncpilot.utils.paths import (
    atomic_write,
    ensure_dir,
    expand_path,
    expand_user_path,
)
from rsyncpilot.utils.platform import (
    find_rsync_binary,
    get_current_platform,
)

__all__ = [
    # Platform
    "get_current_platform",
    "find_rsync_binary",
    # Paths
    "expand_path",
    "expand_user_path",
    "ensure_dir",
    "atomic_write",
]
