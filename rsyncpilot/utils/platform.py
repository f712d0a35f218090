# RsyncPilot Platform Utilities
# Platform detection and rsync binary discovery

import platform
import shutil

# Platform name mapping: system name -> RsyncPilot platform name
_PLATFORM_MAP: dict[str, str] = {
    "Darwin": "macos",
    "Linux": "linux",
    "Windows": "windows",
}

# Locations checked when rsync is not on PATH
_RSYNC_FALLBACKS: dict[str, list[str]] = {
    "macos": ["/opt/homebrew/bin/rsync", "/usr/local/bin/rsync", "/usr/bin/rsync"],
    "linux": ["/usr/bin/rsync", "/usr/local/bin/rsync"],
    "windows": [r"C:\cygwin64\bin\rsync.exe", r"C:\msys64\usr\bin\rsync.exe"],
}


def get_current_platform() -> str:
    """
    Get the current platform identifier.

    Returns:
        Platform string: "macos", "linux", or "windows".
    """
    system = platform.system()
    return _PLATFORM_MAP.get(system, system.lower())


def find_rsync_binary() -> str | None:
    """
    Locate the rsync executable.

    Returns:
        Absolute path to rsync, or None if it cannot be found.
    """
    found = shutil.which("rsync")
    if found:
        return found
    for candidate in _RSYNC_FALLBACKS.get(get_current_platform(), []):
        if shutil.which(candidate):
            return candidate
    return None
