"""
Platform detection for engine preconditions and audio playback.

The native ``say`` engine only exists on macOS, and each OS has its own
synchronous audio player.
"""

import logging
import platform

logger = logging.getLogger("speak-mcp.voice.hardware")


def is_mac() -> bool:
    """Detect if running on macOS (Darwin)."""
    return platform.system() == "Darwin"


def is_windows() -> bool:
    """Detect if running on Windows."""
    return platform.system() == "Windows"


def get_platform_info() -> dict[str, str]:
    """Get a summary of platform details relevant to speech output.

    Returns:
        Dictionary with:
        - "platform": Operating system name.
        - "machine": CPU architecture.
        - "family": "macos", "windows", or "other".
    """
    if is_mac():
        family = "macos"
    elif is_windows():
        family = "windows"
    else:
        family = "other"

    info = {
        "platform": platform.system(),
        "machine": platform.machine(),
        "family": family,
    }
    logger.debug("Platform info: %s", info)
    return info
