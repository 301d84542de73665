"""
Speak MCP Server - text-to-speech tools for MCP clients, built with FastMCP 2.x.

Speech is delegated to locally running VOICEVOX-compatible engines
(VOICEVOX, AivisSpeech) and, on macOS, to the native ``say`` command.
"""

try:
    from importlib.metadata import version as _get_version
    __version__ = _get_version("speak-mcp")
except Exception:
    __version__ = "0.1.0"  # Fallback if metadata unavailable
__all__ = ["__version__"]
