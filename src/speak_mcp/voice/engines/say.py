"""
macOS ``say`` command engine.

The command speaks directly through the system audio output, so this
engine never returns audio and never goes through the playback sink.
Text is fed on stdin (``-f -``) so that text starting with ``-`` is not
parsed as an option.
"""

import asyncio
import logging
import time
from typing import Optional

from ...errors import PlaybackError
from ..hardware import is_mac
from .base import SpeechEngine

logger = logging.getLogger("speak-mcp.voice.engines.say")


class SayCommandEngine(SpeechEngine):
    """Native speech through the macOS ``say`` command."""

    def __init__(self, command: str = "say", name: str = "native", label: str = "macOS say") -> None:
        self.command = command
        self._name = name
        self._label = label

    @property
    def name(self) -> str:
        return self._name

    @property
    def label(self) -> str:
        return self._label

    def is_supported(self) -> bool:
        return is_mac()

    def build_command(self, voice: Optional[str] = None, rate: Optional[int] = None) -> list[str]:
        """Build the argument vector; omitted options keep the OS defaults."""
        cmd = [self.command, "-f", "-"]
        if voice:
            cmd += ["-v", voice]
        if rate is not None:
            cmd += ["-r", str(rate)]
        return cmd

    async def speak(self, text: str, voice: Optional[str] = None, rate: Optional[int] = None) -> None:
        """Speak ``text`` and wait until the command finishes.

        Raises:
            PlaybackError: If the command cannot be launched or exits non-zero.
        """
        cmd = self.build_command(voice, rate)
        start_time = time.monotonic()

        try:
            process = await asyncio.create_subprocess_exec(
                *cmd,
                stdin=asyncio.subprocess.PIPE,
                stdout=asyncio.subprocess.DEVNULL,
                stderr=asyncio.subprocess.PIPE,
            )
        except OSError as e:
            raise PlaybackError(
                f"Could not launch '{self.command}': {e}",
                details={"command": cmd},
            ) from e

        _, stderr = await process.communicate(text.encode("utf-8"))
        if process.returncode != 0:
            message = stderr.decode("utf-8", errors="replace").strip() if stderr else ""
            raise PlaybackError(
                f"'{self.command}' exited with status {process.returncode}"
                + (f": {message}" if message else ""),
                returncode=process.returncode,
                details={"command": cmd},
            )

        logger.info(
            "%s finished in %.0fms (voice=%s, rate=%s)",
            self._label,
            (time.monotonic() - start_time) * 1000,
            voice or "system default",
            rate if rate is not None else "system default",
        )
