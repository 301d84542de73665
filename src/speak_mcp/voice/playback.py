"""
Synchronous audio playback through the OS player.

Each call writes the audio to its own temporary directory, runs the
platform's blocking player on it and waits for playback to finish. The
directory is removed when the call returns, whether playback succeeded
or not.

Players:
  - macOS:   ``afplay``
  - Windows: PowerShell ``System.Media.SoundPlayer.PlaySync()``
  - other:   first of ``paplay``, ``aplay``, ``ffplay`` found on PATH
"""

import asyncio
import logging
import shutil
import tempfile
import time
from pathlib import Path
from typing import Callable

from ..errors import PlaybackError
from .hardware import is_mac, is_windows

logger = logging.getLogger("speak-mcp.voice.playback")

_UNIX_PLAYERS: tuple[tuple[str, ...], ...] = (
    ("paplay",),
    ("aplay", "-q"),
    ("ffplay", "-nodisp", "-autoexit", "-loglevel", "quiet"),
)


def player_command(path: Path) -> list[str]:
    """Return the command that plays ``path`` synchronously on this platform.

    Raises:
        PlaybackError: If no supported player is installed.
    """
    if is_mac():
        return ["afplay", str(path)]

    if is_windows():
        quoted = str(path).replace("'", "''")
        return [
            "powershell",
            "-NoProfile",
            "-NonInteractive",
            "-Command",
            f"(New-Object System.Media.SoundPlayer '{quoted}').PlaySync()",
        ]

    for candidate in _UNIX_PLAYERS:
        if shutil.which(candidate[0]):
            return [*candidate, str(path)]

    raise PlaybackError(
        "No audio player found. Install one of: "
        + ", ".join(candidate[0] for candidate in _UNIX_PLAYERS)
    )


class AudioPlayer:
    """Plays fully buffered audio and blocks until it has finished.

    Attributes:
        command_factory: Callable mapping a file path to the player command.
    """

    def __init__(self, command_factory: Callable[[Path], list[str]] = player_command) -> None:
        self.command_factory = command_factory

    async def _run(self, cmd: list[str]) -> None:
        try:
            process = await asyncio.create_subprocess_exec(
                *cmd,
                stdout=asyncio.subprocess.DEVNULL,
                stderr=asyncio.subprocess.PIPE,
            )
        except OSError as e:
            raise PlaybackError(
                f"Could not launch audio player '{cmd[0]}': {e}",
                details={"command": cmd},
            ) from e

        _, stderr = await process.communicate()
        if process.returncode != 0:
            message = stderr.decode("utf-8", errors="replace").strip() if stderr else ""
            raise PlaybackError(
                f"Audio player '{cmd[0]}' exited with status {process.returncode}"
                + (f": {message}" if message else ""),
                returncode=process.returncode,
                details={"command": cmd},
            )

    async def play(self, audio: bytes, suffix: str = ".wav") -> None:
        """Play ``audio`` and wait until playback finishes.

        Raises:
            PlaybackError: If the audio is empty, cannot be written, or the
                player fails to launch or exits non-zero.
        """
        if not audio:
            raise PlaybackError("No audio to play")

        start_time = time.monotonic()
        with tempfile.TemporaryDirectory(prefix="speak-mcp-") as tmp_dir:
            path = Path(tmp_dir) / f"speech{suffix}"
            try:
                path.write_bytes(audio)
            except OSError as e:
                raise PlaybackError(f"Could not write temporary audio file: {e}") from e

            cmd = self.command_factory(path)
            logger.debug("Playing %d bytes with %s", len(audio), cmd[0])
            await self._run(cmd)

        logger.info("Playback finished in %.0fms", (time.monotonic() - start_time) * 1000)
