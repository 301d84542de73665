"""
Request dispatch: argument resolution, synthesis and playback.

Defaults are layered with strict left-to-right precedence:

  speaker:  call argument > config file > 1
  speed:    call argument > 1.0
  voice:    call argument > config file > OS default (no ``-v`` at all)

The config file is re-read on every dispatch, so edits made by the
config editor apply to the next call without restarting the server.
"""

import logging
import math
from typing import Any, Optional

from ..config import FALLBACK_SPEAKER_ID, ConfigStore
from ..errors import ArgumentError
from .engines.base import NativeSpeechRequest, PlayableAudio, SynthesisRequest
from .engines.say import SayCommandEngine
from .engines.voicevox import VoicevoxCompatibleEngine
from .playback import AudioPlayer
from .schema import DEFAULT_SPEED

logger = logging.getLogger("speak-mcp.voice.dispatcher")


def resolve_speaker_id(argument: Optional[int], configured: Optional[int]) -> int:
    """Effective style id: argument, else configured default, else 1."""
    if argument is not None:
        return argument
    if configured is not None:
        return configured
    return FALLBACK_SPEAKER_ID


def resolve_speed(argument: Optional[float]) -> float:
    """Effective speed multiplier: argument, else 1.0."""
    return argument if argument is not None else DEFAULT_SPEED


def resolve_voice(argument: Optional[str], configured: Optional[str]) -> Optional[str]:
    """Effective native voice; None means "let the OS choose"."""
    if argument is not None:
        return argument
    if configured:
        return configured
    return None


def validate_text(text: Any) -> str:
    """Ensure ``text`` is a non-blank string.

    Raises:
        ArgumentError: If text is missing, not a string, or blank.
    """
    if not isinstance(text, str):
        raise ArgumentError("'text' is required and must be a string")
    if not text.strip():
        raise ArgumentError("'text' must not be empty")
    return text


def _validate_speaker(speaker_id: Any) -> None:
    if speaker_id is None:
        return
    if isinstance(speaker_id, bool) or not isinstance(speaker_id, int) or speaker_id < 0:
        raise ArgumentError(f"'speaker' must be a non-negative integer, got {speaker_id!r}")


def _validate_speed(speed: Any, integer: bool = False) -> None:
    if speed is None:
        return
    expected = (int,) if integer else (int, float)
    if isinstance(speed, bool) or not isinstance(speed, expected):
        kind = "an integer" if integer else "a number"
        raise ArgumentError(f"'speed' must be {kind}, got {speed!r}")
    if not math.isfinite(speed) or speed <= 0:
        raise ArgumentError(f"'speed' must be greater than 0, got {speed!r}")


class Dispatcher:
    """Runs tool calls end to end against the engines.

    Attributes:
        config_store: Source of the per-engine defaults, read per call.
        player: Playback sink for engine audio.
    """

    def __init__(self, config_store: ConfigStore, player: Optional[AudioPlayer] = None) -> None:
        self.config_store = config_store
        self.player = player or AudioPlayer()

    async def dispatch(
        self,
        engine: VoicevoxCompatibleEngine,
        request: SynthesisRequest,
        configured_default: Optional[int],
    ) -> PlayableAudio:
        """Validate a request, resolve its defaults and synthesize it.

        Raises:
            ArgumentError: If the request is malformed.
            TransportError: If either synthesis phase fails.
        """
        text = validate_text(request.text)
        _validate_speaker(request.speaker_id)
        _validate_speed(request.speed_scale)

        speaker_id = resolve_speaker_id(request.speaker_id, configured_default)
        speed_scale = resolve_speed(request.speed_scale)
        logger.debug(
            "Dispatching to %s: speaker=%d (argument=%s, configured=%s) speed=%.2f",
            engine.name,
            speaker_id,
            request.speaker_id,
            configured_default,
            speed_scale,
        )
        return await engine.synthesize(text, speaker_id, float(speed_scale))

    async def speak(
        self,
        engine: VoicevoxCompatibleEngine,
        request: SynthesisRequest,
        config_field: str,
    ) -> PlayableAudio:
        """Synthesize with the current configured default, then play the audio.

        Playback only starts once synthesis has fully succeeded.

        Raises:
            ArgumentError, TransportError, PlaybackError
        """
        configured_default = self.config_store.default_speaker(config_field)
        audio = await self.dispatch(engine, request, configured_default)
        await self.player.play(audio.audio_data, suffix=f".{audio.format.value}")
        return audio

    async def speak_native(
        self,
        engine: SayCommandEngine,
        request: NativeSpeechRequest,
    ) -> Optional[str]:
        """Speak through the native command with the current default voice.

        Returns:
            The voice used, or None for the OS default.

        Raises:
            ArgumentError, PlaybackError
        """
        text = validate_text(request.text)
        _validate_speed(request.speed, integer=True)
        if request.voice is not None and not isinstance(request.voice, str):
            raise ArgumentError(f"'voice' must be a string, got {request.voice!r}")
        if request.voice is not None and not request.voice.strip():
            raise ArgumentError("'voice' must not be empty; omit it to use the default voice")

        voice = resolve_voice(request.voice, self.config_store.default_voice())
        await engine.speak(text, voice=voice, rate=request.speed)
        return voice
