"""
Abstract base class and request/result types for speech engines.

Two kinds of engine implement this interface: VOICEVOX-compatible HTTP
engines, which return audio for the playback sink, and native command
engines, which speak directly through the OS.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass
from enum import Enum
from typing import Optional


class AudioFormat(Enum):
    """Supported audio output formats."""

    WAV = "wav"


@dataclass
class SynthesisRequest:
    """One call to a VOICEVOX-compatible engine.

    Attributes:
        text: Text to speak. Must be non-empty.
        speaker_id: Style id to speak with. None means "use the default".
        speed_scale: Speed multiplier. None means 1.0.
    """

    text: str
    speaker_id: Optional[int] = None
    speed_scale: Optional[float] = None


@dataclass
class NativeSpeechRequest:
    """One call to the native speech command.

    Attributes:
        text: Text to speak. Must be non-empty.
        voice: OS voice name. None means "use the default".
        speed: Speaking rate in words per minute. None leaves the OS rate.
    """

    text: str
    voice: Optional[str] = None
    speed: Optional[int] = None


@dataclass
class PlayableAudio:
    """Fully buffered audio returned by an engine.

    Attributes:
        audio_data: Raw audio bytes, playable as-is.
        format: Audio format of the data.
        engine_name: Name of the engine that produced this audio.
        speaker_id: Effective style id used for synthesis.
        speed_scale: Effective speed used for synthesis.
    """

    audio_data: bytes
    format: AudioFormat
    engine_name: str
    speaker_id: int
    speed_scale: float


class SpeechEngine(ABC):
    """Abstract base class for speech engines.

    Subclasses must implement:
    - name: Stable engine key (e.g. "voicevox").
    - label: Human-readable engine name (e.g. "VOICEVOX").
    - is_supported(): Whether the engine can run on this host at all.
    """

    @property
    @abstractmethod
    def name(self) -> str:
        """Stable engine key."""
        ...

    @property
    @abstractmethod
    def label(self) -> str:
        """Human-readable engine name."""
        ...

    @abstractmethod
    def is_supported(self) -> bool:
        """Check whether this engine can be used on the current host.

        Returns:
            True if the engine's platform precondition holds.
        """
        ...
