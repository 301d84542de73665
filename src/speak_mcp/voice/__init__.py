"""
Voice subsystem for speak-mcp.

Brokers speech to external engines:
- VOICEVOX-compatible HTTP engines (VOICEVOX, AivisSpeech), whose speaker
  catalogs are discovered at startup and turned into tool schemas
- The native macOS ``say`` command, registered only on macOS

The Dispatcher layers defaults (argument > config file > fallback), runs
the two-phase synthesis and hands the audio to the AudioPlayer.
"""

from .catalog import SpeakerCatalogEntry, SpeakerStyle, catalog_choices, fetch_catalog
from .dispatcher import Dispatcher, resolve_speaker_id, resolve_speed, resolve_voice
from .engines.base import AudioFormat, NativeSpeechRequest, PlayableAudio, SpeechEngine, SynthesisRequest
from .hardware import get_platform_info, is_mac, is_windows
from .playback import AudioPlayer
from .registry import BUILTIN_ENGINES, EngineSpec, HttpEngineSpec, NativeCommandSpec
from .schema import build_native_schema, build_speaker_schema

__all__ = [
    # Discovery
    "SpeakerStyle",
    "SpeakerCatalogEntry",
    "catalog_choices",
    "fetch_catalog",
    # Schemas
    "build_speaker_schema",
    "build_native_schema",
    # Dispatch
    "Dispatcher",
    "resolve_speaker_id",
    "resolve_speed",
    "resolve_voice",
    # Engine interface
    "SpeechEngine",
    "SynthesisRequest",
    "NativeSpeechRequest",
    "PlayableAudio",
    "AudioFormat",
    # Registry
    "EngineSpec",
    "HttpEngineSpec",
    "NativeCommandSpec",
    "BUILTIN_ENGINES",
    # Playback
    "AudioPlayer",
    # Platform detection
    "is_mac",
    "is_windows",
    "get_platform_info",
]
