"""
Speech engine clients for the speak-mcp voice subsystem.

Each engine implements the SpeechEngine interface: VOICEVOX-compatible
HTTP engines return audio, the native command speaks directly.
"""

from .base import SpeechEngine, SynthesisRequest, NativeSpeechRequest, PlayableAudio
from .say import SayCommandEngine
from .voicevox import VoicevoxCompatibleEngine

__all__ = [
    "SpeechEngine",
    "SynthesisRequest",
    "NativeSpeechRequest",
    "PlayableAudio",
    "SayCommandEngine",
    "VoicevoxCompatibleEngine",
]
