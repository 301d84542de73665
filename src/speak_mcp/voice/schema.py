"""
Tool input schemas for the speech tools.

Schemas are built once at startup from whatever each engine reported.
With a catalog, ``speaker`` is an enumeration of the engine's styles so a
client can present readable choices; without one (engine offline) it is
a plain integer so the tool stays callable.

The default speaker is taken from the config as-is, even when the
catalog does not list it: an administrator may rely on a style the
engine did not report this run.
"""

from typing import Any, Optional

from ..config import FALLBACK_SPEAKER_ID
from .catalog import SpeakerCatalogEntry, catalog_choices

DEFAULT_SPEED = 1.0

_TEXT_PROPERTY: dict[str, Any] = {
    "type": "string",
    "description": "Text to read aloud",
}


def build_speaker_schema(
    catalog: Optional[list[SpeakerCatalogEntry]],
    configured_default: Optional[int],
) -> dict[str, Any]:
    """Build the input schema of a VOICEVOX-compatible speech tool.

    Args:
        catalog: Speaker catalog reported by the engine, or None if unavailable.
        configured_default: Default style id from the config, if any.

    Returns:
        A JSON schema with ``text`` (required), ``speaker`` and ``speed``.
    """
    default_id = configured_default if configured_default is not None else FALLBACK_SPEAKER_ID

    if catalog is not None:
        speaker: dict[str, Any] = {
            "oneOf": [
                {"const": style_id, "title": label}
                for label, style_id in catalog_choices(catalog)
            ],
            "default": default_id,
            "description": "Speaker style id",
        }
    else:
        speaker = {
            "type": "integer",
            "minimum": 0,
            "default": default_id,
            "description": "Speaker style id (engine was offline at startup, no list available)",
        }

    return {
        "type": "object",
        "properties": {
            "text": dict(_TEXT_PROPERTY),
            "speaker": speaker,
            "speed": {
                "type": "number",
                "default": DEFAULT_SPEED,
                "description": "Speed multiplier (1.0 = normal)",
            },
        },
        "required": ["text"],
        "additionalProperties": False,
    }


def build_native_schema() -> dict[str, Any]:
    """Build the input schema of the native ``speak`` tool.

    No voice default is advertised: the configured voice is read at call
    time, so a startup snapshot could go stale.
    """
    return {
        "type": "object",
        "properties": {
            "text": dict(_TEXT_PROPERTY),
            "voice": {
                "type": "string",
                "description": "OS voice name (omit for the configured or system default)",
            },
            "speed": {
                "type": "integer",
                "minimum": 1,
                "description": "Speaking rate in words per minute",
            },
        },
        "required": ["text"],
        "additionalProperties": False,
    }


def default_in_choices(schema: dict[str, Any]) -> bool:
    """Whether the speaker default is one of the enumerated choices.

    Permissive (non-enumerated) schemas accept any id and always return True.
    """
    speaker = schema["properties"]["speaker"]
    if "oneOf" not in speaker:
        return True
    return any(choice["const"] == speaker["default"] for choice in speaker["oneOf"])
