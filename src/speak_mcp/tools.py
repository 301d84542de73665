"""
MCP tool registration for the speech engines.

Each engine becomes one FastMCP tool. The advertised input schema is the
one built from the engine's catalog at startup, while the handler's own
signature keeps every argument optional so that argument problems are
reported by the dispatcher with the same ``[kind] message`` shape as
every other failure.
"""

import logging
from typing import Annotated

from fastmcp import FastMCP
from fastmcp.exceptions import ToolError
from fastmcp.tools import Tool
from pydantic import Field

from .errors import SpeakError
from .voice.dispatcher import Dispatcher
from .voice.engines.base import NativeSpeechRequest, SynthesisRequest
from .voice.engines.say import SayCommandEngine
from .voice.engines.voicevox import VoicevoxCompatibleEngine
from .voice.registry import HttpEngineSpec, NativeCommandSpec

logger = logging.getLogger("speak-mcp.tools")


def _to_tool_error(tool_name: str, exc: Exception) -> ToolError:
    """Convert any failure of one call into an MCP error response."""
    if isinstance(exc, SpeakError):
        logger.warning("Tool '%s' failed: %s", tool_name, exc.to_payload())
        return ToolError(exc.to_payload())
    logger.exception("Unexpected error in tool '%s'", tool_name)
    return ToolError(f"[internal_error] {type(exc).__name__}: {exc}")


def _with_schema(tool: Tool, schema: dict) -> Tool:
    return tool.model_copy(update={"parameters": schema})


def register_http_engine_tool(
    mcp: FastMCP,
    spec: HttpEngineSpec,
    engine: VoicevoxCompatibleEngine,
    schema: dict,
    dispatcher: Dispatcher,
) -> Tool:
    """Register the speech tool of a VOICEVOX-compatible engine."""

    async def speak_with_engine(
        text: Annotated[str | None, Field(description="Text to read aloud")] = None,
        speaker: Annotated[int | None, Field(description="Speaker style id")] = None,
        speed: Annotated[float | None, Field(description="Speed multiplier (1.0 = normal)")] = None,
    ) -> str:
        request = SynthesisRequest(text=text, speaker_id=speaker, speed_scale=speed)
        try:
            audio = await dispatcher.speak(engine, request, spec.config_field)
        except Exception as e:
            raise _to_tool_error(spec.tool_name, e) from e

        return (
            f"Finished reading aloud with {spec.label} "
            f"(speaker {audio.speaker_id}, speed {audio.speed_scale:g}) ✨"
        )

    tool = Tool.from_function(
        speak_with_engine,
        name=spec.tool_name,
        description=spec.description,
    )
    tool = _with_schema(tool, schema)
    mcp.add_tool(tool)
    return tool


def register_native_tool(
    mcp: FastMCP,
    spec: NativeCommandSpec,
    engine: SayCommandEngine,
    schema: dict,
    dispatcher: Dispatcher,
) -> Tool:
    """Register the native speech command tool."""

    async def speak_natively(
        text: Annotated[str | None, Field(description="Text to read aloud")] = None,
        voice: Annotated[str | None, Field(description="OS voice name")] = None,
        speed: Annotated[int | None, Field(description="Words per minute")] = None,
    ) -> str:
        request = NativeSpeechRequest(text=text, voice=voice, speed=speed)
        try:
            used_voice = await dispatcher.speak_native(engine, request)
        except Exception as e:
            raise _to_tool_error(spec.tool_name, e) from e

        return f"Finished reading aloud with {spec.label} (voice {used_voice or 'system default'}) 🎵"

    tool = Tool.from_function(
        speak_natively,
        name=spec.tool_name,
        description=spec.description,
    )
    tool = _with_schema(tool, schema)
    mcp.add_tool(tool)
    return tool
