"""
Speak MCP Server
Text-to-speech tools for MCP clients, backed by local VOICEVOX-compatible
engines and the macOS ``say`` command, built with FastMCP.

At startup every HTTP engine is probed for its speaker catalog. Each
catalog (or its absence) plus the configured default speaker becomes the
schema of that engine's tool. The server always starts, even when every
engine is offline.
"""

import asyncio
import logging
import os
from typing import Optional, Sequence

import httpx
from dotenv import load_dotenv
from fastmcp import FastMCP

from .config import ConfigStore
from .tools import register_http_engine_tool, register_native_tool
from .voice.catalog import SpeakerCatalogEntry, catalog_choices
from .voice.dispatcher import Dispatcher
from .voice.engines.voicevox import VoicevoxCompatibleEngine
from .voice.playback import AudioPlayer
from .voice.registry import (
    BUILTIN_ENGINES,
    EngineSpec,
    HttpEngineSpec,
    http_specs,
    supported_specs,
)
from .voice.schema import build_native_schema, build_speaker_schema, default_in_choices

logger = logging.getLogger("speak-mcp")

SERVER_NAME = "speak-mcp"

INSTRUCTIONS = """
Reads text aloud on the user's machine. Use speak_voicevox or speak_aivis
for Japanese character voices; pick a speaker from the tool's choices or
omit it to use the configured default. Calls block until playback ends.
"""


async def discover_catalogs(
    engines: Sequence[VoicevoxCompatibleEngine],
) -> dict[str, Optional[list[SpeakerCatalogEntry]]]:
    """Probe all engines concurrently for their speaker catalogs.

    Returns:
        Mapping of engine name to catalog, None for engines that are offline.
    """
    results = await asyncio.gather(*(engine.fetch_speakers() for engine in engines))

    catalogs: dict[str, Optional[list[SpeakerCatalogEntry]]] = {}
    for engine, catalog in zip(engines, results):
        if catalog is None:
            logger.warning(
                "⚠️ %s is not reachable at %s, its tool will accept any speaker id",
                engine.label,
                engine.base_url,
            )
        else:
            logger.info(
                "🔊 %s: %d speakers, %d styles",
                engine.label,
                len(catalog),
                len(catalog_choices(catalog)),
            )
        catalogs[engine.name] = catalog
    return catalogs


async def create_server(
    config_store: Optional[ConfigStore] = None,
    specs: Sequence[EngineSpec] = BUILTIN_ENGINES,
    player: Optional[AudioPlayer] = None,
    host: Optional[str] = None,
    transport: Optional[httpx.AsyncBaseTransport] = None,
) -> FastMCP:
    """Discover the engines and build a FastMCP server with one tool per engine.

    Args:
        config_store: Config source. Defaults to the per-user config file.
        specs: Engine specs to expose; unsupported ones are skipped.
        player: Playback sink. Defaults to the platform player.
        host: Host of the HTTP engines. Defaults to ``SPEAK_MCP_HOST`` or localhost.
        transport: Optional httpx transport shared by all HTTP engines.

    Returns:
        The configured FastMCP server, ready to run.
    """
    config_store = config_store or ConfigStore()
    host = host or os.getenv("SPEAK_MCP_HOST", "localhost")
    logger.debug("📂 Config path: %s", config_store.path)

    config = config_store.load()
    dispatcher = Dispatcher(config_store, player)
    active_specs = supported_specs(specs)

    engines = {
        spec.key: spec.create_engine(host=host, transport=transport)
        for spec in http_specs(active_specs)
    }
    catalogs = await discover_catalogs(list(engines.values()))

    mcp = FastMCP(name=SERVER_NAME, instructions=INSTRUCTIONS.strip())

    for spec in active_specs:
        if isinstance(spec, HttpEngineSpec):
            configured_default = getattr(config, spec.config_field, None)
            schema = build_speaker_schema(catalogs[spec.key], configured_default)
            if not default_in_choices(schema):
                logger.warning(
                    "Configured default speaker %s for %s is not in the reported catalog; keeping it",
                    configured_default,
                    spec.label,
                )
            register_http_engine_tool(mcp, spec, engines[spec.key], schema, dispatcher)
        else:
            register_native_tool(mcp, spec, spec.create_engine(), build_native_schema(), dispatcher)
        logger.debug("✅ Registered tool '%s'", spec.tool_name)

    logger.info(
        "Speak MCP server ready with tools: %s",
        ", ".join(spec.tool_name for spec in active_specs),
    )
    return mcp


def configure_logging() -> None:
    """Log to stderr; stdout carries the MCP stdio transport."""
    level_name = os.getenv("SPEAK_MCP_LOG_LEVEL", "INFO").upper()
    logging.basicConfig(
        level=getattr(logging, level_name, logging.INFO),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )


async def serve() -> None:
    mcp = await create_server()
    await mcp.run_async(transport="stdio")


def main() -> None:
    """Main entry point for the Speak MCP Server."""
    dotenv_loaded = load_dotenv()
    configure_logging()
    if not dotenv_loaded:
        logger.debug(".env file not found, using process environment only")
    logger.info("Speak MCP Server (multi-engine) starting... 🌟")
    asyncio.run(serve())


if __name__ == "__main__":
    main()
