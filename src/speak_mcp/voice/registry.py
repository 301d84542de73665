"""
Engine registry: the speech capabilities speak-mcp can expose.

Each capability is one of two tagged variants:

  - ``HttpEngineSpec``: a VOICEVOX-compatible engine on a local port,
    exposed as a tool with a catalog-driven schema.
  - ``NativeCommandSpec``: an OS speech command, exposed only when the
    host platform provides it.

Adding an engine means adding a spec here (plus its default field in
``SpeakConfig``); nothing else changes structurally.
"""

import logging
from dataclasses import dataclass
from typing import Literal, Optional, Sequence, Union

import httpx

from .engines.say import SayCommandEngine
from .engines.voicevox import VoicevoxCompatibleEngine

logger = logging.getLogger("speak-mcp.voice.registry")


@dataclass(frozen=True)
class HttpEngineSpec:
    """A VOICEVOX-compatible HTTP engine.

    Attributes:
        key: Stable engine key.
        label: Human-readable engine name.
        port: Local port the engine listens on.
        tool_name: Name of the MCP tool backed by this engine.
        config_field: ``SpeakConfig`` field holding the default style id.
    """

    key: str
    label: str
    port: int
    tool_name: str
    config_field: str
    kind: Literal["http"] = "http"

    def is_supported(self) -> bool:
        return self.create_engine().is_supported()

    @property
    def description(self) -> str:
        return f"Read text aloud with {self.label} (Port: {self.port})."

    def create_engine(
        self,
        host: str = "localhost",
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ) -> VoicevoxCompatibleEngine:
        return VoicevoxCompatibleEngine(
            name=self.key,
            label=self.label,
            port=self.port,
            host=host,
            transport=transport,
        )


@dataclass(frozen=True)
class NativeCommandSpec:
    """An OS speech command, available on macOS only.

    Attributes:
        key: Stable engine key.
        label: Human-readable engine name.
        tool_name: Name of the MCP tool backed by this command.
        command: Executable to run.
        config_field: ``SpeakConfig`` field holding the default voice.
    """

    key: str
    label: str
    tool_name: str
    command: str
    config_field: str = "native_default_voice"
    kind: Literal["native"] = "native"

    def is_supported(self) -> bool:
        return self.create_engine().is_supported()

    @property
    def description(self) -> str:
        return f"Read text aloud with the built-in {self.label} command."

    def create_engine(self) -> SayCommandEngine:
        return SayCommandEngine(command=self.command, name=self.key, label=self.label)


EngineSpec = Union[HttpEngineSpec, NativeCommandSpec]

VOICEVOX = HttpEngineSpec(
    key="voicevox",
    label="VOICEVOX",
    port=50021,
    tool_name="speak_voicevox",
    config_field="voicevox_default_speaker",
)

AIVIS_SPEECH = HttpEngineSpec(
    key="aivis",
    label="Aivis Speech",
    port=10101,
    tool_name="speak_aivis",
    config_field="aivis_default_speaker",
)

MACOS_SAY = NativeCommandSpec(
    key="native",
    label="macOS say",
    tool_name="speak",
    command="say",
)

BUILTIN_ENGINES: tuple[EngineSpec, ...] = (VOICEVOX, AIVIS_SPEECH, MACOS_SAY)


def supported_specs(specs: Sequence[EngineSpec] = BUILTIN_ENGINES) -> list[EngineSpec]:
    """Return the specs whose platform precondition holds on this host."""
    supported: list[EngineSpec] = []
    for spec in specs:
        if spec.is_supported():
            supported.append(spec)
        else:
            logger.info("Engine '%s' is not supported on this platform, skipping", spec.key)
    return supported


def http_specs(specs: Sequence[EngineSpec] = BUILTIN_ENGINES) -> list[HttpEngineSpec]:
    """Return only the HTTP engine specs."""
    return [spec for spec in specs if isinstance(spec, HttpEngineSpec)]


def find_spec(key: str, specs: Sequence[EngineSpec] = BUILTIN_ENGINES) -> EngineSpec:
    """Look up a spec by engine key.

    Raises:
        ValueError: If no spec has that key.
    """
    for spec in specs:
        if spec.key == key.lower().strip():
            return spec
    valid = ", ".join(spec.key for spec in specs)
    raise ValueError(f"Unknown engine '{key}'. Valid engines: {valid}")
