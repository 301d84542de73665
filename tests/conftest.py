"""
Pytest configuration and fixtures for speak-mcp tests.
"""

import json
import sys
from pathlib import Path
from typing import Any, Optional
from unittest.mock import AsyncMock, MagicMock

import httpx
import pytest

# Add src directory to Python path to allow importing speak_mcp
src_path = Path(__file__).parent.parent / "src"
if str(src_path) not in sys.path:
    sys.path.insert(0, str(src_path))

from speak_mcp.config import ConfigStore  # noqa: E402
from speak_mcp.voice.playback import AudioPlayer  # noqa: E402


ZUNDAMON_CATALOG: list[dict[str, Any]] = [
    {"name": "Zundamon", "styles": [{"name": "Normal", "id": 3}]},
]

FAKE_WAV = b"RIFF\x24\x00\x00\x00WAVEfmt "


class EngineStub:
    """In-process stand-in for a VOICEVOX-compatible engine.

    Serves ``/speakers``, ``/audio_query`` and ``/synthesis`` through an
    ``httpx.MockTransport`` and records every request in arrival order.
    ``speakers=None`` makes ``/speakers`` refuse the connection.
    """

    def __init__(
        self,
        speakers: Optional[list[dict[str, Any]]] = ZUNDAMON_CATALOG,
        speakers_status: int = 200,
        query_status: int = 200,
        query_body: Any = None,
        synthesis_status: int = 200,
        audio: bytes = FAKE_WAV,
        offline: bool = False,
    ) -> None:
        self.speakers = speakers
        self.speakers_status = speakers_status
        self.query_status = query_status
        self.query_body = query_body if query_body is not None else {
            "accent_phrases": [],
            "speedScale": 1.0,
            "pitchScale": 0.0,
        }
        self.synthesis_status = synthesis_status
        self.audio = audio
        self.offline = offline
        self.requests: list[httpx.Request] = []

    def handler(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        if self.offline:
            raise httpx.ConnectError("[Errno 111] Connection refused", request=request)

        path = request.url.path
        if path == "/speakers":
            if self.speakers is None:
                raise httpx.ConnectError("[Errno 111] Connection refused", request=request)
            return httpx.Response(self.speakers_status, json=self.speakers)
        if path == "/audio_query":
            if self.query_status != 200:
                return httpx.Response(self.query_status, json={"detail": "engine error"})
            if isinstance(self.query_body, (bytes, str)):
                return httpx.Response(200, content=self.query_body)
            return httpx.Response(200, json=self.query_body)
        if path == "/synthesis":
            if self.synthesis_status != 200:
                return httpx.Response(self.synthesis_status, json={"detail": "engine error"})
            return httpx.Response(200, content=self.audio)
        return httpx.Response(404)

    @property
    def transport(self) -> httpx.MockTransport:
        return httpx.MockTransport(self.handler)

    @property
    def paths(self) -> list[str]:
        return [request.url.path for request in self.requests]

    def last_request(self, path: str) -> httpx.Request:
        matching = [request for request in self.requests if request.url.path == path]
        assert matching, f"no request to {path}"
        return matching[-1]

    def synthesis_body(self) -> dict[str, Any]:
        return json.loads(self.last_request("/synthesis").content)


@pytest.fixture
def engine_stub():
    """Factory fixture: ``engine_stub(query_status=500)`` -> EngineStub."""
    return EngineStub


@pytest.fixture
def config_path(tmp_path: Path) -> Path:
    return tmp_path / "speak-mcp" / "config.json"


@pytest.fixture
def config_store(tmp_path: Path, config_path: Path) -> ConfigStore:
    """Config store in a temp dir, with a fallback that does not exist."""
    return ConfigStore(path=config_path, fallback_path=tmp_path / "cwd" / "config.json")


@pytest.fixture
def write_config(config_path: Path):
    """Write raw config data to the store's primary path."""

    def _write(data: Any) -> Path:
        config_path.parent.mkdir(parents=True, exist_ok=True)
        if isinstance(data, str):
            config_path.write_text(data, encoding="utf-8")
        else:
            config_path.write_text(json.dumps(data), encoding="utf-8")
        return config_path

    return _write


@pytest.fixture
def fake_player() -> MagicMock:
    """Playback sink test double that records play() calls."""
    player = MagicMock(spec=AudioPlayer)
    player.play = AsyncMock(return_value=None)
    return player
