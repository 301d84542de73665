"""
VOICEVOX-compatible HTTP engine client.

VOICEVOX (port 50021) and AivisSpeech (port 10101) expose the same API.
Synthesis is two-phase and strictly ordered:

1. ``POST /audio_query?text=...&speaker=ID`` returns an intermediate JSON
   document describing the utterance.
2. The document's ``speedScale`` is set to the requested speed.
3. ``POST /synthesis?speaker=ID`` with that document as body returns WAV bytes.

A failure in phase 1 means phase 3 is never issued.
"""

import logging
import time
from typing import Any, Optional

import httpx

from ...errors import TransportError
from ..catalog import DISCOVERY_TIMEOUT, SpeakerCatalogEntry, fetch_catalog
from .base import AudioFormat, PlayableAudio, SpeechEngine

logger = logging.getLogger("speak-mcp.voice.engines.voicevox")

SYNTHESIS_TIMEOUT = 30.0


class VoicevoxCompatibleEngine(SpeechEngine):
    """Client for one VOICEVOX-compatible engine.

    A new ``httpx.AsyncClient`` is opened per call, so concurrent tool
    calls never share connection state.
    """

    def __init__(
        self,
        name: str,
        label: str,
        port: int,
        host: str = "localhost",
        timeout: float = SYNTHESIS_TIMEOUT,
        discovery_timeout: float = DISCOVERY_TIMEOUT,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ) -> None:
        self._name = name
        self._label = label
        self.port = port
        self.host = host
        self._timeout = timeout
        self._discovery_timeout = discovery_timeout
        self._transport = transport

    @property
    def name(self) -> str:
        return self._name

    @property
    def label(self) -> str:
        return self._label

    @property
    def base_url(self) -> str:
        return f"http://{self.host}:{self.port}"

    def is_supported(self) -> bool:
        # Reachable over HTTP from any platform
        return True

    async def fetch_speakers(self) -> Optional[list[SpeakerCatalogEntry]]:
        """Fetch this engine's speaker catalog, or None if it is unavailable."""
        return await fetch_catalog(
            self.base_url,
            timeout=self._discovery_timeout,
            transport=self._transport,
        )

    def _check_status(self, response: httpx.Response, phase: str) -> None:
        if response.is_success:
            return
        excerpt = response.text[:200].strip()
        raise TransportError(
            f"{self._label} {phase} returned HTTP {response.status_code}"
            + (f": {excerpt}" if excerpt else ""),
            status_code=response.status_code,
            details={"engine": self._name, "phase": phase},
        )

    async def _audio_query(
        self, client: httpx.AsyncClient, text: str, speaker_id: int
    ) -> dict[str, Any]:
        response = await client.post(
            f"{self.base_url}/audio_query",
            params={"text": text, "speaker": speaker_id},
        )
        self._check_status(response, "audio_query")

        try:
            document = response.json()
        except ValueError:
            raise TransportError(
                f"{self._label} audio_query returned a body that is not JSON",
                details={"engine": self._name, "phase": "audio_query"},
            ) from None
        if not isinstance(document, dict):
            raise TransportError(
                f"{self._label} audio_query returned {type(document).__name__}, expected an object",
                details={"engine": self._name, "phase": "audio_query"},
            )
        return document

    async def _synthesis(
        self, client: httpx.AsyncClient, query: dict[str, Any], speaker_id: int
    ) -> bytes:
        response = await client.post(
            f"{self.base_url}/synthesis",
            params={"speaker": speaker_id},
            json=query,
        )
        self._check_status(response, "synthesis")

        if not response.content:
            raise TransportError(
                f"{self._label} synthesis returned no audio",
                details={"engine": self._name, "phase": "synthesis"},
            )
        return response.content

    async def synthesize(self, text: str, speaker_id: int, speed_scale: float) -> PlayableAudio:
        """Run audio_query then synthesis and return the buffered WAV audio.

        Args:
            text: Text to speak.
            speaker_id: Effective style id.
            speed_scale: Effective speed multiplier.

        Returns:
            PlayableAudio with the engine's WAV output.

        Raises:
            TransportError: On connection failure, timeout, non-2xx status or
                a malformed response in either phase.
        """
        start_time = time.monotonic()
        try:
            async with httpx.AsyncClient(transport=self._transport, timeout=self._timeout) as client:
                query = await self._audio_query(client, text, speaker_id)
                query["speedScale"] = speed_scale
                audio_data = await self._synthesis(client, query, speaker_id)
        except httpx.TimeoutException:
            raise TransportError(
                f"{self._label} at {self.base_url} did not respond within {self._timeout:.0f}s",
                details={"engine": self._name},
            ) from None
        except httpx.RequestError as e:
            raise TransportError(
                f"Failed to connect to {self._label} at {self.base_url} "
                f"(is the engine running?): {e!r}",
                details={"engine": self._name},
            ) from None

        elapsed_ms = (time.monotonic() - start_time) * 1000
        logger.info(
            "%s synthesis: speaker=%d speed=%.2f, %d bytes in %.0fms",
            self._label,
            speaker_id,
            speed_scale,
            len(audio_data),
            elapsed_ms,
        )
        return PlayableAudio(
            audio_data=audio_data,
            format=AudioFormat.WAV,
            engine_name=self._name,
            speaker_id=speaker_id,
            speed_scale=speed_scale,
        )
