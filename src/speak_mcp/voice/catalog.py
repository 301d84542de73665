"""
Speaker catalog discovery for VOICEVOX-compatible engines.

An engine reports its voices at ``GET /speakers`` as::

    [{"name": "ずんだもん", "styles": [{"name": "ノーマル", "id": 3}, ...]}, ...]

Style ids are what synthesis calls address. They are supplied by the
engine and are not guaranteed to be contiguous or stable across engine
restarts, so they are only ever passed through, never computed.
"""

import logging
from typing import Any, Optional

import httpx
from pydantic import BaseModel, Field, TypeAdapter, ValidationError

from ..errors import DiscoveryUnavailable

logger = logging.getLogger("speak-mcp.voice.catalog")

DISCOVERY_TIMEOUT = 5.0


class SpeakerStyle(BaseModel):
    """A distinct speaking style of one speaker."""

    name: str = Field(description="Style name")
    id: int = Field(ge=0, description="Engine-assigned style id")


class SpeakerCatalogEntry(BaseModel):
    """A voice persona grouping one or more styles."""

    name: str = Field(description="Speaker name")
    styles: list[SpeakerStyle] = Field(default_factory=list)


_CATALOG_ADAPTER = TypeAdapter(list[SpeakerCatalogEntry])


def style_label(entry: SpeakerCatalogEntry, style: SpeakerStyle) -> str:
    """Display label for a style, e.g. ``"Zundamon (Normal)"``."""
    return f"{entry.name} ({style.name})"


def catalog_choices(catalog: list[SpeakerCatalogEntry]) -> list[tuple[str, int]]:
    """Flatten a catalog into ``(label, style_id)`` pairs in catalog order."""
    return [
        (style_label(entry, style), style.id)
        for entry in catalog
        for style in entry.styles
    ]


def parse_catalog(payload: Any) -> list[SpeakerCatalogEntry]:
    """Validate a decoded ``/speakers`` payload.

    Raises:
        DiscoveryUnavailable: If the payload is not a list of speakers.
    """
    try:
        return _CATALOG_ADAPTER.validate_python(payload)
    except ValidationError as e:
        raise DiscoveryUnavailable(
            f"Unexpected speaker catalog shape: {e.error_count()} validation error(s)"
        ) from None


async def _request_catalog(
    base_url: str,
    timeout: float,
    transport: Optional[httpx.AsyncBaseTransport],
) -> list[SpeakerCatalogEntry]:
    url = f"{base_url}/speakers"
    try:
        async with httpx.AsyncClient(transport=transport, timeout=timeout) as client:
            response = await client.get(url)
            response.raise_for_status()
            payload = response.json()
    except httpx.HTTPStatusError as e:
        raise DiscoveryUnavailable(
            f"{url} returned HTTP {e.response.status_code}"
        ) from None
    except httpx.RequestError as e:
        raise DiscoveryUnavailable(f"Failed to connect to {url}: {e!r}") from None
    except ValueError:
        raise DiscoveryUnavailable(f"{url} did not return JSON") from None

    return parse_catalog(payload)


async def fetch_catalog(
    base_url: str,
    timeout: float = DISCOVERY_TIMEOUT,
    transport: Optional[httpx.AsyncBaseTransport] = None,
) -> Optional[list[SpeakerCatalogEntry]]:
    """Fetch an engine's speaker catalog.

    Issues a single GET with a bounded timeout. An offline engine is a
    normal state, so every failure is logged and reported as None.

    Args:
        base_url: Engine root, e.g. ``"http://localhost:50021"``.
        timeout: Request timeout in seconds.
        transport: Optional httpx transport (tests use ``httpx.MockTransport``).

    Returns:
        The catalog, or None if it is unavailable.
    """
    try:
        catalog = await _request_catalog(base_url, timeout, transport)
    except DiscoveryUnavailable as e:
        logger.info("Speaker catalog unavailable at %s: %s", base_url, e)
        return None

    logger.debug(
        "Fetched %d speakers (%d styles) from %s",
        len(catalog),
        sum(len(entry.styles) for entry in catalog),
        base_url,
    )
    return catalog
