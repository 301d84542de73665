"""
Tests for tool schema construction.
"""

import pytest

from speak_mcp.voice.catalog import parse_catalog
from speak_mcp.voice.schema import (
    build_native_schema,
    build_speaker_schema,
    default_in_choices,
)

ZUNDAMON = parse_catalog([{"name": "Zundamon", "styles": [{"name": "Normal", "id": 3}]}])

TWO_SPEAKERS = parse_catalog([
    {"name": "Metan", "styles": [{"name": "Normal", "id": 2}, {"name": "Sweet", "id": 0}]},
    {"name": "Zundamon", "styles": [{"name": "Normal", "id": 3}, {"name": "Sexy", "id": 5}, {"name": "Whisper", "id": 22}]},
])


class TestEnumeratedSchema:
    """Catalog available: speaker is an enumeration."""

    def test_zundamon_scenario(self) -> None:
        schema = build_speaker_schema(ZUNDAMON, None)
        speaker = schema["properties"]["speaker"]

        assert speaker["oneOf"] == [{"const": 3, "title": "Zundamon (Normal)"}]
        assert speaker["default"] == 1

    def test_one_choice_per_style(self) -> None:
        schema = build_speaker_schema(TWO_SPEAKERS, None)
        expected = sum(len(entry.styles) for entry in TWO_SPEAKERS)
        assert len(schema["properties"]["speaker"]["oneOf"]) == expected == 5

    def test_choices_keep_catalog_order(self) -> None:
        schema = build_speaker_schema(TWO_SPEAKERS, None)
        assert [c["const"] for c in schema["properties"]["speaker"]["oneOf"]] == [2, 0, 3, 5, 22]

    @pytest.mark.parametrize("configured", [0, 3, 22])
    def test_configured_default_in_catalog(self, configured: int) -> None:
        schema = build_speaker_schema(TWO_SPEAKERS, configured)
        assert schema["properties"]["speaker"]["default"] == configured
        assert default_in_choices(schema) is True

    def test_configured_default_not_in_catalog_is_kept(self) -> None:
        schema = build_speaker_schema(ZUNDAMON, 999)
        assert schema["properties"]["speaker"]["default"] == 999
        assert default_in_choices(schema) is False

    def test_fallback_default_not_in_catalog_is_kept(self) -> None:
        schema = build_speaker_schema(ZUNDAMON, None)
        assert schema["properties"]["speaker"]["default"] == 1
        assert default_in_choices(schema) is False

    def test_empty_catalog_is_still_enumerated(self) -> None:
        schema = build_speaker_schema([], None)
        assert schema["properties"]["speaker"]["oneOf"] == []


class TestPermissiveSchema:
    """Catalog unavailable: speaker is a plain integer."""

    @pytest.mark.parametrize("configured, expected", [(None, 1), (0, 0), (42, 42)])
    def test_default_policy(self, configured, expected) -> None:
        schema = build_speaker_schema(None, configured)
        speaker = schema["properties"]["speaker"]
        assert speaker["type"] == "integer"
        assert speaker["default"] == expected

    def test_never_enumerated(self) -> None:
        schema = build_speaker_schema(None, 3)
        assert "oneOf" not in schema["properties"]["speaker"]
        assert "enum" not in schema["properties"]["speaker"]
        assert default_in_choices(schema) is True


class TestCommonFields:
    """Fields that do not depend on the catalog."""

    @pytest.mark.parametrize("catalog", [None, ZUNDAMON, TWO_SPEAKERS])
    def test_shape(self, catalog) -> None:
        schema = build_speaker_schema(catalog, 7)

        assert schema["type"] == "object"
        assert set(schema["properties"]) == {"text", "speaker", "speed"}
        assert schema["required"] == ["text"]
        assert schema["additionalProperties"] is False
        assert schema["properties"]["text"]["type"] == "string"
        assert schema["properties"]["speed"] == {
            "type": "number",
            "default": 1.0,
            "description": "Speed multiplier (1.0 = normal)",
        }

    def test_schemas_are_independent(self) -> None:
        first = build_speaker_schema(None, None)
        first["properties"]["text"]["description"] = "changed"
        second = build_speaker_schema(None, None)
        assert second["properties"]["text"]["description"] == "Text to read aloud"


class TestNativeSchema:
    """Tests for build_native_schema()."""

    def test_shape(self) -> None:
        schema = build_native_schema()
        assert set(schema["properties"]) == {"text", "voice", "speed"}
        assert schema["required"] == ["text"]
        assert schema["properties"]["voice"]["type"] == "string"
        assert "default" not in schema["properties"]["voice"]
        assert schema["properties"]["speed"]["type"] == "integer"
