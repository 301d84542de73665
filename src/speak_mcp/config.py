"""
Persisted per-engine defaults for speak-mcp.

The config file is a single JSON object, by default at
``~/speak-mcp/config.json``::

    {
      "voicevoxDefaultSpeaker": 3,
      "aivisDefaultSpeaker": 888753760,
      "nativeDefaultVoice": "Kyoko"
    }

Every field is optional. The file is written by the config editor and
only read by the server, so readers go back to disk at the point of use
instead of caching: an edit takes effect on the next tool call without a
restart. A read that fails for any reason (missing file, partial write,
bad JSON) means "no config" and never raises.
"""

import json
import logging
import os
from pathlib import Path

from pydantic import AliasChoices, BaseModel, ConfigDict, Field, ValidationError

from .errors import ConfigIOError

logger = logging.getLogger("speak-mcp.config")

CONFIG_ENV_VAR = "SPEAK_MCP_CONFIG"
CONFIG_DIR_NAME = "speak-mcp"
CONFIG_FILE_NAME = "config.json"

# Used when neither the call nor the config names a speaker
FALLBACK_SPEAKER_ID = 1


class SpeakConfig(BaseModel):
    """Per-engine default speakers and the default native voice.

    Reads both the camelCase keys and the snake_case keys written by
    earlier builds; always writes camelCase.
    """

    model_config = ConfigDict(extra="ignore")

    voicevox_default_speaker: int | None = Field(
        default=None,
        ge=0,
        validation_alias=AliasChoices("voicevoxDefaultSpeaker", "voicevox_default_speaker"),
        serialization_alias="voicevoxDefaultSpeaker",
        description="Default VOICEVOX style id",
    )
    aivis_default_speaker: int | None = Field(
        default=None,
        ge=0,
        validation_alias=AliasChoices("aivisDefaultSpeaker", "aivis_default_speaker"),
        serialization_alias="aivisDefaultSpeaker",
        description="Default AivisSpeech style id",
    )
    native_default_voice: str | None = Field(
        default=None,
        validation_alias=AliasChoices(
            "nativeDefaultVoice", "native_default_voice", "macos_default_voice"
        ),
        serialization_alias="nativeDefaultVoice",
        description="Default voice name for the native speech command",
    )


def get_config_path() -> Path:
    """Return the primary config file location.

    ``SPEAK_MCP_CONFIG`` wins when set. Otherwise the file lives in
    ``~/speak-mcp/``, which is created on first access.
    """
    override = os.getenv(CONFIG_ENV_VAR)
    if override:
        return Path(override).expanduser()

    try:
        config_dir = Path.home() / CONFIG_DIR_NAME
    except RuntimeError:
        # No resolvable home directory
        return Path.cwd() / CONFIG_FILE_NAME

    if not config_dir.exists():
        try:
            config_dir.mkdir(parents=True, exist_ok=True)
        except OSError as e:
            logger.warning("Could not create config directory %s: %s", config_dir, e)
    return config_dir / CONFIG_FILE_NAME


class ConfigStore:
    """Loads and saves the speak-mcp config file.

    Attributes:
        path: Primary config file path.
        fallback_path: Secondary path tried when the primary yields nothing.
    """

    def __init__(self, path: Path | None = None, fallback_path: Path | None = None) -> None:
        self.path = path if path is not None else get_config_path()
        self.fallback_path = (
            fallback_path if fallback_path is not None else Path.cwd() / CONFIG_FILE_NAME
        )

    def _read(self, path: Path) -> SpeakConfig | None:
        try:
            content = path.read_text(encoding="utf-8")
        except OSError as e:
            logger.debug("Config not readable at %s: %s", path, e)
            return None
        except UnicodeDecodeError as e:
            # Partially written multi-byte text
            logger.warning("Ignoring config at %s, not valid UTF-8: %s", path, e.reason)
            return None

        try:
            return SpeakConfig.model_validate_json(content)
        except ValidationError as e:
            logger.warning("Ignoring invalid config at %s: %s", path, e.errors()[0]["msg"])
            return None

    def load(self) -> SpeakConfig:
        """Read the config, falling back to the working directory, then to defaults."""
        config = self._read(self.path)
        if config is None and self.fallback_path != self.path:
            config = self._read(self.fallback_path)
            if config is not None:
                logger.debug("Config loaded from fallback %s", self.fallback_path)
        if config is None:
            return SpeakConfig()
        return config

    def save(self, config: SpeakConfig) -> Path:
        """Write the config to the primary path.

        Raises:
            ConfigIOError: If the directory or file cannot be written.
        """
        data = config.model_dump(by_alias=True, exclude_none=True)
        tmp_path = self.path.with_name(self.path.name + ".tmp")
        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            tmp_path.write_text(
                json.dumps(data, indent=2, ensure_ascii=False) + "\n",
                encoding="utf-8",
            )
            os.replace(tmp_path, self.path)
        except OSError as e:
            raise ConfigIOError(
                f"Could not write config to {self.path}: {e}",
                details={"path": str(self.path)},
            ) from e
        logger.info("Config saved to %s", self.path)
        return self.path

    def default_speaker(self, config_field: str) -> int | None:
        """Freshly read the default speaker stored under ``config_field``."""
        return getattr(self.load(), config_field, None)

    def default_voice(self) -> str | None:
        """Freshly read the default native voice."""
        return self.load().native_default_voice
