"""
Config editor for speak-mcp.

Lists the speakers each engine currently reports and stores the chosen
default style ids (and the default macOS voice) in the config file read
by the server.

Usage:
    speak-mcp-config speakers voicevox
    speak-mcp-config set voicevox 4
    speak-mcp-config set aivis --id 888753760
    speak-mcp-config set-voice Kyoko

Changes apply to the next tool call; the server does not need a restart.
Schemas shown to MCP clients are built at server startup, so the
advertised default updates after a restart.
"""

import argparse
import asyncio
import json
import sys
import threading
from dataclasses import dataclass, field
from typing import Optional, Sequence

import httpx

from .config import FALLBACK_SPEAKER_ID, ConfigStore, SpeakConfig
from .errors import ConfigIOError
from .voice.catalog import catalog_choices
from .voice.registry import BUILTIN_ENGINES, HttpEngineSpec, http_specs

DEFAULT_OPTION_LABEL = f"Default / Auto (ID: {FALLBACK_SPEAKER_ID})"

SpeakerOption = tuple[str, Optional[int]]


@dataclass
class EditorState:
    """Everything the editor mutates, guarded by ConfigEditor's lock."""

    config: SpeakConfig
    options: dict[str, list[SpeakerOption]] = field(default_factory=dict)


class ConfigEditor:
    """Edits the speak-mcp config file.

    Speaker options for an engine are the "Default / Auto" entry followed
    by every style the engine reports, in catalog order.
    """

    def __init__(
        self,
        store: ConfigStore,
        specs: Sequence[HttpEngineSpec] = tuple(http_specs(BUILTIN_ENGINES)),
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ) -> None:
        self.store = store
        self._specs = {spec.key: spec for spec in specs}
        self._transport = transport
        self._lock = threading.Lock()
        self._state = EditorState(config=store.load())

    def get_spec(self, engine_key: str) -> HttpEngineSpec:
        spec = self._specs.get(engine_key.lower().strip())
        if spec is None:
            valid = ", ".join(self._specs)
            raise ValueError(f"Unknown engine '{engine_key}'. Valid engines: {valid}")
        return spec

    @property
    def config(self) -> SpeakConfig:
        with self._lock:
            return self._state.config.model_copy()

    def refresh(self, engine_key: str) -> int:
        """Fetch the engine's speakers and rebuild its option list.

        Returns:
            Index of the currently configured default, 0 if unset or not listed.
        """
        spec = self.get_spec(engine_key)
        engine = spec.create_engine(transport=self._transport)
        catalog = asyncio.run(engine.fetch_speakers())

        options: list[SpeakerOption] = [(DEFAULT_OPTION_LABEL, None)]
        if catalog:
            options.extend(catalog_choices(catalog))

        with self._lock:
            self._state.options[spec.key] = options
            current = getattr(self._state.config, spec.config_field)
            for index, (_, style_id) in enumerate(options):
                if index > 0 and style_id == current:
                    return index
            return 0

    def options(self, engine_key: str) -> list[SpeakerOption]:
        """Options from the last refresh (only the default entry before that)."""
        spec = self.get_spec(engine_key)
        with self._lock:
            return list(self._state.options.get(spec.key, [(DEFAULT_OPTION_LABEL, None)]))

    def select(self, engine_key: str, index: int) -> Optional[int]:
        """Choose option ``index`` as the engine's default.

        An out-of-range index or the "Default / Auto" entry clears the field.

        Returns:
            The stored style id, or None if the field was cleared.
        """
        spec = self.get_spec(engine_key)
        with self._lock:
            options = self._state.options.get(spec.key, [(DEFAULT_OPTION_LABEL, None)])
            style_id = options[index][1] if 0 <= index < len(options) else None
            self._state.config = self._state.config.model_copy(
                update={spec.config_field: style_id}
            )
            return style_id

    def set_speaker_id(self, engine_key: str, style_id: Optional[int]) -> None:
        """Store a raw style id, listed by the engine or not."""
        spec = self.get_spec(engine_key)
        if style_id is not None and style_id < 0:
            raise ValueError("Style id must be a non-negative integer")
        with self._lock:
            self._state.config = self._state.config.model_copy(
                update={spec.config_field: style_id}
            )

    def set_native_voice(self, voice: Optional[str]) -> None:
        with self._lock:
            self._state.config = self._state.config.model_copy(
                update={"native_default_voice": voice or None}
            )

    def save(self) -> str:
        """Write the config file and return a status message for the user."""
        with self._lock:
            config = self._state.config.model_copy()
        try:
            path = self.store.save(config)
        except ConfigIOError as e:
            return f"Error saving: {e}"
        return f"Settings saved successfully to {path}"


# ----------------------------------------------------------------------
# Command line
# ----------------------------------------------------------------------


def _print_speakers(editor: ConfigEditor, engine_key: str) -> None:
    current_index = editor.refresh(engine_key)
    options = editor.options(engine_key)
    spec = editor.get_spec(engine_key)

    print(f"{spec.label} (Port: {spec.port})")
    if len(options) == 1:
        print("  (engine offline or no speakers reported: only the default entry is available)")
    for index, (label, style_id) in enumerate(options):
        marker = "*" if index == current_index else " "
        id_text = f"  id={style_id}" if style_id is not None else ""
        print(f" {marker} [{index}] {label}{id_text}")


def _cmd_set(editor: ConfigEditor, args: argparse.Namespace) -> int:
    if args.id is not None:
        editor.set_speaker_id(args.engine, args.id)
    elif args.choice is None or args.choice.lower() == "auto":
        editor.set_speaker_id(args.engine, None)
    else:
        try:
            index = int(args.choice)
        except ValueError:
            print(f"❌ Expected an option index or 'auto', got '{args.choice}'", file=sys.stderr)
            return 2
        editor.refresh(args.engine)
        options = editor.options(args.engine)
        if not 0 <= index < len(options):
            print(
                f"❌ Option {index} does not exist (0-{len(options) - 1}). "
                f"Run 'speak-mcp-config speakers {args.engine}' to list them.",
                file=sys.stderr,
            )
            return 2
        style_id = editor.select(args.engine, index)
        print(f"Selected: {options[index][0]}" + (f" (id={style_id})" if style_id is not None else ""))

    message = editor.save()
    print(message)
    return 1 if message.startswith("Error") else 0


def parse_args(argv: Optional[Sequence[str]] = None) -> argparse.Namespace:
    """Parse command line arguments."""
    engine_keys = [spec.key for spec in http_specs(BUILTIN_ENGINES)]

    parser = argparse.ArgumentParser(
        prog="speak-mcp-config",
        description="Choose default speakers for the speak-mcp server",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  # List VOICEVOX speakers with their option index
  speak-mcp-config speakers voicevox

  # Use option 4 as the VOICEVOX default
  speak-mcp-config set voicevox 4

  # Store a style id directly (engine may be offline)
  speak-mcp-config set aivis --id 888753760

  # Back to the built-in default
  speak-mcp-config set voicevox auto
        """,
    )
    subparsers = parser.add_subparsers(dest="command", required=True)

    subparsers.add_parser("path", help="Print the config file path")
    subparsers.add_parser("show", help="Print the current config")

    speakers = subparsers.add_parser("speakers", help="List an engine's speakers")
    speakers.add_argument("engine", choices=engine_keys)

    set_cmd = subparsers.add_parser("set", help="Set an engine's default speaker")
    set_cmd.add_argument("engine", choices=engine_keys)
    set_cmd.add_argument("choice", nargs="?", help="Option index from 'speakers', or 'auto'")
    set_cmd.add_argument("--id", type=int, help="Style id to store as-is")

    voice_cmd = subparsers.add_parser("set-voice", help="Set the default macOS voice")
    voice_cmd.add_argument("voice", help="Voice name, or 'auto' for the system default")

    return parser.parse_args(argv)


def main(argv: Optional[Sequence[str]] = None) -> int:
    """Main entry point for the config editor."""
    args = parse_args(argv)
    store = ConfigStore()

    if args.command == "path":
        print(store.path)
        return 0

    editor = ConfigEditor(store)

    if args.command == "show":
        data = editor.config.model_dump(by_alias=True)
        print(f"# {store.path}")
        print(json.dumps(data, indent=2, ensure_ascii=False))
        return 0

    if args.command == "speakers":
        _print_speakers(editor, args.engine)
        return 0

    if args.command == "set":
        try:
            return _cmd_set(editor, args)
        except ValueError as e:
            print(f"❌ {e}", file=sys.stderr)
            return 2

    if args.command == "set-voice":
        editor.set_native_voice(None if args.voice.lower() == "auto" else args.voice)
        message = editor.save()
        print(message)
        return 1 if message.startswith("Error") else 0

    return 2


if __name__ == "__main__":
    sys.exit(main())
