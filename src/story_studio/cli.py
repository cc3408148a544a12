"""
CLI Entry Point — command-line interface for the story pipeline.

Provides a user-friendly CLI with Rich console output.

Usage:
    story-studio run --project tales --title "The Lighthouse" --template "Fairy tale"
    story-studio setup                      # Show configuration status
    story-studio config set api_key KEY     # Save a setting
    story-studio templates --file prompts.json
    story-studio history                    # List past runs
    story-studio voices --filter en-US      # List narration voices
    story-studio serve                      # Start FastAPI server
"""

from __future__ import annotations

import argparse
import logging
import shutil
import sys
from pathlib import Path
from typing import TYPE_CHECKING

from rich.console import Console
from rich.table import Table

from story_studio import __version__
from story_studio.domain.exceptions import PipelineError
from story_studio.domain.value_objects import SettingKey

if TYPE_CHECKING:
    from story_studio.core.container import Container
    from story_studio.infrastructure.adapters.json_store import JsonSettingsStore

console = Console()


def main(argv: list[str] | None = None) -> int:
    """Main CLI entry point.

    Args:
        argv: Command-line arguments (defaults to sys.argv).

    Returns:
        Exit code (0 = success, 1 = failure).
    """
    parser = argparse.ArgumentParser(
        prog="story-studio",
        description="📖 Story Studio — multi-part story, description and narration generator",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  story-studio config set api_key YOUR_GEMINI_KEY
  story-studio config set tts_path /usr/local/bin/edge-tts
  story-studio run --project tales --title "The Lighthouse" --template-file prompt.txt
        """,
    )
    parser.add_argument("--version", action="version", version=f"%(prog)s {__version__}")
    parser.add_argument("-v", "--verbose", action="store_true", help="Enable debug logging")
    parser.add_argument(
        "--env-file",
        default=".env",
        help="Path to environment file (default: .env)",
    )

    subparsers = parser.add_subparsers(dest="command", help="Available commands")

    # Run command
    run_parser = subparsers.add_parser("run", help="Generate a story, description and narration")
    run_parser.add_argument("--project", required=True, help="Project name (folder prefix)")
    run_parser.add_argument("--title", required=True, help="Story title")
    source = run_parser.add_mutually_exclusive_group()
    source.add_argument("--template", help="Template name from the prompt file")
    source.add_argument("--template-file", help="Plain-text file holding the prompt template")
    run_parser.add_argument("--prompts", help="Prompt JSON file (remembered for later runs)")
    run_parser.add_argument("--voice", help="Narration voice (default: last used)")
    run_parser.add_argument("--language", help="Story language (default: last used)")
    run_parser.add_argument("--model", help="Gemini model (default: last used)")
    run_parser.add_argument("--output-dir", help="Output directory (default: last used)")
    run_parser.add_argument(
        "--no-open",
        action="store_true",
        help="Do not open the project folder when done",
    )

    # Setup command
    subparsers.add_parser("setup", help="Show configuration status")

    # Config command
    config_parser = subparsers.add_parser("config", help="Read or change saved settings")
    config_sub = config_parser.add_subparsers(dest="action", required=True)
    config_sub.add_parser("list", help="Show all saved settings")
    get_parser = config_sub.add_parser("get", help="Show one setting")
    get_parser.add_argument("key", help="Setting name (e.g. apiKey or api_key)")
    set_parser = config_sub.add_parser("set", help="Save one setting")
    set_parser.add_argument("key", help="Setting name")
    set_parser.add_argument("value", help="New value")
    unset_parser = config_sub.add_parser("unset", help="Remove one setting")
    unset_parser.add_argument("key", help="Setting name")

    # Templates command
    templates_parser = subparsers.add_parser("templates", help="List prompt templates")
    templates_parser.add_argument("--file", help="Prompt JSON file to load and remember")

    # History command
    history_parser = subparsers.add_parser("history", help="List past runs")
    history_parser.add_argument("--open", type=int, metavar="N", help="Open folder of entry N")
    history_parser.add_argument("--clear", action="store_true", help="Forget all past runs")

    # Voices command
    voices_parser = subparsers.add_parser("voices", help="List edge-tts voices")
    voices_parser.add_argument("--filter", default="", help="Only voices containing this text")

    # Serve command (FastAPI)
    serve_parser = subparsers.add_parser("serve", help="Start the FastAPI REST API")
    serve_parser.add_argument(
        "--port",
        type=int,
        default=8000,
        help="Server port (default: 8000)",
    )
    serve_parser.add_argument(
        "--host",
        default="127.0.0.1",
        help="Server host (default: 127.0.0.1)",
    )

    args = parser.parse_args(argv)

    if args.command is None:
        parser.print_help()
        return 0

    container = _build_container(args.env_file, verbose=args.verbose)

    if args.command == "run":
        return _cmd_run(container, args)
    elif args.command == "setup":
        return _cmd_setup(container)
    elif args.command == "config":
        return _cmd_config(container, args)
    elif args.command == "templates":
        return _cmd_templates(container, args.file)
    elif args.command == "history":
        return _cmd_history(container, open_index=args.open, clear=args.clear)
    elif args.command == "voices":
        return _cmd_voices(container, args.filter)
    elif args.command == "serve":
        return _cmd_serve(host=args.host, port=args.port, env_file=args.env_file)

    return 0


def _build_container(env_file: str, *, verbose: bool = False) -> Container:
    from story_studio.core.config import Settings
    from story_studio.core.container import Container
    from story_studio.core.logging import setup_logging

    settings = Settings(_env_file=env_file)
    setup_logging(
        level=logging.DEBUG if verbose else logging.INFO,
        log_file=settings.log_file or None,
    )
    return Container(settings)


def _cmd_run(container: Container, args: argparse.Namespace) -> int:
    """Run the pipeline for one request."""
    from story_studio.application.dto import GenerationRequest

    store = container.settings_store()
    settings = container.settings

    try:
        template = _resolve_template(store, args)
    except PipelineError as e:
        console.print(f"[red]❌ {e}[/red]")
        return 1

    if args.model and args.model not in settings.gemini.models:
        console.print(
            f"[yellow]⚠️  Unknown model '{args.model}' "
            f"(known: {', '.join(settings.gemini.models)})[/yellow]"
        )

    remembered = {
        SettingKey.OUTPUT_DIR: args.output_dir,
        SettingKey.LAST_VOICE: args.voice,
        SettingKey.LAST_LANGUAGE: args.language,
        SettingKey.LAST_MODEL: args.model,
    }
    for key, value in remembered.items():
        if value:
            store.set(key, value)

    request = GenerationRequest(
        project_name=args.project,
        template=template,
        title=args.title,
        output_dir=args.output_dir or store.get(SettingKey.OUTPUT_DIR) or "",
        voice=args.voice or store.get(SettingKey.LAST_VOICE) or "",
        language=args.language or store.get(SettingKey.LAST_LANGUAGE) or "",
        model=args.model or store.get(SettingKey.LAST_MODEL) or settings.gemini.default_model,
    )

    pipeline = container.pipeline(reveal_output=False if args.no_open else None)
    result = pipeline.run(request)

    if result.success:
        console.print("\n[green]✅ Generation completed successfully![/green]")
        console.print(f"   📁 Folder: {result.project_dir}")
        console.print(f"   📝 Parts: {result.parts}")
        console.print(f"   ⏱️  Total time: {result.total_duration_seconds:.1f}s")
        return 0

    console.print(f"\n[red]❌ {result.error_kind or 'Error'}: {result.error}[/red]")
    if result.project_dir:
        console.print(f"   Partial output left in: {result.project_dir}")
    return 1


def _resolve_template(store: JsonSettingsStore, args: argparse.Namespace) -> str:
    """Pick the prompt template: explicit file, named entry, or the first entry."""
    from story_studio.domain.exceptions import ConfigurationError
    from story_studio.infrastructure.adapters.prompt_library import PromptLibrary

    if args.template_file:
        try:
            return Path(args.template_file).expanduser().read_text(encoding="utf-8")
        except OSError as e:
            raise ConfigurationError(f"Cannot read template file: {e}", cause=e) from e

    prompts_path = args.prompts or store.get(SettingKey.PROMPT_PATH)
    if not prompts_path:
        if args.template:
            raise ConfigurationError("No prompt file configured; pass --prompts PATH.")
        return ""

    library = PromptLibrary.load(prompts_path)
    if args.prompts:
        store.set(SettingKey.PROMPT_PATH, str(library.path))
    if args.template:
        return library.get(args.template)
    if not library.names():
        return ""
    first = library.names()[0]
    logging.getLogger(__name__).info("📚 Using template '%s'", first)
    return library.get(first)


def _cmd_setup(container: Container) -> int:
    """Validate configuration and print status."""
    store = container.settings_store()
    settings = container.settings

    api_key = store.get(SettingKey.API_KEY)
    tts_path = store.get(SettingKey.TTS_PATH)
    detected = shutil.which("edge-tts")

    table = Table(title="🔧 Configuration Status")
    table.add_column("Setting", style="cyan")
    table.add_column("Status", style="green")

    table.add_row("Settings file", str(store.path))
    table.add_row("Gemini API key", "✅" if api_key else "❌ Not set")
    if tts_path:
        exists = Path(tts_path).exists() or shutil.which(tts_path)
        table.add_row("edge-tts path", f"✅ {tts_path}" if exists else f"⚠️  {tts_path} (not found)")
    else:
        hint = f" (found on PATH: {detected})" if detected else ""
        table.add_row("edge-tts path", f"❌ Not set{hint}")
    table.add_row("Output folder", store.get(SettingKey.OUTPUT_DIR) or "⚠️  Not set")
    table.add_row("Prompt file", store.get(SettingKey.PROMPT_PATH) or "⚠️  Not set")
    table.add_row("Model", store.get(SettingKey.LAST_MODEL) or settings.gemini.default_model)
    table.add_row("Known models", ", ".join(settings.gemini.models))
    table.add_row("Voice", store.get(SettingKey.LAST_VOICE) or settings.narration.default_voice)
    table.add_row("Max parts", str(settings.pipeline.max_parts))
    table.add_row("Part delay", f"{settings.pipeline.part_delay_seconds:.1f}s")
    table.add_row("History entries", str(len(container.history().list())))

    console.print(table)

    if api_key and tts_path:
        console.print("\n✅ Configuration validated!")
        return 0
    console.print("\n⚠️  Set the missing values with 'story-studio config set'.")
    return 1


def _cmd_config(container: Container, args: argparse.Namespace) -> int:
    """List, read, write or remove saved settings."""
    store = container.settings_store()

    if args.action == "list":
        table = Table(title="⚙️  Saved Settings")
        table.add_column("Key", style="cyan")
        table.add_column("Value")
        for key in SettingKey:
            if key is SettingKey.HISTORY:
                continue
            table.add_row(key.value, _display_value(key, store.get(key)))
        console.print(table)
        return 0

    try:
        key = SettingKey.from_str(args.key)
    except ValueError as e:
        console.print(f"[red]❌ {e}[/red]")
        return 1
    if key is SettingKey.HISTORY:
        console.print("[red]❌ Use 'story-studio history' to manage history.[/red]")
        return 1

    if args.action == "get":
        value = store.get(key)
        if value is None:
            console.print(f"{key.value} is not set")
            return 1
        console.print(_display_value(key, value))
    elif args.action == "set":
        store.set(key, args.value)
        console.print(f"✅ {key.value} saved")
    elif args.action == "unset":
        store.set(key, None)
        console.print(f"🗑️  {key.value} removed")
    return 0


def _display_value(key: SettingKey, value: object) -> str:
    if value is None or value == "":
        return "—"
    text = str(value)
    if key.is_secret:
        return f"{text[:4]}…{text[-2:]}" if len(text) > 8 else "****"
    return text


def _cmd_templates(container: Container, file: str | None) -> int:
    """List templates from the remembered (or given) prompt file."""
    from story_studio.infrastructure.adapters.prompt_library import PromptLibrary

    store = container.settings_store()
    path = file or store.get(SettingKey.PROMPT_PATH)
    if not path:
        console.print("ℹ️  No prompt file configured. Use --file PATH.")
        return 1

    try:
        library = PromptLibrary.load(path)
    except PipelineError as e:
        console.print(f"[red]❌ {e}[/red]")
        return 1
    if file:
        store.set(SettingKey.PROMPT_PATH, str(library.path))

    table = Table(title=f"📚 Templates ({library.path.name})")
    table.add_column("Name", style="cyan")
    table.add_column("Preview")
    for name in library.names():
        preview = " ".join(library.get(name).split())
        table.add_row(name, preview[:70] + ("…" if len(preview) > 70 else ""))
    console.print(table)
    return 0


def _cmd_history(container: Container, *, open_index: int | None, clear: bool) -> int:
    """Show past runs, open one, or clear them."""
    history = container.history()

    if clear:
        history.clear()
        console.print("🗑️  History cleared")
        return 0

    entries = history.list()
    if not entries:
        console.print("ℹ️  History is empty.")
        return 0

    if open_index is not None:
        if not 1 <= open_index <= len(entries):
            console.print(f"[red]❌ No history entry #{open_index}[/red]")
            return 1
        try:
            container.revealer().reveal(entries[open_index - 1].path)
        except OSError as e:
            console.print(f"[red]❌ Cannot open folder: {e}[/red]")
            return 1
        return 0

    table = Table(title="🗂️  Generation History")
    table.add_column("#", justify="right")
    table.add_column("Title", style="cyan")
    table.add_column("Project")
    table.add_column("Completed")
    table.add_column("Folder")
    for i, entry in enumerate(entries, 1):
        table.add_row(str(i), entry.title, entry.project_name, entry.timestamp[:19], str(entry.path))
    console.print(table)
    return 0


def _cmd_voices(container: Container, text_filter: str) -> int:
    """List narration voices available to edge-tts."""
    try:
        voices = container.synthesizer().list_voices()
    except PipelineError as e:
        console.print(f"[red]❌ {e}[/red]")
        return 1

    needle = text_filter.lower()
    matching = [v for v in voices if needle in v.lower()]
    for voice in matching:
        console.print(voice)
    console.print(f"\n🔊 {len(matching)} voices")
    return 0


def _cmd_serve(host: str, port: int, env_file: str) -> int:
    """Start the FastAPI REST API server."""
    try:
        import uvicorn

        from story_studio.presentation.api import create_app
    except ImportError:
        print("❌ FastAPI/uvicorn not installed. Run: pip install 'story-studio[api]'")
        return 1

    app = create_app(env_file=env_file)
    print(f"🚀 Starting Story Studio API on http://{host}:{port}")
    print(f"   📖 Docs: http://{host}:{port}/docs")
    uvicorn.run(app, host=host, port=port)
    return 0


if __name__ == "__main__":
    sys.exit(main())
