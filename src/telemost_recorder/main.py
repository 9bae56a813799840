"""
Telemost Recorder - CLI Entry Point.

Configuration Priority:
    1. CLI arguments (--duration, --format, --visible, etc.)
    2. Config file (telemost-recorder.yaml / config.yaml)
    3. Environment variables (TELEMOST_RECORDER__PAGE__TIMEOUT_MS, etc.)

Usage:
    telemost-recorder record https://telemost.yandex.ru/j/12345678901234 --duration 60
    telemost-recorder record https://telemost.yandex.ru/j/12345678901234 --until-end --max-duration 5400
    telemost-recorder serve --port 3100
"""

import asyncio
from pathlib import Path
from typing import Any, Dict, Optional

import typer
from rich.console import Console
from rich.panel import Panel

from telemost_recorder import __version__
from telemost_recorder.api.server import run_server
from telemost_recorder.config import load_config
from telemost_recorder.exceptions import ConfigurationError, ValidationError
from telemost_recorder.recorder import RecordingRequest, RecordingResult, TelemostRecorder
from telemost_recorder.utils.files import generate_file_name
from telemost_recorder.utils.logging import setup_logging

app = typer.Typer(
    name="telemost-recorder",
    help="Record the audio of Yandex Telemost meetings",
    add_completion=False,
)

console = Console()


def _load_settings(config: Optional[Path], overrides: Dict[str, Any]):
    try:
        return load_config(config_path=config, **overrides)
    except ConfigurationError as e:
        console.print(f"[red]Configuration error: {e}[/red]")
        raise typer.Exit(1)


def _print_result(result: RecordingResult) -> None:
    if result.success:
        console.print("\n[green]✓ Recording saved[/green]")
        console.print(f"  File: {result.file_path}")
        console.print(f"  Size: {result.file_size} bytes")
        console.print(f"  Duration: {result.duration_seconds}s")
        if result.reason:
            console.print(f"  Stopped because: {result.reason.value}")
    else:
        console.print("\n[red]✗ Recording failed[/red]")
        console.print(f"  Error: {result.error}")


@app.command()
def record(
    url: str = typer.Argument(..., help="Telemost meeting URL"),
    duration: Optional[int] = typer.Option(None, "--duration", "-d", help="Recording length in seconds (10-3600)"),
    until_end: bool = typer.Option(False, "--until-end", help="Record until the meeting ends"),
    max_duration: Optional[int] = typer.Option(None, "--max-duration", help="Ceiling for --until-end in seconds"),
    output: Optional[str] = typer.Option(None, "--output", "-o", help="Output file (default: generated in output_dir)"),
    file_format: Optional[str] = typer.Option(None, "--format", "-f", help="Audio format: webm, mp3, wav"),
    visible: bool = typer.Option(False, "--visible", "-v", help="Run with visible browser"),
    config: Optional[Path] = typer.Option(None, "--config", "-c", help="Path to config file"),
    verbose: bool = typer.Option(False, "--verbose", help="Enable verbose output"),
):
    """
    Join a meeting and record its audio.

    Examples:
        telemost-recorder record https://telemost.yandex.ru/j/123 --duration 120
        telemost-recorder record https://telemost.yandex.ru/j/123 --until-end -o meeting.webm
    """
    overrides: Dict[str, Any] = {}
    if visible:
        overrides["browser"] = {"headless": False}
    settings = _load_settings(config, overrides)

    setup_logging(
        level="DEBUG" if verbose else settings.logging.level,
        log_file=settings.logging.file,
        json_format=settings.logging.json_format,
    )

    file_format = file_format or settings.recording.file_format
    output_path = output or str(Path(settings.recording.output_dir) / generate_file_name(file_format))

    try:
        request = RecordingRequest.from_params(
            meeting_url=url,
            output_path=output_path,
            duration_seconds=None if until_end else (duration or settings.recording.default_duration),
            until_end=until_end,
            max_duration_seconds=max_duration or settings.recording.default_max_duration,
            file_format=file_format,
        )
    except ValidationError as e:
        console.print("[red]Invalid parameters:[/red]")
        for error in e.errors:
            console.print(f"  - {error}")
        raise typer.Exit(1)

    mode = (
        f"until meeting end (max {request.max_duration_seconds}s)"
        if request.until_end
        else f"{request.duration_seconds}s"
    )
    console.print(Panel.fit(
        f"[bold blue]🎙 Telemost Recorder[/bold blue]\n"
        f"[dim]Meeting:[/dim] {request.meeting_url}\n"
        f"[dim]Length:[/dim] {mode}\n"
        f"[dim]Output:[/dim] {request.output_path}",
        border_style="blue",
    ))

    recorder = TelemostRecorder(settings)
    try:
        result = asyncio.run(recorder.record(request))
    except KeyboardInterrupt:
        console.print("[dim]Interrupted[/dim]")
        raise typer.Exit(130)

    _print_result(result)
    if not result.success:
        raise typer.Exit(1)


@app.command()
def serve(
    host: Optional[str] = typer.Option(None, "--host", help="Host to bind to (default: from config)"),
    port: Optional[int] = typer.Option(None, "--port", "-p", help="Port to listen on (default: from config)"),
    config: Optional[Path] = typer.Option(None, "--config", "-c", help="Path to config file"),
    verbose: bool = typer.Option(False, "--verbose", help="Enable verbose output"),
):
    """Run the HTTP API."""
    settings = _load_settings(config, {})
    setup_logging(
        level="DEBUG" if verbose else settings.logging.level,
        log_file=settings.logging.file,
        json_format=settings.logging.json_format,
    )

    console.print(Panel.fit(
        f"[bold blue]🎙 Telemost Recorder API[/bold blue]\n"
        f"[dim]Listening on:[/dim] http://{host or settings.server.host}:{port or settings.server.port}\n"
        f"[dim]Recordings:[/dim] {settings.recording.output_dir}",
        border_style="blue",
    ))

    try:
        run_server(host=host, port=port, settings=settings)
    except KeyboardInterrupt:
        console.print("\n[dim]Server stopped[/dim]")
    except Exception as e:
        console.print(f"[red]✗ Server error: {e}[/red]")
        raise typer.Exit(1)


@app.command("config")
def show_config(
    config: Optional[Path] = typer.Option(None, "--config", "-c", help="Path to config file"),
):
    """Print the effective settings."""
    settings = _load_settings(config, {})
    console.print_json(settings.model_dump_json())


@app.command()
def version():
    """Show version information."""
    console.print(f"[bold]Telemost Recorder[/bold] v{__version__}")


if __name__ == "__main__":
    app()
