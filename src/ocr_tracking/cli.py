"""Command-line interface for ocr_tracking.

Replays recorded OCR observation feeds through the tracker and exposes the
text recovery rules for quick checks.
"""

import logging
from pathlib import Path

import typer
from rich.console import Console
from rich.markup import escape
from rich.table import Table

from . import __version__
from .cache import TranslationCache
from .config import TrackingMode, get_settings, policy_for_mode
from .recovery import clean_text, recover_text
from .replay import ReplayClock, load_frames, load_translations, replay_frames
from .tracker import TextTracker
from .types import TrackedText

app = typer.Typer(
    name="ocr-tracking",
    help="Track OCR text detections across video frames",
    context_settings={"help_option_names": ["-h", "--help"]},
    add_completion=False,
)

console = Console(stderr=True)
output = Console()


def version_callback(value: bool) -> None:
    """Print version and exit if --version flag is provided."""
    if value:
        typer.echo(f"ocr-tracking version {__version__}")
        raise typer.Exit()


def configure_logging(level: str) -> None:
    logging.basicConfig(
        level=level.upper(),
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    )


def build_table(tracked_texts: list[TrackedText]) -> Table:
    """Render the tracked set as a table."""
    table = Table(show_header=True, header_style="bold cyan")
    table.add_column("ID", justify="right", style="dim")
    table.add_column("Text")
    table.add_column("Translation", style="green")
    table.add_column("State", style="yellow")
    table.add_column("Quality", justify="right")
    table.add_column("Shown", justify="center")
    table.add_column("On screen", justify="center")
    table.add_column("Box")

    for tracked in tracked_texts:
        box = tracked.smoothed_box
        table.add_row(
            str(tracked.id),
            escape(tracked.text),
            escape(tracked.translation or "-"),
            tracked.detection_state.value,
            f"{tracked.quality_score:.2f}",
            "yes" if tracked.is_displayable else "no",
            "yes" if tracked.is_on_screen else "no",
            f"{box.x:.2f},{box.y:.2f} {box.width:.2f}x{box.height:.2f}",
        )
    return table


@app.command()
def replay(
    frames_path: Path = typer.Argument(
        ...,
        help="JSONL file with one recorded frame of observations per line",
        exists=True,
        dir_okay=False,
        resolve_path=True,
    ),
    translations_path: Path | None = typer.Option(
        None,
        "--translations",
        "-t",
        help="JSON object mapping source texts to translations",
        exists=True,
        dir_okay=False,
        resolve_path=True,
    ),
    mode: TrackingMode | None = typer.Option(
        None,
        "--mode",
        "-m",
        help="Tracking mode (default: OCR_TRACKING_MODE or standard)",
    ),
    fps: float = typer.Option(
        30.0,
        "--fps",
        help="Frame rate used for frames without timestamps",
        min=0.001,
    ),
    log_level: str = typer.Option(
        "WARNING",
        "--log-level",
        help="Logging level",
    ),
    version: bool | None = typer.Option(
        None,
        "--version",
        callback=version_callback,
        is_eager=True,
        help="Show version and exit",
    ),
) -> None:
    """Replay recorded frames and print the final tracked texts."""
    configure_logging(log_level)
    settings = get_settings()
    policy = policy_for_mode(mode or settings.mode, max_tracked=settings.max_tracked)

    try:
        frames = load_frames(frames_path)
        translations = load_translations(translations_path) if translations_path else None
    except (OSError, ValueError) as e:
        console.print(f"[red]Error:[/red] {escape(str(e))}")
        raise typer.Exit(1) from e

    clock = ReplayClock()
    tracker = TextTracker(
        policy=policy,
        cache=TranslationCache(settings.translation_cache_size),
        clock=clock,
        target_language=settings.target_language,
    )
    count = replay_frames(tracker, clock, frames, translations=translations, fps=fps)

    tracked_texts = tracker.tracked_texts()
    console.print(f"[bold]Replayed {count} frames[/bold] ({policy.mode.value} mode)")
    output.print(build_table(tracked_texts))
    console.print(f"[green]✓[/green] {len(tracked_texts)} tracked, {len(tracker.pending_texts())} pending")


@app.command()
def recover(
    text: str = typer.Argument(..., help="Raw OCR text"),
) -> None:
    """Show the cleaned and recovered forms of an OCR string."""
    cleaned = clean_text(text)
    recovered = recover_text(text)

    output.print(f"Cleaned:   {escape(cleaned) if cleaned is not None else '[dim](rejected)[/dim]'}")
    output.print(f"Recovered: {escape(recovered) if recovered is not None else '[dim](rejected)[/dim]'}")

    if recovered is None:
        raise typer.Exit(1)


if __name__ == "__main__":
    app()
