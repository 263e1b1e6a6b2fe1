"""flowtext CLI - terminal demos for the text reveal engines."""

import asyncio
import logging
import random

import typer
from rich.console import Console

from flowtext.cli.live import RevealPlayer, StreamPlayer, TypewriterPlayer
from flowtext.config import (
    AnimationConfig,
    FlowTextSettings,
    RevealConfig,
    StreamConfig,
)

app = typer.Typer(
    name="flowtext",
    help="Simulated live text generation in the terminal",
    no_args_is_help=True,
)


@app.callback()
def configure_logging(
    verbose: bool = typer.Option(
        False, "--verbose", "-v", help="Log engine events at DEBUG level"
    ),
) -> None:
    """Simulated live text generation in the terminal."""
    level = "DEBUG" if verbose else FlowTextSettings().log_level
    logging.basicConfig(
        level=getattr(logging, level.upper(), logging.WARNING),
        format="%(asctime)s | %(name)-20s | %(levelname)-8s | %(message)s",
    )


@app.command("type")
def type_text(
    text: list[str] = typer.Argument(..., help="One or more strings to type in turn"),
    typing_speed: float = typer.Option(
        None, "--typing-speed", help="Milliseconds per typed character"
    ),
    deleting_speed: float = typer.Option(
        None, "--deleting-speed", help="Milliseconds per deleted character"
    ),
    pause: float = typer.Option(
        None, "--pause", help="Milliseconds to hold each finished string"
    ),
    initial_delay: float = typer.Option(
        None, "--initial-delay", help="Milliseconds before the first character"
    ),
    loop: bool = typer.Option(False, "--loop", help="Cycle through the strings forever"),
    no_cursor: bool = typer.Option(False, "--no-cursor", help="Hide the blinking cursor"),
    cursor: str = typer.Option(None, "--cursor", help="Cursor character"),
    duration: float = typer.Option(
        None, "--duration", "-d", help="Stop after this many seconds"
    ),
    seed: int = typer.Option(None, "--seed", help="Seed for timing jitter"),
) -> None:
    """Type, pause on and delete each string in turn.

    Examples:
        flowtext type "New Chat" "Trip planning"
        flowtext type "Ask me anything..." --loop --duration 10
    """
    console = Console()
    config = AnimationConfig.from_settings(
        FlowTextSettings(),
        typing_speed=typing_speed,
        deleting_speed=deleting_speed,
        pause_duration=pause,
        initial_delay=initial_delay,
        loop=loop,
        show_cursor=False if no_cursor else None,
        cursor_character=cursor,
    )
    rng = random.Random(seed) if seed is not None else None
    player = TypewriterPlayer(text, config, console=console, rng=rng)

    try:
        asyncio.run(player.run(duration=duration))
    except KeyboardInterrupt:
        console.print("\n[yellow]Interrupted[/yellow]")
        raise typer.Exit(1)


@app.command("reveal")
def reveal_text(
    text: str = typer.Argument(..., help="Block of text to reveal"),
    tps: float = typer.Option(None, "--tps", help="Base reveal rate in tokens per second"),
) -> None:
    """Reveal a block of text word by word.

    Examples:
        flowtext reveal "Searching the web for recent results" --tps 30
    """
    console = Console()
    config = RevealConfig.from_settings(FlowTextSettings(), tokens_per_second=tps)
    player = RevealPlayer(config, console=console)

    try:
        timeline = asyncio.run(player.run(text))
    except KeyboardInterrupt:
        console.print("\n[yellow]Interrupted[/yellow]")
        raise typer.Exit(1)

    if not timeline.cues:
        console.print("[dim]Nothing to reveal[/dim]")


@app.command("stream")
def stream_text(
    text: str = typer.Argument(..., help="Text the simulated producer sends"),
    chunk: int = typer.Option(40, "--chunk", help="Characters per producer chunk"),
    chunk_interval: float = typer.Option(
        0.05, "--chunk-interval", help="Seconds between producer chunks"
    ),
    frame_interval: float = typer.Option(
        None, "--frame-interval", help="Minimum seconds between display updates"
    ),
    snap: bool = typer.Option(
        False, "--snap", help="Show the full text as soon as the producer finishes"
    ),
) -> None:
    """Stream text in chunks and let the display catch up adaptively.

    Examples:
        flowtext stream "$(cat README.md)" --chunk 200 --chunk-interval 0.02
    """
    console = Console()
    config = StreamConfig.from_settings(
        FlowTextSettings(), frame_interval=frame_interval
    )
    player = StreamPlayer(
        config,
        console=console,
        chunk_size=chunk,
        chunk_interval=chunk_interval,
        snap=snap,
    )

    try:
        final = asyncio.run(player.run(text))
    except KeyboardInterrupt:
        console.print("\n[yellow]Interrupted[/yellow]")
        raise typer.Exit(1)

    if not final.text:
        console.print("[dim]Nothing to stream[/dim]")


def main() -> None:
    """Entry point for the CLI."""
    app()


if __name__ == "__main__":
    main()
