"""
Rich renderables for engine snapshots.

Used by the CLI demo; any other presentation layer can bind to the engine
snapshots directly. Token opacity is approximated with three text styles
since terminals have no alpha channel.
"""

from rich.text import Text

from flowtext.config import AnimationConfig
from flowtext.streaming import StreamingSnapshot
from flowtext.tokens import TokenTimeline
from flowtext.typewriter import TypewriterSnapshot


def render_typewriter(
    snapshot: TypewriterSnapshot,
    config: AnimationConfig,
    style: str = "",
    cursor_style: str = "bold",
) -> Text:
    """
    Render typed text followed by the cursor.

    A hidden cursor is drawn as blank space of the same width so the line
    doesn't jitter while blinking.

    Args:
        snapshot: Typewriter snapshot to draw
        config: Config supplying the cursor settings
        style: Style for the typed text
        cursor_style: Style for the cursor glyph

    Returns:
        Rich Text
    """
    text = Text(snapshot.text, style=style)
    if config.show_cursor:
        if snapshot.cursor_visible:
            text.append(config.cursor_character, style=cursor_style)
        else:
            text.append(" " * len(config.cursor_character))
    return text


def _opacity_style(opacity: float) -> str | None:
    if opacity <= 0.0:
        return None
    if opacity < 0.5:
        return "dim"
    if opacity < 1.0:
        return "default"
    return ""


def render_reveal(timeline: TokenTimeline, elapsed: float) -> Text:
    """
    Render a token timeline at a point in time.

    Tokens that haven't started are omitted; tokens mid-transition are
    dimmed; settled tokens are drawn plain.

    Args:
        timeline: Timeline being played
        elapsed: Seconds since the timeline started

    Returns:
        Rich Text
    """
    text = Text()
    for frame in timeline.frames_at(elapsed):
        style = _opacity_style(frame.opacity)
        if style is None:
            continue
        text.append(frame.text, style=style)
    return text


def render_stream(snapshot: StreamingSnapshot, cursor: str = "▍") -> Text:
    """Render streamed text with a dim cursor while it is still arriving."""
    text = Text(snapshot.text)
    if snapshot.streaming or not snapshot.caught_up:
        text.append(cursor, style="dim")
    return text
