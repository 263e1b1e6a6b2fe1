"""
Tokenization and timeline math for the staggered token reveal.

This module provides:
- tokenize(): Split text into word-plus-trailing-whitespace tokens
- effective_rate() / stagger_interval(): Adaptive reveal pacing
- TokenTimeline: Declarative per-token schedule with transition sampling

The schedule is fully known up front and never branches, so everything
here is pure. StaggeredTokenReveal in flowtext.reveal drives it in time.

Adaptive rate (n tokens, base rate r):
    n > 50  -> r * 1.5   (long content reveals faster so it doesn't drag)
    n < 10  -> r * 0.8   (short content reveals slower so it stays visible)
    else    -> r
"""

from __future__ import annotations

import re
from dataclasses import dataclass

# One run of non-whitespace plus the whitespace that follows it
TOKEN_PATTERN = re.compile(r"\S+\s*")
LEADING_WHITESPACE = re.compile(r"\s*")

LONG_CONTENT_TOKENS = 50
SHORT_CONTENT_TOKENS = 10
LONG_CONTENT_FACTOR = 1.5
SHORT_CONTENT_FACTOR = 0.8

# Per-token settle animation
TOKEN_TRANSITION_SECONDS = 0.2
HIDDEN_OFFSET = 5.0


def tokenize(text: str) -> tuple[str, ...]:
    """
    Split text into reveal tokens.

    Each token is a run of non-whitespace characters followed by any
    trailing whitespace. Whitespace before the first word is attached to
    the first token, so "".join(tokenize(text)) == text whenever text has
    any non-whitespace character. Empty or blank text yields no tokens.

    Args:
        text: Block of text to reveal

    Returns:
        Tokens in left-to-right order
    """
    tokens = TOKEN_PATTERN.findall(text)
    if not tokens:
        return ()
    lead = LEADING_WHITESPACE.match(text).group()
    if lead:
        tokens[0] = lead + tokens[0]
    return tuple(tokens)


def effective_rate(token_count: int, tokens_per_second: float) -> float:
    """Apply the content-length adjustment to a base reveal rate."""
    if token_count > LONG_CONTENT_TOKENS:
        return tokens_per_second * LONG_CONTENT_FACTOR
    if token_count < SHORT_CONTENT_TOKENS:
        return tokens_per_second * SHORT_CONTENT_FACTOR
    return tokens_per_second


def stagger_interval(token_count: int, tokens_per_second: float) -> float:
    """
    Seconds between the starts of successive tokens.

    A non-positive rate means no stagger: every token starts at once.
    """
    rate = effective_rate(token_count, tokens_per_second)
    if rate <= 0:
        return 0.0
    return 1.0 / rate


def ease_out(progress: float) -> float:
    """Quadratic ease-out on [0, 1]."""
    p = min(1.0, max(0.0, progress))
    return 1.0 - (1.0 - p) ** 2


@dataclass(frozen=True)
class TokenCue:
    """
    Schedule entry for one token.

    Attributes:
        index: Position in the token stream
        text: Token text, trailing whitespace included
        start: Seconds after timeline start when the transition begins
        duration: Length of the token's own transition in seconds
    """

    index: int
    text: str
    start: float
    duration: float

    @property
    def end(self) -> float:
        return self.start + self.duration


@dataclass(frozen=True)
class TokenFrame:
    """
    Render state of one token at an instant.

    Attributes:
        text: Token text
        opacity: 0.0 (hidden) to 1.0 (settled)
        offset: Vertical offset, HIDDEN_OFFSET (hidden) to 0.0 (settled)
    """

    text: str
    opacity: float
    offset: float


@dataclass(frozen=True)
class TokenTimeline:
    """
    Complete reveal schedule for one block of text.

    Attributes:
        cues: One TokenCue per token, in order
        stagger_interval: Seconds between successive token starts
        transition_duration: Per-token transition length in seconds
    """

    cues: tuple[TokenCue, ...]
    stagger_interval: float
    transition_duration: float

    @property
    def tokens(self) -> tuple[str, ...]:
        return tuple(cue.text for cue in self.cues)

    @property
    def text(self) -> str:
        return "".join(self.tokens)

    @property
    def total_duration(self) -> float:
        """Seconds until the last token has settled (0 with no tokens)."""
        if not self.cues:
            return 0.0
        return self.cues[-1].end

    def started_count_at(self, elapsed: float) -> int:
        """Number of tokens whose transition has begun."""
        return sum(1 for cue in self.cues if cue.start <= elapsed)

    def visible_text_at(self, elapsed: float) -> str:
        return "".join(cue.text for cue in self.cues if cue.start <= elapsed)

    def is_complete_at(self, elapsed: float) -> bool:
        return elapsed >= self.total_duration

    def frames_at(self, elapsed: float) -> list[TokenFrame]:
        """
        Sample every token's transition at a point in the timeline.

        Args:
            elapsed: Seconds since the timeline started

        Returns:
            One TokenFrame per token, in order
        """
        frames = []
        for cue in self.cues:
            if elapsed < cue.start:
                eased = 0.0
            elif cue.duration <= 0:
                eased = 1.0
            else:
                eased = ease_out((elapsed - cue.start) / cue.duration)
            frames.append(
                TokenFrame(
                    text=cue.text,
                    opacity=eased,
                    offset=HIDDEN_OFFSET * (1.0 - eased),
                )
            )
        return frames


def build_timeline(
    text: str,
    tokens_per_second: float = 20.0,
    transition_duration: float = TOKEN_TRANSITION_SECONDS,
) -> TokenTimeline:
    """
    Tokenize text and compute every token's start offset.

    Args:
        text: Block of text to reveal
        tokens_per_second: Requested base rate before adjustment
        transition_duration: Per-token settle time in seconds

    Returns:
        TokenTimeline; token i starts at i * stagger_interval

    Example:
        timeline = build_timeline("a b c", tokens_per_second=20)
        timeline.tokens              # ("a ", "b ", "c")
        timeline.stagger_interval    # 0.0625 (3 tokens -> 20 * 0.8)
        timeline.cues[2].start       # 0.125
    """
    tokens = tokenize(text)
    interval = stagger_interval(len(tokens), tokens_per_second)
    duration = max(0.0, transition_duration)
    cues = tuple(
        TokenCue(index=i, text=token, start=i * interval, duration=duration)
        for i, token in enumerate(tokens)
    )
    return TokenTimeline(
        cues=cues, stagger_interval=interval, transition_duration=duration
    )
