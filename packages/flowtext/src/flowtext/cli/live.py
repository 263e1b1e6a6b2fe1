"""
Live terminal players for the CLI demo.

Binds each engine to a Rich Live display:
- TypewriterPlayer: re-renders on every TypewriterSnapshot the engine publishes
- RevealPlayer: samples the token timeline at a fixed frame rate, since
  per-token transitions settle between the engine's timer ticks
- StreamPlayer: feeds text to a StreamingTypewriter in chunks, like a
  model response arriving over the network

All of them run on the asyncio loop through AsyncioScheduler and always close
their engine on the way out, so no timer outlives the Live context.
"""

from __future__ import annotations

import asyncio
import logging
import random
from typing import Sequence

from rich.console import Console
from rich.live import Live
from rich.text import Text

from flowtext.config import AnimationConfig, RevealConfig, StreamConfig
from flowtext.render import render_reveal, render_stream, render_typewriter
from flowtext.reveal import StaggeredTokenReveal
from flowtext.scheduler import AsyncioScheduler
from flowtext.streaming import StreamingSnapshot, StreamingTypewriter
from flowtext.tokens import TokenTimeline
from flowtext.typewriter import SequencedTypewriter, TypewriterSnapshot

logger = logging.getLogger(__name__)

REVEAL_FRAMES_PER_SECOND = 30


class TypewriterPlayer:
    """
    Plays a SequencedTypewriter in the terminal.

    Example:
        player = TypewriterPlayer(["Hello", "World"], AnimationConfig())
        final = await player.run()
    """

    def __init__(
        self,
        targets: Sequence[str],
        config: AnimationConfig,
        console: Console | None = None,
        rng: random.Random | None = None,
    ) -> None:
        self.console = console if console is not None else Console()
        self._targets = list(targets)
        self._config = config
        self._rng = rng

    async def run(self, duration: float | None = None) -> TypewriterSnapshot:
        """
        Play until the sequence completes or duration elapses.

        Args:
            duration: Seconds to play before stopping; None waits for
                completion (forever when looping, until Ctrl+C)

        Returns:
            Last snapshot before the engine was closed
        """
        done = asyncio.Event()
        writer = SequencedTypewriter(
            self._targets,
            self._config,
            scheduler=AsyncioScheduler(),
            rng=self._rng,
            on_sequence_complete=done.set,
        )

        with Live(
            Text(),
            console=self.console,
            refresh_per_second=20,
            transient=False,
        ) as live:
            writer.subscribe(
                lambda snap: live.update(render_typewriter(snap, self._config))
            )
            try:
                writer.start()
                try:
                    await asyncio.wait_for(done.wait(), timeout=duration)
                except asyncio.TimeoutError:
                    logger.debug("Typewriter stopped after %.2fs", duration)
                final = writer.snapshot
            finally:
                writer.close()
            live.update(Text(final.text))

        return final


class RevealPlayer:
    """
    Plays a StaggeredTokenReveal in the terminal.

    Example:
        player = RevealPlayer(RevealConfig(tokens_per_second=30))
        timeline = await player.run("Reading the search results")
    """

    def __init__(self, config: RevealConfig, console: Console | None = None) -> None:
        self.console = console if console is not None else Console()
        self._config = config

    async def run(self, text: str) -> TokenTimeline:
        """
        Play the reveal until the last token settles.

        Args:
            text: Block of text to reveal

        Returns:
            The timeline that was played
        """
        done = asyncio.Event()
        scheduler = AsyncioScheduler()
        reveal = StaggeredTokenReveal(
            self._config, scheduler=scheduler, on_complete=done.set
        )
        frame_interval = 1.0 / REVEAL_FRAMES_PER_SECOND

        with Live(
            Text(),
            console=self.console,
            refresh_per_second=REVEAL_FRAMES_PER_SECOND,
            transient=False,
        ) as live:
            try:
                timeline = reveal.reveal(text)
                while not done.is_set():
                    elapsed = scheduler.now() - reveal.started_at
                    live.update(render_reveal(timeline, elapsed))
                    try:
                        await asyncio.wait_for(done.wait(), timeout=frame_interval)
                    except asyncio.TimeoutError:
                        pass  # Next frame
            finally:
                reveal.close()
            live.update(render_reveal(timeline, timeline.total_duration))

        return timeline


class StreamPlayer:
    """
    Plays a StreamingTypewriter against a simulated producer.

    The producer appends chunk_size characters every chunk_interval seconds.
    When it runs out, the player either snaps to the full text (snap=True,
    as a finished generation would) or lets the display catch up first.

    Example:
        player = StreamPlayer(StreamConfig(), chunk_size=40, chunk_interval=0.05)
        final = await player.run(long_text)
    """

    def __init__(
        self,
        config: StreamConfig,
        console: Console | None = None,
        chunk_size: int = 40,
        chunk_interval: float = 0.05,
        snap: bool = False,
    ) -> None:
        self.console = console if console is not None else Console()
        self._config = config
        self._chunk_size = max(1, chunk_size)
        self._chunk_interval = max(0.0, chunk_interval)
        self._snap = snap

    async def run(self, text: str) -> StreamingSnapshot:
        """
        Stream text into the display until it has all been shown.

        Args:
            text: Full text the simulated producer will send

        Returns:
            Final snapshot
        """
        caught_up = asyncio.Event()
        writer = StreamingTypewriter(self._config, scheduler=AsyncioScheduler())

        def on_snapshot(snap: StreamingSnapshot) -> None:
            live.update(render_stream(snap))
            if snap.caught_up:
                caught_up.set()

        with Live(
            Text(),
            console=self.console,
            refresh_per_second=30,
            transient=False,
        ) as live:
            writer.subscribe(on_snapshot)
            try:
                for end in range(self._chunk_size, len(text), self._chunk_size):
                    writer.set_target(text[:end])
                    await asyncio.sleep(self._chunk_interval)
                if not self._snap:
                    writer.set_target(text)
                    caught_up.clear()
                    if not writer.snapshot.caught_up:
                        await caught_up.wait()
                writer.set_target(text, streaming=False)
                final = writer.snapshot
            finally:
                writer.close()
            live.update(Text(final.text))

        return final
