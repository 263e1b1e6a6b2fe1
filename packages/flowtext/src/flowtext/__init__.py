"""
Timed text reveal engines for simulated live text generation.

This package provides:
- SequencedTypewriter: Types, pauses on and deletes a list of strings,
  optionally looping, with a blinking cursor
- StaggeredTokenReveal: Reveals a block of text word by word, once
- StreamingTypewriter: Catches the display up with text still arriving
- AnimationConfig, RevealConfig, StreamConfig, FlowTextSettings: Timing
  configuration
- AsyncioScheduler, ManualScheduler: Timer sources (real and virtual time)
- tokenize, build_timeline, TokenTimeline: Pure reveal schedule math
- step, SequenceState, Phase: Pure typewriter phase machine
"""

from flowtext.config import (
    AnimationConfig,
    FlowTextSettings,
    RevealConfig,
    StreamConfig,
)
from flowtext.exceptions import EngineClosedError
from flowtext.phases import Effect, Phase, SequenceState, Transition, step
from flowtext.reveal import RevealSnapshot, StaggeredTokenReveal
from flowtext.scheduler import (
    AsyncioScheduler,
    ManualScheduler,
    SchedulerProtocol,
    TimerHandle,
)
from flowtext.streaming import StreamingSnapshot, StreamingTypewriter, chunk_size
from flowtext.tokens import (
    TokenCue,
    TokenFrame,
    TokenTimeline,
    build_timeline,
    stagger_interval,
    tokenize,
)
from flowtext.typewriter import CursorBlink, SequencedTypewriter, TypewriterSnapshot

__all__ = [
    # Engines
    "SequencedTypewriter",
    "StaggeredTokenReveal",
    "StreamingTypewriter",
    "CursorBlink",
    # Snapshots
    "TypewriterSnapshot",
    "RevealSnapshot",
    "StreamingSnapshot",
    # Configuration
    "AnimationConfig",
    "RevealConfig",
    "StreamConfig",
    "FlowTextSettings",
    # Scheduling
    "SchedulerProtocol",
    "TimerHandle",
    "AsyncioScheduler",
    "ManualScheduler",
    # Phase machine
    "Phase",
    "Effect",
    "SequenceState",
    "Transition",
    "step",
    # Token timeline
    "TokenCue",
    "TokenFrame",
    "TokenTimeline",
    "build_timeline",
    "stagger_interval",
    "tokenize",
    # Streaming catch-up
    "chunk_size",
    # Errors
    "EngineClosedError",
]
