"""
Typewriter phase state machine.

This module holds the pure part of SequencedTypewriter:
- Phase: tagged state of the machine
- SequenceState: immutable (phase, sequence_index, current_text) value
- Transition: result of one tick (new state, delay before next tick, effects)
- step(): pure transition function

Phase edges:
    initial  -> typing                      (after initial_delay)
    typing   -> typing                      (append one char, jittered delay)
    typing   -> pausing                     (target fully typed, no delay)
    pausing  -> done                        (last string, not looping)
    pausing  -> deleting                    (after pause_duration)
    deleting -> deleting                    (drop one char, jittered delay)
    deleting -> typing                      (next string or wrap when looping)
    deleting -> done                        (list exhausted, not looping)

step() never touches a clock. The only impure input is the random source
used for jitter, which callers inject.
"""

from __future__ import annotations

import random
from dataclasses import dataclass, replace
from enum import Enum
from typing import Sequence

from flowtext.config import AnimationConfig


class Phase(str, Enum):
    """Typewriter phases."""

    INITIAL = "initial"
    TYPING = "typing"
    PAUSING = "pausing"
    DELETING = "deleting"
    DONE = "done"
    """Terminal: the sequence completed and no further tick is scheduled."""


class Effect(str, Enum):
    """Observable side effects requested by a transition."""

    TEXT_CHANGED = "text_changed"
    SEQUENCE_COMPLETE = "sequence_complete"


@dataclass(frozen=True)
class SequenceState:
    """
    Position of a typewriter run.

    Attributes:
        phase: Current phase
        sequence_index: Index of the active target string
        current_text: Prefix of the active target currently displayed
    """

    phase: Phase = Phase.INITIAL
    sequence_index: int = 0
    current_text: str = ""


@dataclass(frozen=True)
class Transition:
    """
    Outcome of one tick.

    Attributes:
        state: State after the tick
        delay: Milliseconds before the next tick, or None to stop
        effects: Side effects the driver must perform, in order
    """

    state: SequenceState
    delay: float | None
    effects: tuple[Effect, ...] = ()


def jittered_delay(base: float, ratio: float, rng: random.Random) -> float:
    """
    Perturb a base delay uniformly within base +/- base * ratio / 2.

    Args:
        base: Delay before jitter
        ratio: Total jitter width as a fraction of base
        rng: Random source

    Returns:
        Jittered delay, never negative
    """
    return max(0.0, base + (rng.random() - 0.5) * base * ratio)


def step(
    state: SequenceState,
    targets: Sequence[str],
    config: AnimationConfig,
    rng: random.Random,
) -> Transition:
    """
    Advance the phase machine by one tick.

    Args:
        state: Current state
        targets: Target strings, cycled in order
        config: Timing configuration
        rng: Random source for jitter

    Returns:
        Transition with the next state, the delay until the next tick
        (None when the run is over) and effects to publish
    """
    if state.phase == Phase.DONE or not targets:
        return Transition(state, None)

    target = targets[state.sequence_index]
    current = state.current_text

    if state.phase == Phase.INITIAL:
        return Transition(replace(state, phase=Phase.TYPING), config.initial_delay)

    if state.phase == Phase.TYPING:
        if len(current) < len(target):
            next_char = target[len(current)]
            delay = jittered_delay(
                config.typing_delay_for(next_char), config.typing_jitter, rng
            )
            return Transition(
                replace(state, current_text=current + next_char),
                delay,
                (Effect.TEXT_CHANGED,),
            )
        return Transition(replace(state, phase=Phase.PAUSING), 0.0)

    if state.phase == Phase.PAUSING:
        is_last = state.sequence_index == len(targets) - 1
        if is_last and not config.loop:
            return Transition(
                replace(state, phase=Phase.DONE), None, (Effect.SEQUENCE_COMPLETE,)
            )
        return Transition(replace(state, phase=Phase.DELETING), config.pause_duration)

    # Phase.DELETING
    if current:
        delay = jittered_delay(config.deleting_speed, config.deleting_jitter, rng)
        return Transition(
            replace(state, current_text=current[:-1]), delay, (Effect.TEXT_CHANGED,)
        )

    next_index = state.sequence_index + 1
    if next_index < len(targets):
        return Transition(
            SequenceState(Phase.TYPING, next_index, ""), config.typing_speed
        )
    if config.loop:
        return Transition(SequenceState(Phase.TYPING, 0, ""), config.typing_speed)
    return Transition(replace(state, phase=Phase.DONE), None, (Effect.SEQUENCE_COMPLETE,))
