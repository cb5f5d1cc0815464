"""Sleep timer: a one-second countdown that stops playback at zero.

The countdown is an explicit state machine. ``transition()`` is a pure
function from ``(TimerState, TimerEvent)`` to the next state plus a list
of effects; ``SleepTimer`` owns the two timer handles (the repeating tick
and the single-shot grace delay) and applies the effects.

Phases::

    IDLE -> SELECTING -> RUNNING -> IDLE   (expired or stopped)
"""

from __future__ import annotations

import logging
from collections.abc import Sequence
from dataclasses import dataclass, replace
from enum import Enum
from typing import TYPE_CHECKING

from PySide6.QtCore import QObject, QTimer, Signal

from slumber.core.constants import (
    DEFAULT_TIMER_MINUTES,
    EXPIRY_WARNING_SECONDS,
    GRACE_DELAY_MS,
    TICK_INTERVAL_MS,
    TIMER_PRESETS,
)
from slumber.core.errors import InvalidTimerDuration
from slumber.core.models import TimerPhase, TimerState

if TYPE_CHECKING:
    from slumber.core.config import TimerConfig
    from slumber.core.mode_flags import PlaybackModeFlags


class TimerEvent(Enum):
    """Inputs of the timer state machine."""

    SELECT = "select"
    START = "start"
    STOP = "stop"
    TICK = "tick"
    CLOSE = "close"


class TimerEffect(Enum):
    """Side effects requested by a transition."""

    START_TICKING = "start_ticking"
    STOP_TICKING = "stop_ticking"
    FORCE_LOOP = "force_loop"
    TICKED = "ticked"
    WARN_EXPIRING = "warn_expiring"
    PAUSE_PLAYBACK = "pause_playback"
    EXPIRED = "expired"
    STOPPED = "stopped"
    SCHEDULE_NAVIGATION = "schedule_navigation"
    CANCEL_NAVIGATION = "cancel_navigation"


@dataclass(frozen=True)
class Transition:
    state: TimerState
    effects: tuple[TimerEffect, ...] = ()


def transition(
    state: TimerState,
    event: TimerEvent,
    *,
    minutes: int | None = None,
    presets: Sequence[int] = TIMER_PRESETS,
    warning_threshold: int = EXPIRY_WARNING_SECONDS,
) -> Transition:
    """Compute the next timer state and its effects.

    Args:
        state: Current state
        event: Input event
        minutes: Chosen preset, required for ``SELECT``
        presets: Allowed durations in minutes
        warning_threshold: Remaining seconds at or below which each tick
            also requests an expiry warning

    Raises:
        InvalidTimerDuration: If ``SELECT`` is given a non-preset duration
    """
    if event is TimerEvent.SELECT:
        if minutes not in presets:
            raise InvalidTimerDuration(
                f"{minutes} is not one of the timer presets {tuple(presets)}"
            )
        phase = TimerPhase.RUNNING if state.is_active else TimerPhase.SELECTING
        return Transition(replace(state, selected_minutes=minutes, phase=phase))

    if event is TimerEvent.START:
        running = replace(
            state,
            is_active=True,
            remaining_seconds=state.selected_minutes * 60,
            phase=TimerPhase.RUNNING,
        )
        return Transition(
            running,
            (TimerEffect.CANCEL_NAVIGATION, TimerEffect.FORCE_LOOP, TimerEffect.START_TICKING),
        )

    if event is TimerEvent.STOP:
        idle = replace(state, is_active=False, remaining_seconds=0, phase=TimerPhase.IDLE)
        effects = [TimerEffect.STOP_TICKING, TimerEffect.CANCEL_NAVIGATION]
        if state.is_active:
            effects.append(TimerEffect.STOPPED)
        return Transition(idle, tuple(effects))

    if event is TimerEvent.TICK:
        if not state.is_active:
            return Transition(state)
        remaining = max(0, state.remaining_seconds - 1)
        if remaining == 0:
            expired = replace(state, is_active=False, remaining_seconds=0, phase=TimerPhase.IDLE)
            return Transition(
                expired,
                (
                    TimerEffect.STOP_TICKING,
                    TimerEffect.TICKED,
                    TimerEffect.PAUSE_PLAYBACK,
                    TimerEffect.EXPIRED,
                    TimerEffect.SCHEDULE_NAVIGATION,
                ),
            )
        effects = [TimerEffect.TICKED]
        if remaining <= warning_threshold:
            effects.append(TimerEffect.WARN_EXPIRING)
        return Transition(replace(state, remaining_seconds=remaining), tuple(effects))

    # CLOSE
    closed = replace(state, is_active=False, remaining_seconds=0, phase=TimerPhase.IDLE)
    return Transition(closed, (TimerEffect.STOP_TICKING, TimerEffect.CANCEL_NAVIGATION))


class SleepTimer(QObject):
    """Countdown that forces looping while active and stops playback at zero.

    Signals:
        started(int): Countdown started for the given minutes.
        ticked(int): Remaining seconds after a tick.
        expiring(int): Seconds left until navigation (remaining + grace),
            emitted on each tick near expiry.
        pause_requested(): Playback must stop now.
        expired(): Countdown reached zero.
        stopped(): Countdown cancelled manually.
        navigate_away(): Grace delay after expiry elapsed.
    """

    started = Signal(int)
    ticked = Signal(int)
    expiring = Signal(int)
    pause_requested = Signal()
    expired = Signal()
    stopped = Signal()
    navigate_away = Signal()

    def __init__(
        self,
        mode_flags: PlaybackModeFlags | None = None,
        presets: Sequence[int] = TIMER_PRESETS,
        default_minutes: int = DEFAULT_TIMER_MINUTES,
        tick_interval_ms: int = TICK_INTERVAL_MS,
        grace_delay_ms: int = GRACE_DELAY_MS,
        warning_threshold_seconds: int = EXPIRY_WARNING_SECONDS,
        parent: QObject | None = None,
    ) -> None:
        """Initialize sleep timer.

        Args:
            mode_flags: Flags to force loop on while counting down
            presets: Allowed durations in minutes
            default_minutes: Initially selected preset
            tick_interval_ms: Countdown tick period
            grace_delay_ms: Delay between expiry and navigate_away
            warning_threshold_seconds: Remaining seconds that trigger expiring
            parent: Parent QObject
        """
        super().__init__(parent)
        self._mode_flags = mode_flags
        self._presets = tuple(presets)
        self._grace_delay_ms = grace_delay_ms
        self._warning_threshold = warning_threshold_seconds
        self._state = TimerState(selected_minutes=default_minutes)
        self._disposed = False

        self._tick_timer = QTimer(self)
        self._tick_timer.setInterval(tick_interval_ms)
        self._tick_timer.timeout.connect(self.tick)

        self._grace_timer = QTimer(self)
        self._grace_timer.setSingleShot(True)
        self._grace_timer.setInterval(grace_delay_ms)
        self._grace_timer.timeout.connect(self._on_grace_elapsed)

    @classmethod
    def from_config(
        cls, config: TimerConfig, mode_flags: PlaybackModeFlags | None = None
    ) -> SleepTimer:
        return cls(
            mode_flags=mode_flags,
            presets=config.presets,
            default_minutes=config.default_minutes,
            tick_interval_ms=config.tick_interval_ms,
            grace_delay_ms=config.grace_delay_ms,
            warning_threshold_seconds=config.warning_threshold_seconds,
        )

    # ------------------------------------------------------------------
    # State
    # ------------------------------------------------------------------

    @property
    def state(self) -> TimerState:
        return self._state

    @property
    def presets(self) -> tuple[int, ...]:
        return self._presets

    @property
    def is_active(self) -> bool:
        return self._state.is_active

    @property
    def remaining_seconds(self) -> int:
        return self._state.remaining_seconds

    @property
    def selected_minutes(self) -> int:
        return self._state.selected_minutes

    @property
    def is_ticking(self) -> bool:
        return self._tick_timer.isActive()

    @property
    def navigation_pending(self) -> bool:
        return self._grace_timer.isActive()

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------

    def select_duration(self, minutes: int) -> None:
        """Store the chosen preset without starting the countdown.

        Raises:
            InvalidTimerDuration: If ``minutes`` is not a preset
        """
        self._dispatch(TimerEvent.SELECT, minutes=minutes)

    def start(self) -> None:
        """Start counting down from the selected duration."""
        self._dispatch(TimerEvent.START)

    def stop(self) -> None:
        """Cancel the countdown. Mode flags are left as they are."""
        self._dispatch(TimerEvent.STOP)

    def tick(self) -> None:
        """Advance the countdown by one second."""
        self._dispatch(TimerEvent.TICK)

    def dispose(self) -> None:
        """Cancel the tick and the pending navigation for good."""
        if self._disposed:
            return
        self._dispatch(TimerEvent.CLOSE)
        self._disposed = True

    # ------------------------------------------------------------------
    # Internal
    # ------------------------------------------------------------------

    def _dispatch(self, event: TimerEvent, minutes: int | None = None) -> None:
        if self._disposed:
            logging.debug(f"[Timer] Ignoring {event.value} after dispose")
            return
        result = transition(
            self._state,
            event,
            minutes=minutes,
            presets=self._presets,
            warning_threshold=self._warning_threshold,
        )
        self._state = result.state
        for effect in result.effects:
            self._apply(effect)

    def _apply(self, effect: TimerEffect) -> None:
        state = self._state
        if effect is TimerEffect.START_TICKING:
            self._tick_timer.start()
            logging.info(f"[Timer] Started for {state.selected_minutes} min")
            self.started.emit(state.selected_minutes)
        elif effect is TimerEffect.STOP_TICKING:
            self._tick_timer.stop()
        elif effect is TimerEffect.FORCE_LOOP:
            if self._mode_flags is not None and self._mode_flags.apply_timer_default():
                logging.debug("[Timer] Loop forced on for the countdown")
        elif effect is TimerEffect.TICKED:
            self.ticked.emit(state.remaining_seconds)
        elif effect is TimerEffect.WARN_EXPIRING:
            self.expiring.emit(state.remaining_seconds + self._grace_delay_ms // 1000)
        elif effect is TimerEffect.PAUSE_PLAYBACK:
            self.pause_requested.emit()
        elif effect is TimerEffect.EXPIRED:
            logging.info("[Timer] Expired")
            self.expired.emit()
        elif effect is TimerEffect.STOPPED:
            logging.info("[Timer] Stopped")
            self.stopped.emit()
        elif effect is TimerEffect.SCHEDULE_NAVIGATION:
            self._grace_timer.start()
        elif effect is TimerEffect.CANCEL_NAVIGATION:
            self._grace_timer.stop()

    def _on_grace_elapsed(self) -> None:
        if self._disposed:
            return
        logging.debug("[Timer] Grace delay elapsed, navigating away")
        self.navigate_away.emit()
