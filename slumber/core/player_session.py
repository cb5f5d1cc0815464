"""Player session: the single player instance for the open track.

Owns the four player aggregates and wires them together:
- PlaybackController (desired play state vs. media reality)
- SleepTimer (countdown, forced looping, expiry)
- PlaybackModeFlags (shuffle/loop preference)
- ControlsVisibility (idle-hide of the overlay)

and publishes what happens on the ``EventBus`` for the external
collaborators (notification sink, navigation). ``close()`` tears all of it
down in one step.
"""

from __future__ import annotations

import logging
from collections.abc import Callable
from typing import Any

from PySide6.QtCore import QObject, Signal

from slumber.core.config import AudioConfig, ControlsConfig, SlumberConfig, TimerConfig
from slumber.core.controls_visibility import ControlsVisibility
from slumber.core.event_bus import EventBus, Events
from slumber.core.media import MediaResource
from slumber.core.mode_flags import PlaybackModeFlags
from slumber.core.models import NoticeKind, Track
from slumber.core.playback_controller import PlaybackController
from slumber.core.sleep_timer import SleepTimer

MediaFactory = Callable[[], MediaResource]


class PlayerSession(QObject):
    """Player for one open track at a time.

    Playback state resets whenever a new track is opened; the sleep timer
    and the mode flags carry over until the session is closed.

    Signals:
        navigate_away(): The sleep timer expired and its grace delay elapsed.
        closed(): The session was torn down.
    """

    navigate_away = Signal()
    closed = Signal()

    def __init__(
        self,
        media_factory: MediaFactory,
        event_bus: EventBus | None = None,
        config: SlumberConfig | None = None,
        parent: QObject | None = None,
    ) -> None:
        """Initialize player session.

        Args:
            media_factory: Creates a fresh media resource for each opened track
            event_bus: Bus receiving notifications and navigation events
            config: Application configuration (defaults when None)
            parent: Parent QObject
        """
        super().__init__(parent)
        audio = config.audio if config else AudioConfig()
        timer_config = config.timer if config else TimerConfig()
        controls_config = config.controls if config else ControlsConfig()

        self._media_factory = media_factory
        self.event_bus = event_bus or EventBus()
        self._closed = False
        self._connections: list[tuple[Any, Callable[..., None]]] = []

        self.mode_flags = PlaybackModeFlags()
        self.timer = SleepTimer.from_config(timer_config, self.mode_flags)
        self.controls = ControlsVisibility(controls_config.hide_delay_ms)
        self.controller = PlaybackController(
            loop_policy=self._should_loop,
            default_volume=audio.default_volume,
            load_timeout_ms=audio.load_timeout_ms,
        )
        self._wire()

    # ------------------------------------------------------------------
    # State
    # ------------------------------------------------------------------

    @property
    def track(self) -> Track | None:
        return self.controller.track

    @property
    def is_closed(self) -> bool:
        return self._closed

    @property
    def is_playing(self) -> bool:
        return self.controller.is_playing

    # ------------------------------------------------------------------
    # Track lifecycle
    # ------------------------------------------------------------------

    def open(self, track: Track, autoplay: bool = True) -> bool:
        """Open ``track``, replacing the current one.

        Returns:
            True if the track's media was accepted.
        """
        if self._closed:
            return False
        logging.info(f"[Session] Opening {track.name!r}")
        loaded = self.controller.load(track, self._media_factory())
        self.event_bus.emit(Events.TRACK_LOADED, track=track)
        self.controls.show()
        if loaded and autoplay:
            self.controller.play()
        return loaded

    def close(self) -> None:
        """Tear down timers, media listeners and the resource in one step."""
        if self._closed:
            return
        self._closed = True
        self.timer.dispose()
        self.controls.dispose()
        self.controller.close()
        self._unwire()
        logging.info("[Session] Closed")
        self.event_bus.emit(Events.PLAYER_CLOSED)
        self.closed.emit()

    # ------------------------------------------------------------------
    # User intent
    # ------------------------------------------------------------------

    def play(self) -> None:
        if self._interact():
            self.controller.play()

    def pause(self) -> None:
        if self._interact():
            self.controller.pause()

    def toggle_play(self) -> None:
        if self._interact():
            self.controller.toggle()

    def seek(self, seconds: float) -> None:
        if self._interact():
            self.controller.seek(seconds)

    def seek_fraction(self, fraction: float) -> None:
        if self._interact():
            self.controller.seek_fraction(fraction)

    def set_volume(self, percent: int | float) -> None:
        if self._interact():
            self.controller.set_volume(percent)

    def toggle_shuffle(self) -> None:
        if self._interact():
            self.mode_flags.toggle_shuffle()

    def toggle_loop(self) -> None:
        if self._interact():
            self.mode_flags.toggle_loop()

    def select_timer(self, minutes: int) -> None:
        if self._interact():
            self.timer.select_duration(minutes)

    def start_timer(self, minutes: int | None = None) -> None:
        if not self._interact():
            return
        if minutes is not None:
            self.timer.select_duration(minutes)
        self.timer.start()

    def stop_timer(self) -> None:
        if self._interact():
            self.timer.stop()

    def interact(self) -> None:
        """Record a tap on the player surface."""
        self._interact()

    # ------------------------------------------------------------------
    # Wiring
    # ------------------------------------------------------------------

    def _interact(self) -> bool:
        if self._closed:
            return False
        self.controls.interact()
        return True

    def _should_loop(self) -> bool:
        return self.timer.is_active or self.mode_flags.loop

    def _connect(self, signal: Any, slot: Callable[..., None]) -> None:
        signal.connect(slot)
        self._connections.append((signal, slot))

    def _wire(self) -> None:
        controller = self.controller
        self._connect(controller.notice, self._on_notice)
        self._connect(controller.playing_changed, self._on_playing_changed)
        self._connect(controller.play_succeeded, self._on_play_succeeded)
        self._connect(controller.position_changed, self._on_position_changed)
        self._connect(controller.track_finished, self._on_track_finished)

        timer = self.timer
        self._connect(timer.started, self._on_timer_started)
        self._connect(timer.ticked, self._on_timer_ticked)
        self._connect(timer.expiring, self._on_timer_expiring)
        self._connect(timer.pause_requested, controller.pause)
        self._connect(timer.expired, self._on_timer_expired)
        self._connect(timer.stopped, self._on_timer_stopped)
        self._connect(timer.navigate_away, self._on_navigate_away)

        self._connect(self.mode_flags.changed, self._on_mode_flags_changed)
        self._connect(self.controls.visibility_changed, self._on_visibility_changed)

    def _unwire(self) -> None:
        while self._connections:
            signal, slot = self._connections.pop()
            try:
                signal.disconnect(slot)
            except (RuntimeError, TypeError) as e:
                logging.debug(f"[Session] Signal already disconnected: {e}")

    def _notify(self, kind: NoticeKind, message: str) -> None:
        self.event_bus.emit(Events.NOTIFICATION, kind=kind, message=message)

    def _on_notice(self, kind: str, message: str) -> None:
        self._notify(NoticeKind(kind), message)

    def _on_playing_changed(self, playing: bool) -> None:
        if not playing:
            self.event_bus.emit(Events.TRACK_PAUSED)

    def _on_play_succeeded(self) -> None:
        self.controls.show()
        self.event_bus.emit(Events.TRACK_PLAYING, track=self.controller.track)

    def _on_position_changed(self, position: float, progress: float) -> None:
        self.event_bus.emit(Events.POSITION_UPDATE, position=position, progress=progress)

    def _on_track_finished(self) -> None:
        self.event_bus.emit(Events.TRACK_ENDED)

    def _on_timer_started(self, minutes: int) -> None:
        self.event_bus.emit(Events.TIMER_STARTED, minutes=minutes)
        self._notify(NoticeKind.INFO, f"Sleep timer set for {minutes} minutes")

    def _on_timer_ticked(self, remaining: int) -> None:
        self.event_bus.emit(Events.TIMER_TICK, remaining=remaining)

    def _on_timer_expiring(self, seconds: int) -> None:
        self.event_bus.emit(Events.TIMER_EXPIRING, seconds=seconds)

    def _on_timer_expired(self) -> None:
        self.event_bus.emit(Events.TIMER_EXPIRED)
        self._notify(NoticeKind.INFO, "Sleep timer finished, good night")

    def _on_timer_stopped(self) -> None:
        self.event_bus.emit(Events.TIMER_STOPPED)
        self._notify(NoticeKind.INFO, "Sleep timer cancelled")

    def _on_navigate_away(self) -> None:
        self.event_bus.emit(Events.NAVIGATE_AWAY)
        self.navigate_away.emit()

    def _on_mode_flags_changed(self, shuffle: bool, loop: bool) -> None:
        self.event_bus.emit(Events.MODE_FLAGS_CHANGED, shuffle=shuffle, loop=loop)

    def _on_visibility_changed(self, visible: bool) -> None:
        self.event_bus.emit(Events.CONTROLS_VISIBILITY_CHANGED, visible=visible)
