"""Playback controller: keeps the desired play/pause state in step with the media.

The controller owns one ``PlaybackState`` and at most one media resource.
User intent (``play``, ``pause``, ``seek``, ``set_volume``) updates the
desired state and commands the resource; the resource's asynchronous
reports (metadata, time updates, end of media, play outcomes) are
reconciled back into the state here and nowhere else.

Every ``play()`` opens a numbered attempt. Outcomes of stale attempts, or
outcomes arriving once the desired state is paused or the controller is
closed, never bring playback back.
"""

from __future__ import annotations

import logging
import math
from collections.abc import Callable

from PySide6.QtCore import QObject, QTimer, Signal

from slumber.core.constants import DEFAULT_VOLUME, LOAD_TIMEOUT_MS
from slumber.core.errors import MediaError, MediaFailure, failure_message
from slumber.core.media import Disposer, MediaResource, attach_listeners
from slumber.core.models import NoticeKind, PlaybackState, Track
from slumber.utils.time_format import format_time

logger = logging.getLogger(__name__)


class PlaybackController(QObject):
    """Single-track playback state machine.

    Signals:
        playing_changed(bool): Desired play state changed.
        position_changed(float, float): Position in seconds and progress
            fraction (0.0 while the duration is unknown).
        duration_changed(float): Duration in seconds became known.
        volume_changed(int): Volume percent applied.
        play_succeeded(): The current play attempt is playing.
        track_finished(): The track ended and did not loop.
        notice(str, str): ``NoticeKind`` value and message for the user.
    """

    playing_changed = Signal(bool)
    position_changed = Signal(float, float)
    duration_changed = Signal(float)
    volume_changed = Signal(int)
    play_succeeded = Signal()
    track_finished = Signal()
    notice = Signal(str, str)

    def __init__(
        self,
        loop_policy: Callable[[], bool] | None = None,
        default_volume: int = DEFAULT_VOLUME,
        load_timeout_ms: int = LOAD_TIMEOUT_MS,
        parent: QObject | None = None,
    ) -> None:
        """Initialize playback controller.

        Args:
            loop_policy: Called when a playing track ends; True restarts it
            default_volume: Initial volume percent
            load_timeout_ms: Time a play attempt may stay unresolved
            parent: Parent QObject
        """
        super().__init__(parent)
        self._loop_policy = loop_policy or (lambda: False)
        self._state = PlaybackState(volume_percent=max(0, min(100, default_volume)))
        self._track: Track | None = None
        self._resource: MediaResource | None = None
        self._detach: Disposer | None = None
        # Last replaced resource, kept alive while its queued signals drain
        self._retired: MediaResource | None = None
        self._closed = False

        # Play attempt bookkeeping
        self._attempt_open = False
        self._resource_playing = False
        self._failed_attempt = 0
        self._announced = False

        self._load_timer = QTimer(self)
        self._load_timer.setSingleShot(True)
        self._load_timer.setInterval(load_timeout_ms)
        self._load_timer.timeout.connect(self._on_load_timeout)

    # ------------------------------------------------------------------
    # State
    # ------------------------------------------------------------------

    @property
    def state(self) -> PlaybackState:
        return self._state

    @property
    def track(self) -> Track | None:
        return self._track

    @property
    def resource(self) -> MediaResource | None:
        return self._resource

    @property
    def is_playing(self) -> bool:
        return self._state.is_playing

    @property
    def is_closed(self) -> bool:
        return self._closed

    @property
    def progress(self) -> float:
        return self._state.progress

    @property
    def current_time_label(self) -> str:
        return format_time(self._state.position_seconds)

    @property
    def duration_label(self) -> str:
        return format_time(self._state.duration_seconds)

    @property
    def load_pending(self) -> bool:
        return self._load_timer.isActive()

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------

    def load(self, track: Track, resource: MediaResource) -> bool:
        """Replace the current track with ``track`` played through ``resource``.

        The previous resource is detached and released before the new one
        is attached. The controller takes ownership of ``resource``.

        Returns:
            True if the resource accepted the track's locator.
        """
        if self._closed:
            resource.release()
            return False

        self._teardown_resource()
        self._reset_playback()
        self._track = track

        try:
            resource.load(track.audio_url)
        except MediaError as e:
            logger.warning("[Playback] Cannot load %r: %s", track.name, e)
            resource.release()
            self._emit_notice(NoticeKind.ERROR, failure_message(e.failure))
            return False

        self._resource = resource
        self._detach = attach_listeners(resource, self)
        resource.set_volume(self._state.volume_percent)
        logger.debug("[Playback] Loaded %r (%s)", track.name, track.audio_url)
        return True

    def play(self) -> None:
        """Request playback; the outcome is reconciled when it arrives."""
        if self._closed or self._resource is None:
            return
        self._set_playing(True)
        if not self._resource_playing and not self._attempt_open:
            self._start_attempt()

    def pause(self) -> None:
        """Request pause. Takes precedence over any pending play outcome."""
        if self._closed:
            return
        self._set_playing(False)
        self._load_timer.stop()
        self._attempt_open = False
        self._resource_playing = False
        if self._resource is not None:
            self._resource.pause()

    def toggle(self) -> None:
        if self._state.is_playing:
            self.pause()
        else:
            self.play()

    def seek(self, seconds: float) -> None:
        """Move to ``seconds``, clamped to the track.

        Does nothing until the duration is known.
        """
        duration = self._state.duration_seconds
        if self._closed or self._resource is None or duration <= 0:
            return
        if not math.isfinite(seconds):
            return
        position = max(0.0, min(duration, seconds))
        self._resource.seek(position)
        self._update_position(position)

    def seek_fraction(self, fraction: float) -> None:
        """Move to a fraction (0.0-1.0) of the duration."""
        if not math.isfinite(fraction):
            return
        self.seek(max(0.0, min(1.0, fraction)) * self._state.duration_seconds)

    def set_volume(self, percent: int | float) -> None:
        """Set volume, clamped to 0-100."""
        if self._closed or not math.isfinite(percent):
            return
        volume = int(max(0, min(100, round(percent))))
        self._state.volume_percent = volume
        if self._resource is not None:
            self._resource.set_volume(volume)
        self.volume_changed.emit(volume)

    def close(self) -> None:
        """Detach from the media and release it. Idempotent."""
        if self._closed:
            return
        self._closed = True
        self._teardown_resource()
        self._reset_playback()
        self._track = None
        logger.debug("[Playback] Closed")

    # ------------------------------------------------------------------
    # Media reconciliation
    # ------------------------------------------------------------------

    def on_metadata_loaded(self, duration: float) -> None:
        if self._closed or self._is_stale_sender():
            return
        if not math.isfinite(duration) or duration <= 0:
            return
        self._state.duration_seconds = duration
        self.duration_changed.emit(duration)
        self._update_position(self._state.position_seconds)
        self._reconcile()

    def on_time_update(self, position: float) -> None:
        if self._closed or self._is_stale_sender() or not math.isfinite(position):
            return
        self._update_position(position)

    def on_ended(self) -> None:
        if self._closed or self._is_stale_sender():
            return
        self._resource_playing = False
        if self._state.is_playing and self._loop_policy():
            logger.debug("[Playback] Track ended, looping")
            if self._resource is not None:
                self._resource.seek(0.0)
            self._update_position(0.0)
            self._start_attempt()
            return

        logger.debug("[Playback] Track ended")
        self._load_timer.stop()
        self._attempt_open = False
        self._set_playing(False)
        self._update_position(0.0)
        self.track_finished.emit()

    def on_play_started(self, attempt: int) -> None:
        if self._closed or self._resource is None or self._is_stale_sender():
            return
        if attempt != self._resource.current_attempt or attempt == self._failed_attempt:
            logger.debug("[Playback] Ignoring start of stale attempt %d", attempt)
            return
        self._load_timer.stop()
        self._attempt_open = False
        if not self._state.is_playing:
            # Paused while the attempt was in flight
            self._resource.pause()
            return
        self._resource_playing = True
        self.play_succeeded.emit()
        if not self._announced and self._track is not None:
            self._announced = True
            self._emit_notice(NoticeKind.SUCCESS, f"Now playing: {self._track.name}")

    def on_play_failed(self, attempt: int, failure: str, detail: str) -> None:
        if self._closed or self._resource is None or self._is_stale_sender():
            return
        self._fail_attempt(attempt, failure, detail)

    # ------------------------------------------------------------------
    # Internal
    # ------------------------------------------------------------------

    def _is_stale_sender(self) -> bool:
        # Signals queued by a replaced resource are still delivered after it is detached
        sender = self.sender()
        return sender is not None and sender is not self._resource

    def _fail_attempt(self, attempt: int, failure: str, detail: str) -> None:
        if self._resource is None:
            return
        if attempt != self._resource.current_attempt or attempt == self._failed_attempt:
            logger.debug("[Playback] Ignoring repeated failure of attempt %d", attempt)
            return
        self._failed_attempt = attempt
        self._load_timer.stop()
        self._attempt_open = False
        self._resource_playing = False

        try:
            category = MediaFailure(failure)
        except ValueError:
            category = MediaFailure.GENERIC
        wanted = self._state.is_playing
        self._set_playing(False)

        if category is MediaFailure.ABORTED and not wanted:
            logger.debug("[Playback] Attempt %d aborted after pause", attempt)
            return
        logger.warning("[Playback] Attempt %d failed (%s): %s", attempt, category.value, detail)
        self._emit_notice(NoticeKind.ERROR, failure_message(category))

    def _start_attempt(self) -> None:
        if self._resource is None:
            return
        self._attempt_open = True
        self._load_timer.start()
        attempt = self._resource.play()
        logger.debug("[Playback] Play attempt %d", attempt)

    def _on_load_timeout(self) -> None:
        if self._closed or self._resource is None or not self._attempt_open:
            return
        self._fail_attempt(
            self._resource.current_attempt, MediaFailure.TIMEOUT.value, "play attempt timed out"
        )
        self._resource.pause()

    def _reconcile(self) -> None:
        """Bring the resource in line with the desired state."""
        if self._resource is None or self._attempt_open:
            return
        if self._state.is_playing and not self._resource_playing:
            self._start_attempt()
        elif not self._state.is_playing and self._resource_playing:
            self._resource_playing = False
            self._resource.pause()

    def _update_position(self, position: float) -> None:
        duration = self._state.duration_seconds
        position = max(0.0, position)
        if duration > 0:
            position = min(position, duration)
        self._state.position_seconds = position
        self.position_changed.emit(position, self._state.progress)

    def _set_playing(self, playing: bool) -> None:
        if self._state.is_playing == playing:
            return
        self._state.is_playing = playing
        self.playing_changed.emit(playing)

    def _emit_notice(self, kind: NoticeKind, message: str) -> None:
        self.notice.emit(kind.value, message)

    def _teardown_resource(self) -> None:
        self._load_timer.stop()
        if self._detach is not None:
            self._detach()
            self._detach = None
        if self._resource is not None:
            self._resource.release()
            self._retired = self._resource
            self._resource = None

    def _reset_playback(self) -> None:
        self._state = PlaybackState(volume_percent=self._state.volume_percent)
        self._attempt_open = False
        self._resource_playing = False
        self._failed_attempt = 0
        self._announced = False
