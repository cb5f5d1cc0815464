"""Media resource interface and scoped listener attachment.

A media resource wraps one playable audio handle. It is commanded
synchronously (``load``, ``play``, ``pause``...) and reports what actually
happened asynchronously through Qt signals. ``play()`` opens a numbered
play attempt; its outcome arrives later as ``play_started(attempt)`` or
``play_failed(attempt, failure, detail)``.
"""

from __future__ import annotations

import logging
from collections.abc import Callable
from typing import Protocol

from PySide6.QtCore import QObject, Signal

Disposer = Callable[[], None]


class MediaResource(QObject):
    """Base class for media backends.

    Subclasses must override ``load``, ``play``, ``pause``, ``seek``,
    ``set_volume`` and ``release``; ``play`` must open its attempt with
    ``_next_attempt()`` and return the number. Outcomes may be emitted from
    any thread.

    Signals:
        metadata_loaded(float): Duration in seconds is known.
        time_updated(float): Absolute playback position in seconds.
        ended(): Playback reached the end of the media.
        play_started(int): The given play attempt is now playing.
        play_failed(int, str, str): The given play attempt failed, with a
            ``MediaFailure`` value and a backend detail string.
    """

    metadata_loaded = Signal(float)
    time_updated = Signal(float)
    ended = Signal()
    play_started = Signal(int)
    play_failed = Signal(int, str, str)

    def __init__(self, parent: QObject | None = None) -> None:
        super().__init__(parent)
        self._attempt = 0

    @property
    def current_attempt(self) -> int:
        """Number of the most recent play attempt (0 before any)."""
        return self._attempt

    def _next_attempt(self) -> int:
        self._attempt += 1
        return self._attempt

    def load(self, url: str) -> None:
        raise NotImplementedError

    def play(self) -> int:
        """Start playback and return the play attempt number."""
        raise NotImplementedError

    def pause(self) -> None:
        raise NotImplementedError

    def seek(self, seconds: float) -> None:
        raise NotImplementedError

    def set_volume(self, percent: int) -> None:
        raise NotImplementedError

    def release(self) -> None:
        """Stop playback and free the underlying handle."""
        raise NotImplementedError


class MediaListener(Protocol):
    """Receiver of media resource events."""

    def on_metadata_loaded(self, duration: float) -> None: ...
    def on_time_update(self, position: float) -> None: ...
    def on_ended(self) -> None: ...
    def on_play_started(self, attempt: int) -> None: ...
    def on_play_failed(self, attempt: int, failure: str, detail: str) -> None: ...


def attach_listeners(resource: MediaResource, listener: MediaListener) -> Disposer:
    """Connect every resource signal to ``listener``.

    Signals queued before the disposer runs are still delivered, so
    listeners compare ``sender()`` with their current resource.

    Returns:
        A disposer that disconnects exactly the connections made here.
        Calling it more than once is harmless.
    """
    connections = [
        (resource.metadata_loaded, listener.on_metadata_loaded),
        (resource.time_updated, listener.on_time_update),
        (resource.ended, listener.on_ended),
        (resource.play_started, listener.on_play_started),
        (resource.play_failed, listener.on_play_failed),
    ]
    for signal, slot in connections:
        signal.connect(slot)

    def dispose() -> None:
        while connections:
            signal, slot = connections.pop()
            try:
                signal.disconnect(slot)
            except (RuntimeError, TypeError) as e:
                logging.debug(f"[Media] Listener already detached: {e}")

    return dispose
