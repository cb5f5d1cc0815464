"""Media resource backed by python-vlc."""

import logging
from typing import Any

import vlc
from PySide6.QtCore import QObject

from slumber.core.errors import InvalidSourceError, MediaFailure, classify_error
from slumber.core.media import MediaResource


class VlcMediaResource(MediaResource):
    """Wrapper around a python-vlc media player for one locator.

    VLC delivers its events on its own threads; emitting Qt signals from
    there lets Qt queue them onto the receivers' thread.
    """

    def __init__(self, parent: QObject | None = None) -> None:
        """Initialize VLC instance and player."""
        super().__init__(parent)
        self._instance = vlc.Instance()
        self._player = self._instance.media_player_new()
        self._url: str | None = None
        self._released = False

        self._handlers = [
            (vlc.EventType.MediaPlayerLengthChanged, self._on_length_changed),
            (vlc.EventType.MediaPlayerTimeChanged, self._on_time_changed),
            (vlc.EventType.MediaPlayerEndReached, self._on_end_reached),
            (vlc.EventType.MediaPlayerPlaying, self._on_playing),
            (vlc.EventType.MediaPlayerEncounteredError, self._on_error),
        ]
        event_manager = self._player.event_manager()
        for event_type, handler in self._handlers:
            event_manager.event_attach(event_type, handler)

    @property
    def url(self) -> str | None:
        return self._url

    def load(self, url: str) -> None:
        """Load an audio locator.

        Raises:
            InvalidSourceError: If the locator is blank or VLC rejects it
        """
        if not url or not url.strip():
            raise InvalidSourceError("empty audio locator")
        try:
            media = self._instance.media_new(url)
        except Exception as e:
            raise InvalidSourceError(str(e)) from e
        if media is None:
            raise InvalidSourceError(f"VLC cannot open {url}")
        self._player.set_media(media)
        self._url = url
        logging.debug(f"[VLC] Loaded {url}")

    def play(self) -> int:
        attempt = self._next_attempt()
        if self._player.get_state() == vlc.State.Ended:
            # An ended player must be stopped before it can restart
            self._player.stop()
        try:
            result = self._player.play()
        except Exception as e:
            self.play_failed.emit(attempt, classify_error(e).value, str(e))
            return attempt
        if result == -1:
            self.play_failed.emit(
                attempt, MediaFailure.GENERIC.value, "libvlc refused to start playback"
            )
        return attempt

    def pause(self) -> None:
        self._player.set_pause(1)

    def seek(self, seconds: float) -> None:
        self._player.set_time(int(seconds * 1000))

    def set_volume(self, percent: int) -> None:
        self._player.audio_set_volume(max(0, min(100, percent)))

    def release(self) -> None:
        if self._released:
            return
        self._released = True
        event_manager = self._player.event_manager()
        for event_type, _handler in self._handlers:
            event_manager.event_detach(event_type)
        self._player.stop()
        self._player.set_media(None)
        self._player.release()
        self._url = None

    def _on_length_changed(self, event: Any) -> None:
        length = self._player.get_length()
        if length and length > 0:
            self.metadata_loaded.emit(length / 1000.0)

    def _on_time_changed(self, event: Any) -> None:
        position = self._player.get_time()
        if position is not None and position >= 0:
            self.time_updated.emit(position / 1000.0)

    def _on_end_reached(self, event: Any) -> None:
        self.ended.emit()

    def _on_playing(self, event: Any) -> None:
        self.play_started.emit(self._attempt)

    def _on_error(self, event: Any) -> None:
        self.play_failed.emit(
            self._attempt, MediaFailure.GENERIC.value, "libvlc reported a playback error"
        )
