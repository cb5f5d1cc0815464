"""Event bus connecting the player to its external collaborators."""

import logging
from collections.abc import Callable
from typing import Any


class EventBus:
    """Event bus for pub/sub."""

    def __init__(self) -> None:
        self.subscribers: dict[str, list[Callable[..., None]]] = {}

    def subscribe(self, event: str, callback: Callable[..., None]) -> None:
        """Subscribe to event."""
        self.subscribers.setdefault(event, []).append(callback)
        logging.debug(f"Subscribed to event: {event}")

    def unsubscribe(self, event: str, callback: Callable[..., None]) -> bool:
        """Unsubscribe from event.

        Returns:
            True if unsubscribed, False if not found
        """
        if event not in self.subscribers:
            return False

        try:
            self.subscribers[event].remove(callback)
            logging.debug(f"Unsubscribed from event: {event}")
            return True
        except ValueError:
            return False

    def clear_all_subscribers(self) -> None:
        """Clear all subscribers from all events."""
        self.subscribers.clear()
        logging.debug("Cleared all event subscribers")

    def emit(self, event: str, **data: Any) -> None:
        """Emit event.

        Note: Copies subscriber list before iteration to allow callbacks
        to safely subscribe/unsubscribe during emission (same-thread safety).
        A failing subscriber is logged and does not stop the others.
        """
        if event not in self.subscribers:
            return

        logging.debug(f"Emitting event: {event}")
        for callback in list(self.subscribers[event]):
            try:
                callback(**data)
            except Exception as e:
                logging.error(f"Error in event handler for {event}: {e}")


class Events:
    """Standard event names.

    Each event is documented with its expected kwargs.

    Playback Events:
        TRACK_LOADED: Track opened in the player
            kwargs: track (Track)
        TRACK_PLAYING: A play attempt succeeded
            kwargs: track (Track)
        TRACK_PAUSED: Desired playback switched to paused
            kwargs: None
        TRACK_ENDED: Track ended without looping
            kwargs: None
        POSITION_UPDATE: Playback position changed
            kwargs: position (float) - seconds
                    progress (float) - ratio 0.0-1.0

    Sleep Timer Events:
        TIMER_STARTED: Countdown started
            kwargs: minutes (int)
        TIMER_TICK: One second elapsed
            kwargs: remaining (int) - seconds
        TIMER_EXPIRING: Navigation is imminent
            kwargs: seconds (int) - seconds until navigation
        TIMER_STOPPED: Countdown cancelled by the user
            kwargs: None
        TIMER_EXPIRED: Countdown reached zero, playback stopped
            kwargs: None
        NAVIGATE_AWAY: Grace delay after expiry elapsed
            kwargs: None

    UI Events:
        NOTIFICATION: Message for the toast sink
            kwargs: kind (NoticeKind), message (str)
        MODE_FLAGS_CHANGED: Shuffle/loop preference changed
            kwargs: shuffle (bool), loop (bool)
        CONTROLS_VISIBILITY_CHANGED: Control overlay shown or hidden
            kwargs: visible (bool)
        PLAYER_CLOSED: Player torn down
            kwargs: None
    """

    # Playback events
    TRACK_LOADED = "track_loaded"  # kwargs: track (Track)
    TRACK_PLAYING = "track_playing"  # kwargs: track (Track)
    TRACK_PAUSED = "track_paused"  # kwargs: None
    TRACK_ENDED = "track_ended"  # kwargs: None
    POSITION_UPDATE = "position_update"  # kwargs: position (float), progress (float)

    # Sleep timer events
    TIMER_STARTED = "timer_started"  # kwargs: minutes (int)
    TIMER_TICK = "timer_tick"  # kwargs: remaining (int)
    TIMER_EXPIRING = "timer_expiring"  # kwargs: seconds (int)
    TIMER_STOPPED = "timer_stopped"  # kwargs: None
    TIMER_EXPIRED = "timer_expired"  # kwargs: None
    NAVIGATE_AWAY = "navigate_away"  # kwargs: None

    # UI events
    NOTIFICATION = "notification"  # kwargs: kind (NoticeKind), message (str)
    MODE_FLAGS_CHANGED = "mode_flags_changed"  # kwargs: shuffle (bool), loop (bool)
    CONTROLS_VISIBILITY_CHANGED = "controls_visibility_changed"  # kwargs: visible (bool)
    PLAYER_CLOSED = "player_closed"  # kwargs: None
