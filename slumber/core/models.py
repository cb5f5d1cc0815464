"""Data types shared by the player components."""

from dataclasses import dataclass
from enum import Enum

from slumber.core.constants import DEFAULT_TIMER_MINUTES, DEFAULT_VOLUME


class TrackType(Enum):
    """Ambience type of a track (selects the background art)."""

    FOREST = "forest"
    DEEPSLEEP = "deepsleep"
    PEACEFUL = "peaceful"


class TrackCategory(Enum):
    """Library category of a track."""

    SLEEP = "sleep"
    RELAX = "relax"
    MEDITATION = "meditation"
    LOFI = "lofi"
    AMBIENT = "ambient"
    NATURE = "nature"


@dataclass(frozen=True)
class Track:
    """A playable track as handed to the player.

    ``duration_label`` is for display only; the authoritative duration
    comes from the media resource once its metadata loads.
    """

    name: str
    audio_url: str
    duration_label: str = "0:00"
    type: TrackType | None = None
    category: TrackCategory = TrackCategory.SLEEP
    description: str = ""


@dataclass
class PlaybackState:
    """Playback state owned by the PlaybackController."""

    is_playing: bool = False
    position_seconds: float = 0.0
    duration_seconds: float = 0.0
    volume_percent: int = DEFAULT_VOLUME

    @property
    def progress(self) -> float:
        """Position as a fraction of the duration, 0.0 while unknown."""
        if self.duration_seconds <= 0:
            return 0.0
        return max(0.0, min(1.0, self.position_seconds / self.duration_seconds))


class TimerPhase(Enum):
    """Sleep timer phases."""

    IDLE = "idle"
    SELECTING = "selecting"
    RUNNING = "running"


@dataclass(frozen=True)
class TimerState:
    """Sleep timer state owned by the SleepTimer."""

    selected_minutes: int = DEFAULT_TIMER_MINUTES
    is_active: bool = False
    remaining_seconds: int = 0
    phase: TimerPhase = TimerPhase.IDLE


class NoticeKind(Enum):
    """Kinds of messages handed to the notification sink."""

    SUCCESS = "success"
    INFO = "info"
    WARNING = "warning"
    ERROR = "error"
