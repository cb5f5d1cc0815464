"""Track catalog offered to the player."""

from __future__ import annotations

import logging
from collections.abc import Iterator
from pathlib import Path

from slumber.core.config import LibraryConfig, TrackConfig
from slumber.core.models import Track, TrackCategory, TrackType
from slumber.utils.time_format import format_time


DEFAULT_TRACKS: tuple[Track, ...] = (
    Track(
        name="Gentle Rain",
        audio_url="https://www.soundjay.com/misc/sounds/rain-01.wav",
        duration_label=format_time(300),
        type=TrackType.FOREST,
        category=TrackCategory.NATURE,
        description="Soft rainfall to help you unwind",
    ),
    Track(
        name="Ocean Waves",
        audio_url="https://www.soundjay.com/misc/sounds/ocean-waves.wav",
        duration_label=format_time(420),
        type=TrackType.PEACEFUL,
        category=TrackCategory.NATURE,
        description="Gentle waves for a calm atmosphere",
    ),
    Track(
        name="Forest Birdsong",
        audio_url="https://www.soundjay.com/misc/sounds/birds.wav",
        duration_label=format_time(360),
        type=TrackType.FOREST,
        category=TrackCategory.NATURE,
        description="Birds singing in an early morning forest",
    ),
)


def track_from_config(entry: TrackConfig) -> Track:
    """Build a Track from its configuration entry.

    Raises:
        ValueError: If the type or category is unknown
    """
    return Track(
        name=entry.name,
        audio_url=entry.audio_url,
        duration_label=entry.duration_label,
        type=TrackType(entry.type) if entry.type else None,
        category=TrackCategory(entry.category),
        description=entry.description,
    )


class TrackLibrary:
    """Built-in and configured tracks, looked up by name."""

    def __init__(self, tracks: list[Track] | tuple[Track, ...] = DEFAULT_TRACKS) -> None:
        """Initialize track library."""
        self._tracks: dict[str, Track] = {}
        for track in tracks:
            self.add(track)

    @classmethod
    def from_config(cls, config: LibraryConfig) -> TrackLibrary:
        library = cls(DEFAULT_TRACKS if config.include_defaults else ())
        for entry in config.tracks:
            library.add(track_from_config(entry))
        return library

    def add(self, track: Track) -> None:
        """Add a track, replacing any track with the same name."""
        key = track.name.casefold()
        if key in self._tracks:
            logging.debug(f"[Library] Replacing track {track.name!r}")
        self._tracks[key] = track

    def get(self, name: str) -> Track | None:
        return self._tracks.get(name.casefold())

    def all(self) -> list[Track]:
        return list(self._tracks.values())

    def by_category(self, category: TrackCategory) -> list[Track]:
        return [t for t in self._tracks.values() if t.category is category]

    def resolve(self, name_or_url: str) -> Track:
        """Find a library track by name, or wrap a raw locator as a track.

        Raises:
            KeyError: If the name is unknown and does not look like a locator
        """
        track = self.get(name_or_url)
        if track is not None:
            return track
        if "://" in name_or_url or Path(name_or_url).exists():
            name = Path(name_or_url.rstrip("/")).name or name_or_url
            return Track(name=name, audio_url=name_or_url)
        raise KeyError(name_or_url)

    def __len__(self) -> int:
        return len(self._tracks)

    def __iter__(self) -> Iterator[Track]:
        return iter(self._tracks.values())
