"""Pytest configuration and fixtures."""

import os
from collections.abc import Iterator
from pathlib import Path
from typing import Any

import pytest

os.environ.setdefault("QT_QPA_PLATFORM", "offscreen")

from PySide6.QtWidgets import QApplication  # noqa: E402

from slumber.core.config import (  # noqa: E402
    AudioConfig,
    ControlsConfig,
    LoggingConfig,
    SlumberConfig,
    TimerConfig,
)
from slumber.core.event_bus import EventBus, Events  # noqa: E402
from slumber.core.models import Track  # noqa: E402
from tests.mocks.fake_media import FakeMediaResource  # noqa: E402


@pytest.fixture(scope="session")
def qapp():
    """Create QApplication instance for tests."""
    app = QApplication.instance()
    if app is None:
        app = QApplication([])
    yield app


@pytest.fixture
def test_config() -> SlumberConfig:
    """Configuration with short timers so tests can wait on them."""
    return SlumberConfig(
        audio=AudioConfig(default_volume=50, load_timeout_ms=5000),
        timer=TimerConfig(tick_interval_ms=10, grace_delay_ms=30, warning_threshold_seconds=10),
        controls=ControlsConfig(hide_delay_ms=20),
        logging=LoggingConfig(level="DEBUG", file=None),
    )


@pytest.fixture
def track() -> Track:
    return Track(name="Gentle Rain", audio_url="file:///tmp/slumber/rain.wav", duration_label="5:00")


@pytest.fixture
def sample_tracks() -> list[Track]:
    """Provide a five-track session."""
    return [
        Track(name=f"Track {i}", audio_url=f"file:///tmp/slumber/track_{i}.mp3")
        for i in range(5)
    ]


class MediaFactory:
    """Media factory that remembers every resource it created."""

    def __init__(self) -> None:
        self.created: list[FakeMediaResource] = []

    def __call__(self) -> FakeMediaResource:
        media = FakeMediaResource()
        self.created.append(media)
        return media

    @property
    def last(self) -> FakeMediaResource:
        return self.created[-1]


@pytest.fixture
def media_factory(qapp) -> MediaFactory:  # type: ignore
    return MediaFactory()


class EventRecorder:
    """Records every standard event emitted on a bus."""

    def __init__(self, bus: EventBus) -> None:
        self.events: list[tuple[str, dict[str, Any]]] = []
        for name, value in vars(Events).items():
            if name.isupper():
                bus.subscribe(value, self._recorder(value))

    def _recorder(self, event: str):  # type: ignore
        def record(**data: Any) -> None:
            self.events.append((event, data))

        return record

    def named(self, event: str) -> list[dict[str, Any]]:
        return [data for name, data in self.events if name == event]

    def count(self, event: str) -> int:
        return len(self.named(event))


@pytest.fixture
def event_bus() -> EventBus:
    return EventBus()


@pytest.fixture
def recorder(event_bus: EventBus) -> EventRecorder:
    return EventRecorder(event_bus)


@pytest.fixture
def session(qapp, media_factory, event_bus, test_config) -> Iterator[Any]:  # type: ignore
    """Provide a PlayerSession backed by fake media."""
    from slumber.core.player_session import PlayerSession

    player = PlayerSession(media_factory, event_bus, test_config)
    yield player
    player.close()


@pytest.fixture
def config_file(tmp_path: Path) -> Path:
    """Write a minimal config.yaml and return its path."""
    path = tmp_path / "config.yaml"
    path.write_text(
        "audio:\n"
        "  default_volume: 60\n"
        "timer:\n"
        "  grace_delay_ms: 10\n"
        "library:\n"
        "  tracks:\n"
        "    - name: Night Piano\n"
        "      audio_url: file:///tmp/slumber/piano.mp3\n"
        "      type: deepsleep\n"
        "      category: sleep\n"
        "logging:\n"
        "  level: WARNING\n"
        "  file: null\n"
    )
    return path
