"""Tests for scoped media listener attachment."""

from slumber.core.media import MediaResource, attach_listeners
from tests.mocks.fake_media import FakeMediaResource


class RecordingListener:
    def __init__(self) -> None:
        self.calls: list[tuple] = []

    def on_metadata_loaded(self, duration: float) -> None:
        self.calls.append(("metadata", duration))

    def on_time_update(self, position: float) -> None:
        self.calls.append(("time", position))

    def on_ended(self) -> None:
        self.calls.append(("ended",))

    def on_play_started(self, attempt: int) -> None:
        self.calls.append(("started", attempt))

    def on_play_failed(self, attempt: int, failure: str, detail: str) -> None:
        self.calls.append(("failed", attempt, failure))


class TestAttachListeners:
    """Test attach_listeners."""

    def test_routes_every_signal(self, qapp) -> None:  # type: ignore
        media = FakeMediaResource()
        listener = RecordingListener()
        attach_listeners(media, listener)

        media.load_metadata(10.0)
        media.advance(1.0)
        media.play()
        media.start()
        media.fail()
        media.finish()

        assert listener.calls == [
            ("metadata", 10.0),
            ("time", 1.0),
            ("started", 1),
            ("failed", 1, "generic"),
            ("ended",),
        ]

    def test_disposer_detaches_and_is_idempotent(self, qapp) -> None:  # type: ignore
        media = FakeMediaResource()
        listener = RecordingListener()
        dispose = attach_listeners(media, listener)

        dispose()
        dispose()
        media.advance(3.0)
        media.finish()

        assert listener.calls == []

    def test_two_attachments_are_independent(self, qapp) -> None:  # type: ignore
        media = FakeMediaResource()
        first = RecordingListener()
        second = RecordingListener()
        dispose_first = attach_listeners(media, first)
        attach_listeners(media, second)

        dispose_first()
        media.advance(2.0)

        assert first.calls == []
        assert second.calls == [("time", 2.0)]

    def test_base_resource_is_abstract(self, qapp) -> None:  # type: ignore
        media = MediaResource()
        assert media.current_attempt == 0
        try:
            media.play()
        except NotImplementedError:
            pass
        else:
            raise AssertionError("MediaResource.play should be abstract")
