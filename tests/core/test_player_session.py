"""Tests for the player session wiring and teardown."""

import pytest

from slumber.core.event_bus import Events
from slumber.core.models import NoticeKind, Track


class TestOpen:
    """Opening tracks."""

    def test_open_autoplays(self, session, media_factory, recorder, track) -> None:  # type: ignore
        assert session.open(track)

        media = media_factory.last
        assert media.play_count == 1
        assert session.is_playing
        assert recorder.named(Events.TRACK_LOADED) == [{"track": track}]

        media.start()
        assert recorder.named(Events.TRACK_PLAYING) == [{"track": track}]
        assert recorder.named(Events.NOTIFICATION) == [
            {"kind": NoticeKind.SUCCESS, "message": "Now playing: Gentle Rain"}
        ]

    def test_open_without_autoplay(self, session, media_factory, track) -> None:  # type: ignore
        session.open(track, autoplay=False)
        assert media_factory.last.play_count == 0
        assert not session.is_playing

    def test_switching_tracks_keeps_timer(self, session, media_factory, sample_tracks) -> None:  # type: ignore
        session.open(sample_tracks[0])
        session.start_timer(15)
        first = media_factory.last

        session.open(sample_tracks[1])
        second = media_factory.last

        assert first.released
        assert not second.released
        assert session.track == sample_tracks[1]
        assert session.timer.is_active
        assert session.timer.remaining_seconds == 900

        first.start()
        first.finish()
        assert session.is_playing
        assert second.play_count == 1

    def test_single_listener_set_after_switches(self, session, media_factory, recorder, sample_tracks) -> None:  # type: ignore
        for track in sample_tracks:
            session.open(track)
        media = media_factory.last
        media.load_metadata(100.0)
        before = recorder.count(Events.POSITION_UPDATE)

        media.advance(10.0)

        assert recorder.count(Events.POSITION_UPDATE) == before + 1
        assert all(m.released for m in media_factory.created[:-1])

    def test_failure_is_notified_once(self, session, media_factory, recorder, track) -> None:  # type: ignore
        from slumber.core.errors import FAILURE_MESSAGES, MediaFailure

        session.open(track)
        media = media_factory.last
        media.fail(MediaFailure.BLOCKED)
        media.fail(MediaFailure.BLOCKED)

        assert not session.is_playing
        assert recorder.named(Events.NOTIFICATION) == [
            {"kind": NoticeKind.ERROR, "message": FAILURE_MESSAGES[MediaFailure.BLOCKED]}
        ]
        assert recorder.count(Events.TRACK_PAUSED) == 1


class TestInteraction:
    """User intent routed through the session."""

    def test_actions_reshow_controls(self, session, track) -> None:  # type: ignore
        session.open(track)
        session.controls.hide()

        session.set_volume(40)

        assert session.controls.is_visible
        assert session.controls.hide_pending
        assert session.controller.state.volume_percent == 40

    def test_successful_play_reshows_controls(self, session, media_factory, track) -> None:  # type: ignore
        session.open(track)
        session.controls.hide()

        media_factory.last.start()

        assert session.controls.is_visible

    def test_controls_hide_when_idle(self, qtbot, session, recorder, track) -> None:  # type: ignore
        session.open(track)

        qtbot.waitUntil(lambda: not session.controls.is_visible, timeout=1000)

        assert recorder.named(Events.CONTROLS_VISIBILITY_CHANGED)[-1] == {"visible": False}

    def test_mode_toggles(self, session, recorder) -> None:  # type: ignore
        session.toggle_loop()
        session.toggle_shuffle()

        assert session.mode_flags.shuffle
        assert not session.mode_flags.loop
        assert recorder.named(Events.MODE_FLAGS_CHANGED) == [
            {"shuffle": False, "loop": True},
            {"shuffle": True, "loop": False},
        ]

    def test_timer_notices(self, session, recorder) -> None:  # type: ignore
        session.select_timer(30)
        session.start_timer()
        session.stop_timer()

        messages = [n["message"] for n in recorder.named(Events.NOTIFICATION)]
        assert messages == ["Sleep timer set for 30 minutes", "Sleep timer cancelled"]
        assert recorder.named(Events.TIMER_STARTED) == [{"minutes": 30}]
        assert recorder.count(Events.TIMER_STOPPED) == 1

    def test_seek_before_metadata_is_ignored(self, session, media_factory, track) -> None:  # type: ignore
        session.open(track)
        session.seek(12.0)
        session.seek_fraction(0.5)

        assert media_factory.last.seeks == []
        assert session.controller.state.position_seconds == 0.0


class TestEndedReconciliation:
    """End of track against the timer and the loop flag."""

    def test_ended_stops_without_loop(self, session, media_factory, recorder, track) -> None:  # type: ignore
        session.open(track)
        media = media_factory.last
        media.start()
        media.load_metadata(60.0)
        media.advance(60.0)

        media.finish()

        assert not session.is_playing
        assert session.controller.state.position_seconds == 0.0
        assert recorder.count(Events.TRACK_ENDED) == 1

    def test_ended_loops_while_timer_active(self, session, media_factory, track) -> None:  # type: ignore
        session.mode_flags.set_shuffle(True)
        session.open(track)
        session.start_timer(5)
        media = media_factory.last
        media.start()
        assert not session.mode_flags.loop

        media.finish()

        assert session.is_playing
        assert media.play_count == 2
        assert media.seeks == [0.0]

    def test_ended_loops_with_loop_flag(self, session, media_factory, track) -> None:  # type: ignore
        session.toggle_loop()
        session.open(track)
        media = media_factory.last
        media.start()

        media.finish()

        assert session.is_playing
        assert media.play_count == 2

    def test_expiry_stops_playback(self, session, media_factory, recorder, track) -> None:  # type: ignore
        session.open(track)
        media = media_factory.last
        media.start()
        session.start_timer(5)

        while session.timer.is_active:
            session.timer.tick()

        assert not session.is_playing
        assert media.pause_count == 1
        assert recorder.count(Events.TIMER_EXPIRED) == 1


class TestClose:
    """Teardown cancels every timer and listener in one step."""

    def test_close_cancels_timers(self, qtbot, session, media_factory, track) -> None:  # type: ignore
        session.open(track)
        media_factory.last.start()
        session.start_timer(5)
        session.interact()
        assert session.timer.is_ticking
        assert session.controls.hide_pending

        ticks: list[int] = []
        hides: list[bool] = []
        session.timer.ticked.connect(ticks.append)
        session.controls.visibility_changed.connect(hides.append)

        session.close()
        qtbot.wait(150)

        assert ticks == []
        assert hides == []
        assert not session.timer.is_ticking
        assert not session.timer.navigation_pending
        assert not session.controls.hide_pending
        assert not session.controller.load_pending
        assert media_factory.last.released

    def test_close_during_grace_cancels_navigation(self, qtbot, session, recorder, track) -> None:  # type: ignore
        session.open(track)
        session.start_timer(5)
        while session.timer.is_active:
            session.timer.tick()
        assert session.timer.navigation_pending

        navigated: list[bool] = []
        session.navigate_away.connect(lambda: navigated.append(True))
        session.close()
        qtbot.wait(150)

        assert navigated == []
        assert recorder.count(Events.NAVIGATE_AWAY) == 0

    def test_late_media_events_do_not_resurrect(self, session, media_factory, recorder, track) -> None:  # type: ignore
        session.open(track)
        media = media_factory.last
        session.close()
        emitted = len(recorder.events)

        media.start()
        media.load_metadata(90.0)
        media.advance(30.0)
        media.finish()

        assert not session.is_playing
        assert len(recorder.events) == emitted

    def test_operations_after_close_are_noops(self, session, media_factory, recorder, track) -> None:  # type: ignore
        session.open(track)
        session.close()
        emitted = len(recorder.events)
        created = len(media_factory.created)

        assert not session.open(track)
        session.play()
        session.toggle_play()
        session.start_timer(5)
        session.toggle_loop()
        session.set_volume(10)

        assert len(media_factory.created) == created
        assert len(recorder.events) == emitted
        assert not session.timer.is_active

    def test_close_emits_once(self, session, recorder) -> None:  # type: ignore
        closed: list[bool] = []
        session.closed.connect(lambda: closed.append(True))

        session.close()
        session.close()

        assert closed == [True]
        assert recorder.count(Events.PLAYER_CLOSED) == 1


@pytest.mark.parametrize("minutes", [5, 10, 15, 30, 45, 60])
def test_every_preset_starts(session, minutes) -> None:  # type: ignore
    session.start_timer(minutes)
    assert session.timer.remaining_seconds == minutes * 60


def test_blank_track_reports_invalid_link(session, recorder) -> None:  # type: ignore
    assert not session.open(Track(name="Broken", audio_url=""))
    assert recorder.named(Events.NOTIFICATION) == [
        {"kind": NoticeKind.ERROR, "message": "Invalid audio link"}
    ]
