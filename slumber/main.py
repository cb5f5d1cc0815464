"""Headless command line player.

Plays one library track (or a raw audio locator) with an optional sleep
timer and exits when the timer's grace delay elapses, when the track ends
without looping, or when playback fails.
"""

from __future__ import annotations

import argparse
import signal
import sys
from pathlib import Path

from PySide6.QtCore import QCoreApplication

from slumber.core.config import load_config
from slumber.core.errors import InvalidTimerDuration
from slumber.core.event_bus import EventBus, Events
from slumber.core.library import TrackLibrary
from slumber.core.media import MediaResource
from slumber.core.models import NoticeKind, Track
from slumber.core.player_session import MediaFactory, PlayerSession
from slumber.utils.logger import setup_logging


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="slumber", description="Play bedtime ambience with a sleep timer."
    )
    parser.add_argument("track", nargs="?", help="Library track name or audio locator")
    parser.add_argument("--config", type=Path, default=None, help="Path to config.yaml")
    parser.add_argument("--timer", type=int, metavar="MIN", help="Start a sleep timer (minutes)")
    parser.add_argument("--volume", type=int, metavar="N", help="Volume 0-100")
    mode = parser.add_mutually_exclusive_group()
    mode.add_argument("--loop", action="store_true", help="Repeat the track")
    mode.add_argument("--shuffle", action="store_true", help="Shuffle mode")
    parser.add_argument("--list", action="store_true", help="List library tracks and exit")
    return parser


def vlc_media_factory() -> MediaResource:
    # Imported here so listing tracks works without libvlc installed
    from slumber.core.vlc_media import VlcMediaResource

    return VlcMediaResource()


def run_session(
    session: PlayerSession,
    app: QCoreApplication,
    args: argparse.Namespace,
    track: Track,
) -> int:
    """Configure ``session`` from ``args``, play ``track`` and block until done.

    Returns:
        Process exit code
    """
    bus = session.event_bus
    outcome: dict[str, int] = {}

    def finish(code: int) -> None:
        outcome.setdefault("code", code)
        app.exit(code)

    def on_notice(kind: NoticeKind, message: str) -> None:
        print(f"[{kind.value}] {message}")
        if kind is NoticeKind.ERROR:
            finish(1)

    bus.subscribe(Events.NOTIFICATION, on_notice)
    bus.subscribe(Events.TIMER_EXPIRING, lambda seconds: print(f"Leaving in {seconds}s"))
    bus.subscribe(Events.NAVIGATE_AWAY, lambda: finish(0))
    bus.subscribe(Events.TRACK_ENDED, lambda: finish(0))

    if args.volume is not None:
        session.set_volume(args.volume)
    if args.loop:
        session.mode_flags.set_loop(True)
    elif args.shuffle:
        session.mode_flags.set_shuffle(True)
    if args.timer is not None:
        try:
            session.start_timer(args.timer)
        except InvalidTimerDuration as e:
            print(f"Error: {e}")
            return 2

    if not session.open(track):
        return outcome.get("code", 1)
    # exit() before exec() is lost, so failures during open are checked here
    if "code" in outcome:
        return outcome["code"]
    return app.exec()


def main(argv: list[str] | None = None, media_factory: MediaFactory | None = None) -> int:
    """Application entry point."""
    parser = build_parser()
    args = parser.parse_args(argv)

    try:
        config = load_config(args.config)
    except FileNotFoundError as e:
        print(f"Error: {e}")
        print("Please ensure config/config.yaml exists.")
        return 1

    setup_logging(config.logging)
    library = TrackLibrary.from_config(config.library)

    if args.list:
        for track in library:
            print(f"{track.name:<24} {track.duration_label:>6}  {track.description}")
        return 0

    if not args.track:
        parser.error("a track name or audio locator is required")

    try:
        track = library.resolve(args.track)
    except KeyError:
        print(f"Error: unknown track {args.track!r} (use --list)")
        return 1

    signal.signal(signal.SIGINT, signal.SIG_DFL)
    app = QCoreApplication.instance() or QCoreApplication([sys.argv[0]])
    app.setApplicationName("slumber")

    session = PlayerSession(media_factory or vlc_media_factory, EventBus(), config)
    try:
        return run_session(session, app, args, track)
    finally:
        session.close()


if __name__ == "__main__":
    sys.exit(main())
