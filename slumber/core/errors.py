"""Exception hierarchy and media failure taxonomy.

Media failures never propagate out of the player: the controller catches
them at the reconciliation boundary, maps them to a ``MediaFailure``
category and hands a notice to the notification sink.
"""

from enum import Enum


class MediaFailure(Enum):
    """Categories of media failure, as reported by a media resource."""

    UNSUPPORTED = "unsupported"
    BLOCKED = "blocked"
    ABORTED = "aborted"
    TIMEOUT = "timeout"
    INVALID_SOURCE = "invalid_source"
    GENERIC = "generic"


FAILURE_MESSAGES: dict[MediaFailure, str] = {
    MediaFailure.UNSUPPORTED: "Audio format not supported, please check the audio file format",
    MediaFailure.BLOCKED: "Playback was blocked, please interact with the page and retry",
    MediaFailure.ABORTED: "Audio loading was interrupted",
    MediaFailure.TIMEOUT: "Audio loading timed out, please check that the audio file exists",
    MediaFailure.INVALID_SOURCE: "Invalid audio link",
    MediaFailure.GENERIC: "Playback failed, please check that the audio file exists",
}

# Names raised by browser-style media stacks.
_ERROR_NAMES: dict[str, MediaFailure] = {
    "NotSupportedError": MediaFailure.UNSUPPORTED,
    "NotAllowedError": MediaFailure.BLOCKED,
    "AbortError": MediaFailure.ABORTED,
    "TimeoutError": MediaFailure.TIMEOUT,
}


class SlumberError(Exception):
    """Base exception for all player errors."""

    pass


class MediaError(SlumberError):
    """A media resource failed to load or play."""

    failure = MediaFailure.GENERIC

    def __init__(self, detail: str = "") -> None:
        super().__init__(detail or FAILURE_MESSAGES[self.failure])
        self.detail = detail


class MediaUnsupportedError(MediaError):
    """The resource cannot be decoded by the host platform."""

    failure = MediaFailure.UNSUPPORTED


class MediaBlockedError(MediaError):
    """Playback start was refused by platform policy."""

    failure = MediaFailure.BLOCKED


class MediaAbortedError(MediaError):
    """Load or play was interrupted."""

    failure = MediaFailure.ABORTED


class MediaTimeoutError(MediaError):
    """A play attempt did not resolve in time."""

    failure = MediaFailure.TIMEOUT


class InvalidSourceError(MediaError):
    """The track has no usable locator."""

    failure = MediaFailure.INVALID_SOURCE


class InvalidTimerDuration(SlumberError, ValueError):
    """A sleep timer duration outside the offered presets."""

    pass


def classify_error(error: BaseException | str) -> MediaFailure:
    """Map a backend exception (or its name) to a failure category."""
    if isinstance(error, MediaError):
        return error.failure
    if isinstance(error, TimeoutError):
        return MediaFailure.TIMEOUT
    name = error if isinstance(error, str) else type(error).__name__
    return _ERROR_NAMES.get(name, MediaFailure.GENERIC)


def failure_message(failure: MediaFailure) -> str:
    """User-facing message for a failure category."""
    return FAILURE_MESSAGES[failure]
