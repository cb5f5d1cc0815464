"""Shuffle/loop playback mode flags."""

from PySide6.QtCore import QObject, Signal


class PlaybackModeFlags(QObject):
    """Mutually exclusive shuffle and loop preferences.

    Enabling one flag clears the other; disabling either leaves the other
    untouched.
    """

    changed = Signal(bool, bool)  # shuffle, loop

    def __init__(self, shuffle: bool = False, loop: bool = False) -> None:
        """Initialize mode flags.

        Args:
            shuffle: Initial shuffle preference
            loop: Initial loop preference (ignored if shuffle is set)
        """
        super().__init__()
        self._shuffle = shuffle
        self._loop = loop and not shuffle

    @property
    def shuffle(self) -> bool:
        return self._shuffle

    @property
    def loop(self) -> bool:
        return self._loop

    def set_shuffle(self, enabled: bool) -> None:
        """Set shuffle mode, clearing loop when enabling."""
        self._apply(enabled, self._loop and not enabled)

    def set_loop(self, enabled: bool) -> None:
        """Set loop mode, clearing shuffle when enabling."""
        self._apply(self._shuffle and not enabled, enabled)

    def toggle_shuffle(self) -> None:
        self.set_shuffle(not self._shuffle)

    def toggle_loop(self) -> None:
        self.set_loop(not self._loop)

    def apply_timer_default(self) -> bool:
        """Force loop on when neither flag is set.

        A running sleep timer should keep an ended track playing rather
        than stop on it.

        Returns:
            True if loop was forced on
        """
        if self._shuffle or self._loop:
            return False
        self.set_loop(True)
        return True

    def _apply(self, shuffle: bool, loop: bool) -> None:
        if (shuffle, loop) == (self._shuffle, self._loop):
            return
        self._shuffle = shuffle
        self._loop = loop
        self.changed.emit(shuffle, loop)
