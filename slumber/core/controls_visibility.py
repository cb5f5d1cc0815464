"""Auto-hiding state of the on-screen control overlay."""

import logging

from PySide6.QtCore import QObject, QTimer, Signal

from slumber.core.constants import CONTROLS_HIDE_DELAY_MS


class ControlsVisibility(QObject):
    """Show the controls on interaction, hide them after an idle period.

    A single-shot ``QTimer`` holds the pending hide and every interaction
    restarts it.
    """

    visibility_changed = Signal(bool)

    def __init__(
        self, hide_delay_ms: int = CONTROLS_HIDE_DELAY_MS, parent: QObject | None = None
    ) -> None:
        """Initialize controls visibility."""
        super().__init__(parent)
        self._visible = True
        self._disposed = False
        self._hide_timer = QTimer(self)
        self._hide_timer.setSingleShot(True)
        self._hide_timer.setInterval(hide_delay_ms)
        self._hide_timer.timeout.connect(self._on_hide_timeout)

    @property
    def is_visible(self) -> bool:
        return self._visible

    @property
    def hide_pending(self) -> bool:
        return self._hide_timer.isActive()

    def show(self) -> None:
        """Show the controls and reschedule the idle hide."""
        if self._disposed:
            return
        self._hide_timer.start()
        self._set_visible(True)

    def interact(self) -> None:
        """Record a user interaction."""
        self.show()

    def hide(self) -> None:
        """Hide the controls now."""
        self._hide_timer.stop()
        if self._disposed:
            return
        self._set_visible(False)

    def dispose(self) -> None:
        """Cancel the pending hide; later calls become no-ops."""
        self._hide_timer.stop()
        self._disposed = True

    def _on_hide_timeout(self) -> None:
        if self._disposed:
            return
        logging.debug("[Controls] Idle, hiding controls")
        self._set_visible(False)

    def _set_visible(self, visible: bool) -> None:
        if visible == self._visible:
            return
        self._visible = visible
        self.visibility_changed.emit(visible)
