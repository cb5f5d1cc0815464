"""Shared constants for the Slumber player."""

TIMER_PRESETS: tuple[int, ...] = (5, 10, 15, 30, 45, 60)
"""Sleep timer durations offered to the user (minutes)."""

DEFAULT_TIMER_MINUTES = 10

# Timer constants
TICK_INTERVAL_MS = 1000
"""Sleep timer countdown granularity."""

GRACE_DELAY_MS = 2000
"""Delay between timer expiry and the navigation-away event."""

EXPIRY_WARNING_SECONDS = 10
"""Remaining seconds below which the pending navigation is announced."""

CONTROLS_HIDE_DELAY_MS = 3000
"""Idle time before the control overlay hides."""

LOAD_TIMEOUT_MS = 5000
"""Time a play attempt may stay unresolved before it is failed."""

DEFAULT_VOLUME = 80
