"""Player core: playback, sleep timer, mode flags and controls."""
