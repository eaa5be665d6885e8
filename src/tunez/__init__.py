"""tunez: mpv-driven playback engine and persistent play queue for a terminal music player."""

__version__ = "0.4.0"
