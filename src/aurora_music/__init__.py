"""Aurora Music - a web music catalog with per-session playback queues."""

__version__ = "1.0.0"
