"""Trip recording, statistics and replay for field response missions."""

__version__ = "0.1.0"
