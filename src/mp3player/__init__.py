"""mp3player - command-line audio playback with seek, trim, repeat and volume control."""

__version__ = "0.1.0"
