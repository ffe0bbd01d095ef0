"""TuneBox: playlists of uploaded audio with automatic tag extraction."""

__version__ = "1.0.0"
