"""Download list generator for the console's title/video catalog channel."""

__version__ = "0.1.0"
