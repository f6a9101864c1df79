"""User-account backend for a video-sharing application."""

__version__ = "0.1.0"
