"""V-Streamer: FastAPI backend for a video sharing platform."""

__version__ = "1.0.0"
