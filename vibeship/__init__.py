"""VibeShip backend: project tracking API for AI coding assistants."""

__version__ = "0.1.0"
