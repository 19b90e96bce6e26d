"""ruido: audio sample library backend."""

__version__ = "0.1.0"
