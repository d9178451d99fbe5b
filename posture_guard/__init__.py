"""Monitor de postura en tiempo real basado en estimación de pose."""

__version__ = "0.1.0"
