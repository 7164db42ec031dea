"""polisim — turn-based political career simulation core."""

__version__ = "0.1.0"
