"""Assessment deadline extraction from university unit outlines."""

__version__ = "0.1.0"
