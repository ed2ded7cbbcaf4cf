"""queries - Offline natural language understanding engine."""

__version__ = "0.8.3"
