"""Authentication Key console API."""

__version__ = "0.1.0"
