"""Authentication core of the chat server."""

__version__ = "1.0.0"
