"""cartsync - session cart kept in sync with its snapshot and with stock."""

__version__ = "0.1.0"
