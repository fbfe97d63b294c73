"""awaitguard — flags un-awaited async calls inside async functions."""

__version__ = "1.0.0"
