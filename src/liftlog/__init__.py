"""liftlog: weekly workout programs, live sessions and strength progress."""

__version__ = "0.1.0"
