"""Per-process network bandwidth monitor."""

__version__ = "0.1.0"
