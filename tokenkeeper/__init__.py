"""Session token lifecycle management for dashboard clients."""

__version__ = "0.1.0"
