"""flagcheck - constraint checking and auto-correction for runtime tuning flags."""

__version__ = "0.1.0"
