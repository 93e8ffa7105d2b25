"""Key-value HTTP service with sliding-window admission control."""

__version__ = "0.1.0"
