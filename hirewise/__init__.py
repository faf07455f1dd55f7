"""HireWise: job board and resume platform backend."""

__version__ = "0.1.0"
