"""Parse and query Open Build Service build logs."""

__version__ = "0.1.0"
