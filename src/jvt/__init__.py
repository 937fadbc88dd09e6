"""jvt: browse concatenated JSON records in the terminal."""

__version__ = "0.1.0"
