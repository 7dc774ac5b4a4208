"""Reserve study funding calculator."""

__version__ = "0.1.0"
