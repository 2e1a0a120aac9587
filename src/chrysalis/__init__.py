"""Chrysalis: link submissions that grow up through votes."""

__version__ = "0.1.0"
