"""lmreport - license-manager status report extraction."""

__version__ = "0.1.0"
