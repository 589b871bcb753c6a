"""IT QuickFix: macOS support and maintenance toolkit."""

__version__ = "1.2.0"
