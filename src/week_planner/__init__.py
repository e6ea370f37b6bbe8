"""Weekly production/invoicing planning: allocation and load analysis."""

__version__ = "0.1.0"
