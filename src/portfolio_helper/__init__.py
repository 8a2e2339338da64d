"""Portfolio Helper: live portfolio valuation from local data files."""

__version__ = "0.1.0"
