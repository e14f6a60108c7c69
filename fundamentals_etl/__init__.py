"""Annual fundamentals ETL and metrics service."""

__version__ = "0.1.0"
