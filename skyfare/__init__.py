"""skyfare - GDS fare search, markup and fare-calendar engine."""

__version__ = "0.1.0"
