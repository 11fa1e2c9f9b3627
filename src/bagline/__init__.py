"""Production tracking dashboard for the bagging lines and packaging team."""

__version__ = "0.1.0"
