"""CareStock inventory ledger and forecasting engine."""

__version__ = "1.0.0"
