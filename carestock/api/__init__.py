"""HTTP API for the CareStock ledger."""
