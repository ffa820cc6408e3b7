"""HTTP API of the stock management service."""
