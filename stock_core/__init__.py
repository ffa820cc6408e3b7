"""Domain and data layer of the stock management service."""
