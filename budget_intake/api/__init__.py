"""HTTP API package for the budget intake service."""
