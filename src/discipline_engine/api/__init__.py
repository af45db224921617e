"""HTTP API for the discipline engine."""
