"""HTTP API for plan synthesis."""
