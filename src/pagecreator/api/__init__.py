"""HTTP API for registered pages."""
