"""HTTP API for Chrysalis."""
