"""HTTP API for Snake Arena."""
