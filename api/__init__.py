"""HTTP API for the contact manager."""
