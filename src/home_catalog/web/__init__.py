"""HTTP API for the listing catalog."""
