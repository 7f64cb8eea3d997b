"""Domain layer for Postkeeper."""
