"""Infrastructure layer for Postkeeper."""
