"""Postkeeper - front-matter tooling for a Markdown blog post collection."""

__version__ = "0.1.0"
