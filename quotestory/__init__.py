"""Quote story renderer: turns a book cover and a quote into a social story image."""

__version__ = "0.2.0"
