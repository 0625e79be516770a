"""FastAPI backend for the article assistant."""

__version__ = "0.1.0"
