"""Terminal client for the article assistant API."""
