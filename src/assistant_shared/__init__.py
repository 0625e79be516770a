"""Code shared by the API backend, the content indexer and the chat client."""
