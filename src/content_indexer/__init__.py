"""Offline pipeline that indexes CMS articles into the vector index."""
