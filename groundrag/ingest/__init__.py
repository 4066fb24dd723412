"""Corpus loading, the in-memory chunk store, and query embedding."""
