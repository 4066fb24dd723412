"""Chat session storage, kept outside the retrieval core."""
