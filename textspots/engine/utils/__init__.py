"""Font resolution helpers for the text metrics provider."""
