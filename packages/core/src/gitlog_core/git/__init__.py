"""git CLI backend and its records."""
