"""Command-line maintenance tools for reformHub."""
