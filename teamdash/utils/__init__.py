"""Shared helpers: timestamp parsing and error-handling patterns."""
