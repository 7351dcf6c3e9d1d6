"""Command-line interface for dbenum."""
