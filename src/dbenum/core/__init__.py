"""Core mapping, loading and compilation for dbenum."""
