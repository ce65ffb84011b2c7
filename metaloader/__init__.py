"""Metadata-driven loader for delimited text files."""
