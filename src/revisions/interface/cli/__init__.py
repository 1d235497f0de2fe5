"""Command-line interface for Revisions."""
