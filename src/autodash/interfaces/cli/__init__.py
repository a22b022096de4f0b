"""Command-line interface for dashboard generation."""
