"""Command-line interface for Jenkins CLI."""
