"""Command line interface for vestvault."""
