"""Command line interface for terratin."""
