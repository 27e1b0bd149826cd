"""Command line interface for bankimport."""
