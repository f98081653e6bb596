"""Command line interface for Cranium."""
