"""Command line interface for prstore."""
