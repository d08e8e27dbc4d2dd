"""Command-line entry points for benchbot."""
