"""Command line tools for the extension field engine."""
