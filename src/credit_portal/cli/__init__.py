"""Command line interface (``credits``)."""
