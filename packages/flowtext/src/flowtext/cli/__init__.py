"""Command line demos for the text reveal engines."""
