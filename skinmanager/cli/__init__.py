"""Command line interface for skinmanager."""
