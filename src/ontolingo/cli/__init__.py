"""Command line interface for Ontolingo."""
