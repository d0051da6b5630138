"""Configuration and console utilities."""
