"""Shared helpers: logging, errors and output parsing."""
