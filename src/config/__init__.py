"""Configuration package for the finance chart service."""
