"""Service layer for the finance chart API."""
