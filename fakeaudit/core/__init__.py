"""Scan pipeline, scoring and reporting."""
