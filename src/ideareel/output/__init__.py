"""Downloadable output renderers."""
