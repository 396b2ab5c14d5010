"""Narration timing and text alignment."""
