"""Image generation scheduling."""
