"""Timeline and subtitle rendering."""
