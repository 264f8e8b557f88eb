"""Report engines."""
