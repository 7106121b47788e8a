"""Resource helpers."""
