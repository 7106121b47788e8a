"""HTTP API 边界."""
