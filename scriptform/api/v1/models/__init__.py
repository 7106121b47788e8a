"""OpenAPI models."""
