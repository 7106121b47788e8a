"""Schema 定义(pydantic)."""
