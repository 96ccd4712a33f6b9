"""Infrastructure layer: SQL generation helpers."""
