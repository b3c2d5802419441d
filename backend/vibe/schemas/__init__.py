"""Pydantic request and response schemas, serialized as camelCase JSON."""
