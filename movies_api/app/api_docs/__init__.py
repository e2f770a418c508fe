"""OpenAPI document generation from the pydantic schemas."""
