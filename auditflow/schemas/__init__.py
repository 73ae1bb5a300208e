"""API request/response schemas (pydantic v2)."""
