"""Request/response schemas for the HTTP API (pydantic v2)."""
