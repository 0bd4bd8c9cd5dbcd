"""API Schemas — Pydantic models validating request and response bodies."""
