"""Logging, request context, timing and FastAPI helpers."""
