"""FastAPI application for parkrun-helper."""
