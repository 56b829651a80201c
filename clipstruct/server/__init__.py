"""HTTP API: FastAPI app, pydantic models and the in-memory analysis store."""
