"""FastAPI routers for the schema extractor service."""
