"""Schema extractor service FastAPI application."""
from __future__ import annotations

import time
from contextlib import asynccontextmanager
from typing import AsyncGenerator

from fastapi import FastAPI

from src.shared.config import SchemaExtractorConfig
from src.shared.constants import SCHEMA_EXTRACTOR_SERVICE_NAME, VERSION
from src.shared.errors import register_exception_handlers
from src.shared.logging import TraceIDMiddleware, setup_logging

# Routers
from src.schema_extractor.routers.health import router as health_router
from src.schema_extractor.routers.schema import router as schema_router

config = SchemaExtractorConfig()
logger = setup_logging(SCHEMA_EXTRACTOR_SERVICE_NAME, config.log_level)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """Application lifespan: record start time and configuration."""
    app.state.start_time = time.time()
    app.state.config = config

    logger.info(
        "Service started: name=%s version=%s prefix=%r workers=%d",
        SCHEMA_EXTRACTOR_SERVICE_NAME, VERSION,
        config.object_name_prefix, config.max_workers,
    )
    yield

    logger.info("Service stopped: name=%s", SCHEMA_EXTRACTOR_SERVICE_NAME)


app = FastAPI(
    title="AL Schema Explorer",
    version=VERSION,
    lifespan=lifespan,
)

app.add_middleware(TraceIDMiddleware)
register_exception_handlers(app)

app.include_router(health_router)
app.include_router(schema_router)
