"""Health check router."""
from __future__ import annotations

import time
from pathlib import Path

from fastapi import APIRouter, Request

from src.shared.constants import SCHEMA_EXTRACTOR_SERVICE_NAME, VERSION
from src.shared.models.common import HealthStatus

router = APIRouter(tags=["health"])


@router.get("/api/health")
async def health(request: Request) -> HealthStatus:
    """Health check reporting uptime and the projects root."""
    config = getattr(request.app.state, "config", None)
    details: dict = {}
    status = "healthy"

    if config is not None:
        root = Path(config.projects_root)
        details["projects_root"] = str(root)
        details["object_name_prefix"] = config.object_name_prefix
        if not root.is_dir():
            status = "degraded"
    else:
        details["config"] = "not_initialized"
        status = "degraded"

    start_time = getattr(request.app.state, "start_time", time.time())
    return HealthStatus(
        status=status,
        service_name=SCHEMA_EXTRACTOR_SERVICE_NAME,
        version=VERSION,
        uptime_seconds=time.time() - start_time,
        details=details,
    )
