"""Schema scan router: diagram, Mermaid and linked-entity endpoints."""
from __future__ import annotations

import asyncio

from fastapi import APIRouter, Request
from fastapi.responses import PlainTextResponse

from src.schema_extractor.services.diagram_preparer import prepare_diagram
from src.schema_extractor.services.mermaid_generator import generate_mermaid_erd
from src.schema_extractor.services.project_scanner import ProjectScanner
from src.schema_extractor.services.schema_graph import SchemaGraph
from src.shared.config import SchemaExtractorConfig
from src.shared.constants import DEFAULT_PROJECT_NAME
from src.shared.errors import NotFoundError
from src.shared.models.schema import (
    DiagramData,
    LinkedRequest,
    LinkedResponse,
    ProjectScanResult,
    ScanRequest,
    ScanResponse,
)

router = APIRouter(prefix="/api/schema", tags=["schema"])


def _scanner_for(request: Request, body: ScanRequest) -> ProjectScanner:
    config: SchemaExtractorConfig = getattr(
        request.app.state, "config", None
    ) or SchemaExtractorConfig()
    prefix = (
        body.object_name_prefix
        if body.object_name_prefix is not None
        else config.object_name_prefix
    )
    return ProjectScanner.with_prefix(prefix, max_workers=config.max_workers)


async def _scan(request: Request, body: ScanRequest) -> tuple[ProjectScanResult, DiagramData]:
    scanner = _scanner_for(request, body)

    def _run() -> tuple[ProjectScanResult, DiagramData]:
        scan = scanner.scan(body.files, project_name=body.project_name)
        return scan, prepare_diagram(scan)

    return await asyncio.to_thread(_run)


@router.post("/scan")
async def scan_sources(request: Request, body: ScanRequest) -> ScanResponse:
    """Scan the posted sources and return the diagram with graph metrics."""
    scan, diagram = await _scan(request, body)
    return ScanResponse(
        project_name=body.project_name or DEFAULT_PROJECT_NAME,
        diagram=diagram,
        analysis=SchemaGraph(diagram).analyze(),
        errors=scan.errors,
    )


@router.post("/mermaid", response_class=PlainTextResponse)
async def mermaid_sources(request: Request, body: ScanRequest) -> str:
    """Scan the posted sources and return Mermaid ``erDiagram`` text."""
    _, diagram = await _scan(request, body)
    return generate_mermaid_erd(diagram)


@router.post("/linked")
async def linked_entities(request: Request, body: LinkedRequest) -> LinkedResponse:
    """Return the entities directly related to ``body.entity``."""
    _, diagram = await _scan(request, body)
    entity = diagram.find_entity(body.entity)
    if entity is None:
        raise NotFoundError(f"Entity {body.entity!r} not found in diagram")
    return LinkedResponse(
        entity=entity.name,
        linked=SchemaGraph(diagram).linked_entities(entity.name),
    )
