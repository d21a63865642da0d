"""MCP server for the AL schema explorer.

Exposes project scanning, Mermaid rendering and linked-entity lookup as
MCP tools over stdio transport.  Project paths are resolved relative to
``PROJECTS_ROOT``.

Environment variables (typically set via .mcp.json):
    PROJECTS_ROOT       -- Base directory for relative project paths.
    OBJECT_NAME_PREFIX  -- Default prefix stripped from object names.
    MAX_WORKERS         -- Parallel parse workers per scan.

Usage:
    python -m src.schema_extractor.mcp_server
"""
from __future__ import annotations

import logging
from pathlib import Path
from typing import Any

from mcp.server.fastmcp import FastMCP

from src.schema_extractor.services.diagram_preparer import prepare_diagram
from src.schema_extractor.services.mermaid_generator import generate_mermaid_erd
from src.schema_extractor.services.project_loader import ProjectLoader
from src.schema_extractor.services.project_scanner import ProjectScanner
from src.schema_extractor.services.schema_graph import SchemaGraph
from src.shared.config import SchemaExtractorConfig
from src.shared.constants import DEFAULT_PROJECT_NAME, NOT_AL_PROJECT_WARNING
from src.shared.errors import AppError, ValidationError
from src.shared.models.schema import DiagramData, ProjectScanResult

# ---------------------------------------------------------------------------
# Logging
# ---------------------------------------------------------------------------

logger = logging.getLogger("schema_extractor.mcp")

# ---------------------------------------------------------------------------
# Module-level initialisation
# ---------------------------------------------------------------------------

_config = SchemaExtractorConfig()
_loader = ProjectLoader(
    source_glob=_config.source_glob,
    manifest_name=_config.manifest_name,
    exclude_dirs=_config.exclude_dir_list,
)

# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


def _resolve_project(project_path: str) -> Path:
    """Resolve *project_path* against ``PROJECTS_ROOT``.

    Raises:
        ValidationError: If the resolved path lies outside ``PROJECTS_ROOT``.
    """
    root = Path(_config.projects_root).resolve()
    path = Path(project_path)
    resolved = (path if path.is_absolute() else root / path).resolve()
    if not resolved.is_relative_to(root):
        raise ValidationError(f"Project path is outside PROJECTS_ROOT: {project_path}")
    return resolved


def _scan_project(
    project_path: str, object_name_prefix: str | None
) -> tuple[ProjectScanResult, DiagramData]:
    """Load and scan a project; loader errors are prepended to the result.

    A directory without the manifest or any source file gets a leading
    warning but is still scanned.
    """
    source = _loader.load(_resolve_project(project_path))
    prefix = (
        object_name_prefix
        if object_name_prefix is not None
        else _config.object_name_prefix
    )
    scanner = ProjectScanner.with_prefix(prefix, max_workers=_config.max_workers)
    scan = scanner.scan(
        source.files,
        project_name=source.project_name,
        manifest=source.manifest,
        root=source.root,
    )
    scan.errors[:0] = source.errors
    if not _loader.detect_project(source.root):
        scan.errors.insert(0, NOT_AL_PROJECT_WARNING)
    return scan, prepare_diagram(scan)


# ---------------------------------------------------------------------------
# MCP server
# ---------------------------------------------------------------------------

mcp = FastMCP("AL Schema Explorer")


@mcp.tool(name="scan_project")
def scan_project(
    project_path: str,
    object_name_prefix: str | None = None,
) -> dict[str, Any]:
    """Scan an AL project and return its entity-relationship diagram.

    Args:
        project_path: Project directory, absolute or relative to
                      ``PROJECTS_ROOT``.
        object_name_prefix: Prefix stripped from names; defaults to
                            ``OBJECT_NAME_PREFIX``.

    Returns:
        A dictionary with keys: projectName, diagram (entities and
        relations), analysis, errors.
    """
    try:
        scan, diagram = _scan_project(project_path, object_name_prefix)
        return {
            "projectName": scan.project_name or DEFAULT_PROJECT_NAME,
            "diagram": diagram.model_dump(by_alias=True),
            "analysis": SchemaGraph(diagram).analyze().model_dump(by_alias=True),
            "errors": scan.errors,
        }
    except AppError as exc:
        return {"error": exc.detail}
    # Top-level handler: broad catch intentional
    except Exception as exc:
        logger.exception("Unexpected error scanning project: %s", project_path)
        return {"error": str(exc)}


@mcp.tool(name="generate_mermaid")
def generate_mermaid(
    project_path: str,
    object_name_prefix: str | None = None,
) -> dict[str, Any]:
    """Render an AL project's schema as Mermaid ``erDiagram`` source.

    Returns:
        A dictionary with keys: mermaid (str), errors (list[str]).
    """
    try:
        scan, diagram = _scan_project(project_path, object_name_prefix)
        return {"mermaid": generate_mermaid_erd(diagram), "errors": scan.errors}
    except AppError as exc:
        return {"error": exc.detail}
    # Top-level handler: broad catch intentional
    except Exception as exc:
        logger.exception("Unexpected error rendering Mermaid for: %s", project_path)
        return {"error": str(exc)}


@mcp.tool(name="find_linked_entities")
def find_linked_entities(
    project_path: str,
    entity: str,
    object_name_prefix: str | None = None,
) -> dict[str, Any]:
    """List the entities directly related to *entity* in either direction.

    Returns:
        A dict with ``entity`` and ``linked``, or an error dict if the
        entity is not part of the diagram.
    """
    try:
        _, diagram = _scan_project(project_path, object_name_prefix)
        found = diagram.find_entity(entity)
        if found is None:
            return {"error": f"Entity {entity!r} not found"}
        return {
            "entity": found.name,
            "linked": SchemaGraph(diagram).linked_entities(found.name),
        }
    except AppError as exc:
        return {"error": exc.detail}
    # Top-level handler: broad catch intentional
    except Exception as exc:
        logger.exception("Unexpected error finding entities linked to: %s", entity)
        return {"error": str(exc)}


# ---------------------------------------------------------------------------
# Entrypoint
# ---------------------------------------------------------------------------

if __name__ == "__main__":
    mcp.run()
