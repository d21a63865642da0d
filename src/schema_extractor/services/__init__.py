"""Business logic services for schema extraction."""

from src.schema_extractor.services.diagram_preparer import prepare_diagram
from src.schema_extractor.services.mermaid_generator import generate_mermaid_erd
from src.schema_extractor.services.project_loader import ProjectLoader, ProjectSource
from src.schema_extractor.services.project_scanner import ProjectScanner
from src.schema_extractor.services.schema_graph import SchemaGraph

__all__ = [
    "prepare_diagram",
    "generate_mermaid_erd",
    "ProjectLoader",
    "ProjectSource",
    "ProjectScanner",
    "SchemaGraph",
]
