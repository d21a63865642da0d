"""Projection of a scan result into the presentation graph.

This module is a pure function with no global state.
"""
from __future__ import annotations

from src.shared.models.schema import (
    DiagramData,
    DiagramEntity,
    DiagramField,
    DiagramRelation,
    ProjectScanResult,
    TableObject,
)


def prepare_diagram(scan: ProjectScanResult) -> DiagramData:
    """Build the ``{entities, relations}`` graph consumed by renderers.

    Entities are all base tables plus extensions of tables that are not
    part of the project, keyed by lowercased entity name (first wins).
    Relations are deduplicated on (source, target, source field) and
    dropped when either endpoint is not an entity; dangling references
    are normal for partial projects and are not reported.
    """
    entities: dict[str, DiagramEntity] = {}
    for table in _entity_sources(scan.tables):
        name = table.entity_name
        key = name.lower()
        if key in entities:
            continue
        entities[key] = _to_entity(name, table)

    relations: list[DiagramRelation] = []
    seen: set[tuple[str, str, str]] = set()
    for rel in scan.relations:
        source_key = rel.source_entity.lower()
        target_key = rel.target_entity.lower()
        dedup_key = (source_key, target_key, rel.source_field)
        if dedup_key in seen:
            continue
        if source_key not in entities or target_key not in entities:
            continue
        seen.add(dedup_key)
        relations.append(
            DiagramRelation(
                source_entity=rel.source_entity,
                source_field=rel.source_field,
                target_entity=rel.target_entity,
                target_field=rel.target_field,
            )
        )

    return DiagramData(entities=list(entities.values()), relations=relations)


def _entity_sources(tables: list[TableObject]) -> list[TableObject]:
    bases = [t for t in tables if not t.is_extension]
    local_names = {t.name.lower() for t in bases}
    external_extensions = [
        t for t in tables
        if t.is_extension and t.extends_table.lower() not in local_names
    ]
    return bases + external_extensions


def _to_entity(name: str, table: TableObject) -> DiagramEntity:
    return DiagramEntity(
        name=name,
        caption=table.caption or name,
        fields=[
            DiagramField(
                name=f.name,
                caption=f.caption or f.name,
                type=f.type,
                is_primary_key=f.is_primary_key,
                is_foreign_key=f.is_foreign_key,
            )
            for f in table.fields
        ],
    )
