"""Entity relationship graph analysis using NetworkX."""
from __future__ import annotations

import logging

import networkx as nx

from src.shared.models.schema import DiagramData, SchemaGraphAnalysis

logger = logging.getLogger(__name__)

_TOP_REFERENCED = 10


class SchemaGraph:
    """Wraps a NetworkX DiGraph built from diagram data.

    Node IDs are lowercased entity names; each node carries the display
    ``name`` and ``caption``.  Edges point from the referencing entity to
    the referenced one and keep the field names of the first relation
    seen between the pair.
    """

    def __init__(self, diagram: DiagramData) -> None:
        self._graph: nx.DiGraph = nx.DiGraph()
        self._relation_count = 0
        for entity in diagram.entities:
            self._graph.add_node(
                entity.name.lower(), name=entity.name, caption=entity.caption
            )
        for rel in diagram.relations:
            source = rel.source_entity.lower()
            target = rel.target_entity.lower()
            if source not in self._graph or target not in self._graph:
                logger.debug("Ignoring dangling relation %s -> %s", source, target)
                continue
            self._relation_count += 1
            if self._graph.has_edge(source, target):
                self._graph[source][target]["count"] += 1
                continue
            self._graph.add_edge(
                source,
                target,
                source_field=rel.source_field,
                target_field=rel.target_field,
                count=1,
            )

    @property
    def graph(self) -> nx.DiGraph:
        """Return the underlying NetworkX DiGraph."""
        return self._graph

    def has_entity(self, name: str) -> bool:
        return name.lower() in self._graph

    def linked_entities(self, name: str) -> list[str]:
        """Display names of entities related to *name* in either direction.

        Self-references are excluded.  Unknown entities yield ``[]``.
        """
        key = name.lower()
        if key not in self._graph:
            return []
        neighbours = set(self._graph.successors(key)) | set(self._graph.predecessors(key))
        neighbours.discard(key)
        names = [self._graph.nodes[n]["name"] for n in neighbours]
        return sorted(names, key=str.lower)

    def analyze(self) -> SchemaGraphAnalysis:
        """Summarise entity counts, connectivity and most-referenced entities."""
        node_count = self._graph.number_of_nodes()

        components = 0
        if node_count > 0:
            components = nx.number_weakly_connected_components(self._graph)

        isolated = sorted(
            (self._graph.nodes[n]["name"] for n in nx.isolates(self._graph)),
            key=str.lower,
        )

        in_degrees = [
            (self._graph.nodes[n]["name"], degree)
            for n, degree in self._graph.in_degree()
            if degree > 0
        ]
        in_degrees.sort(key=lambda item: (-item[1], item[0].lower()))

        return SchemaGraphAnalysis(
            entity_count=node_count,
            relation_count=self._relation_count,
            connected_components=components,
            isolated_entities=isolated,
            most_referenced=in_degrees[:_TOP_REFERENCED],
        )
