"""Schema extraction Pydantic v2 data models.

Three groups live here:

* the extraction model (``TableField``, ``TableKey``, ``TableObject``,
  ``SchemaRelation``, ``ProjectScanResult``) produced by the parsers and
  the project scanner,
* the presentation contract (``DiagramField``, ``DiagramEntity``,
  ``DiagramRelation``, ``DiagramData``) that rendering layers consume.
  These serialise with camelCase aliases, and
* the HTTP request and response bodies wrapping them.
"""
from __future__ import annotations

from enum import Enum
from typing import Any

from pydantic import BaseModel, Field
from pydantic.alias_generators import to_camel


class FieldClass(str, Enum):
    """Storage class of a table field."""
    NORMAL = "Normal"
    FLOW_FIELD = "FlowField"
    FLOW_FILTER = "FlowFilter"

    @classmethod
    def parse(cls, raw: str) -> "FieldClass":
        """Map a raw property value case-insensitively; unknown values are Normal."""
        lowered = raw.strip().lower()
        for member in cls:
            if member.value.lower() == lowered:
                return member
        return cls.NORMAL

    @property
    def is_computed(self) -> bool:
        return self is not FieldClass.NORMAL


class ObjectKind(str, Enum):
    """Kind of a parsed object declaration."""
    TABLE = "table"
    TABLE_EXTENSION = "tableextension"


class TableField(BaseModel):
    """One column declaration of a table or table extension."""
    id: int
    name: str
    type: str
    caption: str = ""
    field_class: FieldClass = FieldClass.NORMAL
    table_relation: str = ""
    is_primary_key: bool = False
    is_foreign_key: bool = False
    related_table: str = ""
    related_field: str = ""

    model_config = {"from_attributes": True}


class TableKey(BaseModel):
    """Key declaration: ordered field names, primary when declared first."""
    name: str
    fields: list[str] = Field(default_factory=list)
    is_primary_key: bool = False

    model_config = {"from_attributes": True}


class TableObject(BaseModel):
    """A parsed ``table`` or ``tableextension`` declaration."""
    id: int
    name: str
    caption: str = ""
    object_kind: ObjectKind = ObjectKind.TABLE
    extends_table: str = ""
    fields: list[TableField] = Field(default_factory=list)
    keys: list[TableKey] = Field(default_factory=list)
    file_path: str = ""

    model_config = {"from_attributes": True}

    @property
    def is_extension(self) -> bool:
        return self.object_kind is ObjectKind.TABLE_EXTENSION

    @property
    def entity_name(self) -> str:
        """Logical entity this object contributes to.

        Extensions resolve to the table they extend, falling back to
        their own name when the base name is missing.
        """
        if self.is_extension:
            return self.extends_table or self.name
        return self.name

    @property
    def primary_key(self) -> TableKey | None:
        for key in self.keys:
            if key.is_primary_key:
                return key
        return None


class SchemaRelation(BaseModel):
    """Foreign-key edge between two entities."""
    source_entity: str
    source_field: str
    target_entity: str
    target_field: str = ""

    model_config = {"from_attributes": True}


class ProjectScanResult(BaseModel):
    """Aggregate output of one project scan."""
    tables: list[TableObject] = Field(default_factory=list)
    relations: list[SchemaRelation] = Field(default_factory=list)
    project_name: str | None = None
    manifest: dict[str, Any] | None = None
    errors: list[str] = Field(default_factory=list)

    model_config = {"from_attributes": True}

    @property
    def table_count(self) -> int:
        return sum(1 for t in self.tables if not t.is_extension)

    @property
    def extension_count(self) -> int:
        return sum(1 for t in self.tables if t.is_extension)


# ---------------------------------------------------------------------------
# Presentation contract
# ---------------------------------------------------------------------------

_DIAGRAM_CONFIG = {
    "from_attributes": True,
    "populate_by_name": True,
    "alias_generator": to_camel,
}


class DiagramField(BaseModel):
    """Field row of a diagram entity."""
    name: str
    caption: str
    type: str
    is_primary_key: bool = False
    is_foreign_key: bool = False

    model_config = _DIAGRAM_CONFIG


class DiagramEntity(BaseModel):
    """Entity box of the diagram."""
    name: str
    caption: str
    fields: list[DiagramField] = Field(default_factory=list)

    model_config = _DIAGRAM_CONFIG


class DiagramRelation(BaseModel):
    """Edge of the diagram."""
    source_entity: str
    source_field: str
    target_entity: str
    target_field: str = ""

    model_config = _DIAGRAM_CONFIG


class DiagramData(BaseModel):
    """Presentation-ready entity/relation graph."""
    entities: list[DiagramEntity] = Field(default_factory=list)
    relations: list[DiagramRelation] = Field(default_factory=list)

    model_config = _DIAGRAM_CONFIG

    def find_entity(self, name: str) -> DiagramEntity | None:
        """Look up an entity by name, case-insensitively."""
        lowered = name.lower()
        for entity in self.entities:
            if entity.name.lower() == lowered:
                return entity
        return None


class SchemaGraphAnalysis(BaseModel):
    """Summary metrics of the diagram graph."""
    entity_count: int
    relation_count: int
    connected_components: int
    isolated_entities: list[str] = Field(default_factory=list)
    most_referenced: list[tuple[str, int]] = Field(default_factory=list)

    model_config = _DIAGRAM_CONFIG


# ---------------------------------------------------------------------------
# API request / response models
# ---------------------------------------------------------------------------


class ScanRequest(BaseModel):
    """Sources to scan, keyed by file path."""
    files: dict[str, str] = Field(default_factory=dict)
    project_name: str | None = None
    object_name_prefix: str | None = None

    model_config = _DIAGRAM_CONFIG


class LinkedRequest(ScanRequest):
    """Scan request plus the entity whose neighbours are wanted."""
    entity: str = Field(..., min_length=1)


class ScanResponse(BaseModel):
    """Diagram, graph metrics and warnings of one scan."""
    project_name: str
    diagram: DiagramData
    analysis: SchemaGraphAnalysis
    errors: list[str] = Field(default_factory=list)

    model_config = _DIAGRAM_CONFIG


class LinkedResponse(BaseModel):
    entity: str
    linked: list[str] = Field(default_factory=list)

    model_config = _DIAGRAM_CONFIG
