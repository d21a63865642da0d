"""Tests for ProjectScanner: per-file parsing, merge, cue filtering, relations."""
from __future__ import annotations

import pytest

from src.schema_extractor.services.project_scanner import (
    ProjectScanner,
    derive_relations,
    is_special_entity,
    merge_extensions,
)
from src.shared.constants import NO_SOURCE_FILES_WARNING, NO_TABLES_WARNING
from src.shared.models.schema import (
    ObjectKind,
    ProjectScanResult,
    TableField,
    TableObject,
)


def _ext(name: str, extends: str, *field_names: str) -> TableObject:
    return TableObject(
        id=50100,
        name=name,
        object_kind=ObjectKind.TABLE_EXTENSION,
        extends_table=extends,
        fields=[TableField(id=i, name=n, type="Integer") for i, n in enumerate(field_names, 1)],
    )


class TestEndToEnd:
    def test_loyalty_card_and_extension(self, scanner, loyalty_files):
        result = scanner.scan(loyalty_files)

        assert isinstance(result, ProjectScanResult)
        assert result.errors == []
        card = next(t for t in result.tables if not t.is_extension)
        ext = next(t for t in result.tables if t.is_extension)

        assert card.name == "Loyalty Card"
        assert [f.name for f in card.fields] == ["No.", "Points"]
        assert card.fields[0].is_primary_key is True
        assert card.fields[0].caption == "No."

        assert ext.name == "Card Ext"
        assert [f.name for f in ext.fields] == ["Points"]

    def test_scan_is_deterministic(self, scanner, sample_files):
        first = scanner.scan(sample_files)
        second = scanner.scan(sample_files)
        assert first.model_dump() == second.model_dump()

    def test_parallel_scan_matches_sequential(self, sample_files, loyalty_files):
        files = {**sample_files, **loyalty_files}
        sequential = ProjectScanner(max_workers=1).scan(files)
        parallel = ProjectScanner(max_workers=4).scan(files)
        assert parallel.model_dump() == sequential.model_dump()

    def test_table_order_follows_input_order(self, scanner, sample_files):
        result = scanner.scan(sample_files)
        assert [t.name for t in result.tables] == ["Customer", "Salesperson/Purchaser"]


class TestMergeExtensions:
    def test_field_added_once_across_two_extensions(self):
        base = TableObject(
            id=18, name="Customer",
            fields=[TableField(id=1, name="No.", type="Code[20]")],
        )
        tables = [base, _ext("Ext A", "Customer", "Loyalty"), _ext("Ext B", "Customer", "Loyalty")]
        merge_extensions(tables)
        assert [f.name for f in base.fields] == ["No.", "Loyalty"]

    def test_name_match_is_case_insensitive(self):
        base = TableObject(
            id=18, name="Customer",
            fields=[TableField(id=1, name="Points", type="Integer")],
        )
        merge_extensions([base, _ext("Ext", "CUSTOMER", "POINTS", "Tier")])
        assert [f.name for f in base.fields] == ["Points", "Tier"]

    def test_merged_fields_are_copies(self):
        base = TableObject(id=18, name="Customer")
        ext = _ext("Ext", "Customer", "Loyalty")
        merge_extensions([base, ext])
        base.fields[0].caption = "changed"
        assert ext.fields[0].caption == ""

    def test_extension_of_external_table_is_untouched(self):
        ext = _ext("Ext", "Vendor", "Loyalty")
        tables = [ext]
        merge_extensions(tables)
        assert tables == [ext]
        assert [f.name for f in ext.fields] == ["Loyalty"]

    def test_extension_declared_before_base(self):
        base = TableObject(id=18, name="Customer")
        merge_extensions([_ext("Ext", "Customer", "Loyalty"), base])
        assert [f.name for f in base.fields] == ["Loyalty"]

    def test_first_base_wins_on_case_insensitive_name_clash(self):
        first = TableObject(id=1, name="C")
        second = TableObject(id=2, name="c")
        merge_extensions([first, second, _ext("Ext", "C", "Loyalty")])
        assert [f.name for f in first.fields] == ["Loyalty"]
        assert second.fields == []

    def test_extensions_stay_in_scan_result(self, scanner):
        files = {
            "a.al": "table 18 Customer { fields { field(1; \"No.\"; Code[20]) { } } }",
            "b.al": "tableextension 50100 CustExt extends Customer { fields { field(2; Loyalty; Integer) { } } }",
        }
        result = scanner.scan(files)
        assert result.table_count == 1
        assert result.extension_count == 1


class TestSpecialEntities:
    @pytest.mark.parametrize(
        "name",
        ["Sales Cue", "Activities Cues", "SALES CUE", "Finance Cue Setup", "cue"],
    )
    def test_special_names(self, name: str):
        assert is_special_entity(name) is True

    @pytest.mark.parametrize("name", ["Customer", "Cuenta", "Barbecue Grill", "Queue Entry"])
    def test_regular_names(self, name: str):
        assert is_special_entity(name) is False

    def test_cue_table_and_relations_to_it_are_dropped(self, scanner):
        files = {
            "cue.al": 'table 9053 "Sales Cue" { fields { field(1; "Primary Key"; Code[10]) { } } }',
            "setup.al": '''
table 50 "Role Setup"
{
    fields
    {
        field(1; Code; Code[10]) { }
        field(2; "Cue Key"; Code[10]) { TableRelation = "Sales Cue"."Primary Key"; }
    }
}
''',
        }
        result = scanner.scan(files)
        assert [t.name for t in result.tables] == ["Role Setup"]
        assert result.relations == []

    def test_relations_from_cue_table_are_dropped(self, scanner, sample_files):
        result = scanner.scan(sample_files)
        assert all(r.source_entity != "Sales Cue" for r in result.relations)

    def test_extension_of_cue_table_is_dropped(self, scanner):
        files = {
            "ext.al": 'tableextension 50100 "My Ext" extends "Sales Cue" { fields { field(50100; X; Integer) { } } }',
        }
        result = scanner.scan(files)
        assert result.tables == []
        assert result.errors == [NO_TABLES_WARNING]


class TestDeriveRelations:
    def test_relation_from_sample(self, scanner, sample_files):
        result = scanner.scan(sample_files)
        assert [
            (r.source_entity, r.source_field, r.target_entity, r.target_field)
            for r in result.relations
        ] == [("Customer", "Salesperson Code", "Salesperson/Purchaser", "Code")]

    def test_extension_relations_are_attributed_to_base(self):
        ext = TableObject(
            id=50100,
            name="Customer Ext",
            object_kind=ObjectKind.TABLE_EXTENSION,
            extends_table="Customer",
            fields=[
                TableField(
                    id=1, name="Card No.", type="Code[20]",
                    is_foreign_key=True, related_table="Loyalty Card", related_field="No.",
                )
            ],
        )
        (rel,) = derive_relations([ext])
        assert rel.source_entity == "Customer"
        assert rel.target_entity == "Loyalty Card"

    def test_unresolved_target_yields_no_relation(self):
        table = TableObject(
            id=1,
            name="T",
            fields=[TableField(id=1, name="X", type="Integer", is_foreign_key=True)],
        )
        assert derive_relations([table]) == []

    def test_duplicates_are_kept_at_scan_level(self):
        fk = TableField(
            id=1, name="Customer No.", type="Code[20]",
            is_foreign_key=True, related_table="Customer",
        )
        base = TableObject(id=1, name="Order", fields=[fk])
        ext = TableObject(
            id=2, name="Order Ext", object_kind=ObjectKind.TABLE_EXTENSION,
            extends_table="Order", fields=[fk.model_copy()],
        )
        assert len(derive_relations([base, ext])) == 2


class TestScanErrors:
    def test_empty_project_warns(self, scanner):
        result = scanner.scan({})
        assert result.tables == []
        assert result.relations == []
        assert result.errors == [NO_SOURCE_FILES_WARNING]

    def test_no_tables_warns(self, scanner):
        result = scanner.scan({"page.al": 'page 1 "X" { }'})
        assert result.errors == [NO_TABLES_WARNING]

    def test_invalid_utf8_is_recorded_and_skipped(self, scanner, loyalty_files):
        files: dict[str, str | bytes] = dict(loyalty_files)
        files["src/Bad.Table.al"] = b"table 1 Bad { \xff\xfe }"
        result = scanner.scan(files, root="src")
        assert len(result.errors) == 1
        assert result.errors[0].startswith("Error while parsing Bad.Table.al: ")
        assert "Loyalty Card" in [t.name for t in result.tables]

    def test_bytes_with_bom_are_decoded(self, scanner):
        content = "\ufefftable 1 Encoded { }".encode("utf-8")
        result = scanner.scan({"enc.al": content})
        assert [t.name for t in result.tables] == ["Encoded"]

    def test_parser_failure_is_recorded(self, scanner, monkeypatch):
        def _boom(text, file_path):
            raise ValueError("bad input")

        monkeypatch.setattr(scanner.parser, "parse_file", _boom)
        result = scanner.scan({"x.al": "table 1 X { }"})
        assert result.errors[0] == "Error while parsing x.al: bad input"
        assert result.errors[-1] == NO_TABLES_WARNING

    def test_project_metadata_passes_through(self, scanner, loyalty_files):
        result = scanner.scan(loyalty_files, project_name="Loyalty", manifest={"name": "Loyalty"})
        assert result.project_name == "Loyalty"
        assert result.manifest == {"name": "Loyalty"}


class TestWithPrefix:
    def test_prefix_is_applied(self):
        scanner = ProjectScanner.with_prefix("ABC ")
        result = scanner.scan({"t.al": 'table 1 "ABC Loyalty Tier" { }'})
        assert result.tables[0].name == "Loyalty Tier"
