"""Shared test fixtures for the AL schema explorer test suite."""
from __future__ import annotations

import shutil
from pathlib import Path

import pytest

from src.schema_extractor.services.project_scanner import ProjectScanner
from src.shared.models.schema import (
    DiagramData,
    DiagramEntity,
    DiagramField,
    DiagramRelation,
)

SAMPLE_PROJECT = Path(__file__).resolve().parent.parent / "sample_data" / "sample_al_project"


# ---------------------------------------------------------------------------
# AL source snippets
# ---------------------------------------------------------------------------

LOYALTY_CARD_AL = '''\
table 50100 "Loyalty Card"
{
    fields
    {
        field(1;"No.";Code[20])
        {
            Caption='No.';
        }
    }
    keys
    {
        key(PK;"No.")
        {
        }
    }
}
'''

CARD_EXT_AL = '''\
tableextension 50101 "Card Ext" extends "Loyalty Card"
{
    fields
    {
        field(2;"Points";Integer)
        {
        }
    }
}
'''

CUSTOMER_AL = '''\
table 18 Customer
{
    Caption = 'Customer';

    fields
    {
        field(1; "No."; Code[20])
        {
            Caption = 'No.';
        }
        field(2; Name; Text[100])
        {
            Caption = 'Name';
        }
        field(3; "Salesperson Code"; Code[20])
        {
            Caption = 'Salesperson Code';
            TableRelation = "Salesperson/Purchaser".Code;
        }
        field(4; "Balance (LCY)"; Decimal)
        {
            FieldClass = FlowField;
            CalcFormula = sum("Detailed Cust. Ledg. Entry"."Amount (LCY)" where("Customer No." = field("No.")));
        }
    }

    keys
    {
        key(PK; "No.")
        {
            Clustered = true;
        }
        key(SearchName; Name)
        {
        }
    }
}
'''

SALESPERSON_AL = '''\
table 13 "Salesperson/Purchaser"
{
    Caption = 'Salesperson/Purchaser';

    fields
    {
        field(1; Code; Code[20])
        {
        }
    }

    keys
    {
        key(PK; Code)
        {
        }
    }
}
'''

SALES_CUE_AL = '''\
table 9053 "Sales Cue"
{
    fields
    {
        field(1; "Primary Key"; Code[10])
        {
        }
        field(2; "Top Customer"; Code[20])
        {
            TableRelation = Customer."No.";
        }
    }
}
'''


# ---------------------------------------------------------------------------
# Fixtures
# ---------------------------------------------------------------------------


@pytest.fixture
def scanner() -> ProjectScanner:
    """A scanner without prefix normalization."""
    return ProjectScanner()


@pytest.fixture
def customer_source() -> str:
    return CUSTOMER_AL


@pytest.fixture
def loyalty_files() -> dict[str, str]:
    """A table and an extension of it, in two files."""
    return {
        "src/LoyaltyCard.Table.al": LOYALTY_CARD_AL,
        "src/CardExt.TableExt.al": CARD_EXT_AL,
    }


@pytest.fixture
def sample_files() -> dict[str, str]:
    """Customer, salesperson and cue tables keyed by file path."""
    return {
        "src/Customer.Table.al": CUSTOMER_AL,
        "src/Salesperson.Table.al": SALESPERSON_AL,
        "src/SalesCue.Table.al": SALES_CUE_AL,
    }


@pytest.fixture
def sample_project(tmp_path: Path) -> Path:
    """A writable copy of the bundled sample AL project."""
    target = tmp_path / "sample_al_project"
    shutil.copytree(SAMPLE_PROJECT, target)
    return target


@pytest.fixture
def simple_diagram() -> DiagramData:
    """Three entities: Order -> Customer, Order -> Item, plus isolated Note."""
    return DiagramData(
        entities=[
            DiagramEntity(
                name="Customer",
                caption="Customer",
                fields=[DiagramField(name="No.", caption="No.", type="Code[20]", is_primary_key=True)],
            ),
            DiagramEntity(
                name="Sales Order",
                caption="Order",
                fields=[
                    DiagramField(name="No.", caption="No.", type="Code[20]", is_primary_key=True),
                    DiagramField(name="Customer No.", caption="Customer", type="Code[20]", is_foreign_key=True),
                    DiagramField(name="Item No.", caption="Item No.", type="Code[20]", is_foreign_key=True),
                ],
            ),
            DiagramEntity(name="Item", caption="Item", fields=[]),
            DiagramEntity(name="Note", caption="Note", fields=[]),
        ],
        relations=[
            DiagramRelation(
                source_entity="Sales Order", source_field="Customer No.",
                target_entity="Customer", target_field="No.",
            ),
            DiagramRelation(
                source_entity="Sales Order", source_field="Item No.",
                target_entity="Item", target_field="",
            ),
        ],
    )
