"""create stock ledger and shipment tables

Revision ID: 0001_create_stock_ledger
Revises:
Create Date: 2026-10-19
"""

from __future__ import annotations

from typing import Sequence, Union

import sqlalchemy as sa
from alembic import op

# revision identifiers, used by Alembic.
revision: str = "0001_create_stock_ledger"
down_revision: Union[str, Sequence[str], None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    op.create_table(
        "shipments",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("reference", sa.String(100), nullable=True),
        sa.Column("date", sa.Date(), nullable=True),
        sa.Column(
            "status",
            sa.Enum(
                "pending", "received",
                name="shipment_status_enum",
                create_constraint=True,
            ),
            nullable=False,
        ),
        sa.Column("received_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False),
    )

    op.create_table(
        "shipment_lines",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column(
            "shipment_id", sa.Integer(),
            sa.ForeignKey("shipments.id"), nullable=False,
        ),
        sa.Column("position", sa.Integer(), nullable=False),
        sa.Column("item_code", sa.String(64), nullable=True),
        sa.Column("description", sa.String(255), nullable=False),
        sa.Column("quantity", sa.Numeric(19, 4), nullable=False),
        sa.Column("unit", sa.String(32), nullable=False),
    )
    op.create_index(
        "ix_shipment_lines_shipment_id", "shipment_lines", ["shipment_id"]
    )

    op.create_table(
        "stock_entries",
        sa.Column("seq", sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column("id", sa.String(64), nullable=False, unique=True),
        sa.Column("batch_id", sa.Uuid(), nullable=False),
        sa.Column("date", sa.Date(), nullable=False),
        sa.Column("item_code", sa.String(64), nullable=True),
        sa.Column("description", sa.String(255), nullable=False),
        sa.Column("quantity", sa.Numeric(19, 4), nullable=False),
        sa.Column("unit", sa.String(32), nullable=False),
        sa.Column(
            "kind",
            sa.Enum("RECEIPT", "ISSUE", name="entry_kind_enum"),
            nullable=False,
        ),
        sa.Column("reference", sa.String(100), nullable=True),
        sa.Column(
            "shipment_id", sa.Integer(),
            sa.ForeignKey("shipments.id"), nullable=True,
        ),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False),
        sa.CheckConstraint(
            "quantity <> 0", name="ck_stock_entries_quantity_nonzero"
        ),
    )
    op.create_index("ix_stock_entries_batch_id", "stock_entries", ["batch_id"])
    op.create_index(
        "ix_stock_entries_description", "stock_entries", ["description"]
    )
    op.create_index(
        "ix_stock_entries_shipment_id", "stock_entries", ["shipment_id"]
    )


def downgrade() -> None:
    op.drop_table("stock_entries")
    op.drop_table("shipment_lines")
    op.drop_table("shipments")
    sa.Enum(name="entry_kind_enum").drop(op.get_bind(), checkfirst=True)
    sa.Enum(name="shipment_status_enum").drop(op.get_bind(), checkfirst=True)
