"""Create patients and audit_events tables.

Revision ID: 20261019_create_patients
Revises: None
Create Date: 2026-10-19
"""

from alembic import op
import sqlalchemy as sa
from sqlalchemy import inspect
from sqlalchemy.sql import func
from sqlalchemy.dialects import postgresql


revision = "20261019_create_patients"
down_revision = None
branch_labels = None
depends_on = None


def _id_type(bind):
    if bind.dialect.name == "postgresql":
        return postgresql.UUID(as_uuid=True)
    return sa.String(36)


def upgrade() -> None:
    bind = op.get_bind()
    inspector = inspect(bind)
    tables = set(inspector.get_table_names())

    if "patients" not in tables:
        op.create_table(
            "patients",
            sa.Column("id", _id_type(bind), nullable=False),
            sa.Column("identifier", sa.String(length=12), nullable=False),
            sa.Column("name", sa.String(length=128), nullable=False),
            sa.Column("age", sa.Integer(), nullable=True),
            sa.Column("gender", sa.String(length=16), nullable=True),
            sa.Column("address", sa.String(length=512), nullable=True),
            sa.Column("phone", sa.String(length=512), nullable=True),
            sa.Column("departments_visited", sa.Text(), nullable=False, server_default=""),
            sa.Column("created_at", sa.DateTime(timezone=True), server_default=func.now(), nullable=False),
            sa.Column("updated_at", sa.DateTime(timezone=True), server_default=func.now(), nullable=False),
            sa.PrimaryKeyConstraint("id", name="pk_patients"),
            sa.UniqueConstraint("identifier", name="uq_patients_identifier"),
        )

    if "audit_events" not in tables:
        op.create_table(
            "audit_events",
            sa.Column("id", _id_type(bind), nullable=False),
            sa.Column("actor", sa.String(length=64), nullable=False),
            sa.Column(
                "action",
                sa.Enum("CREATE", "UPDATE", "UPLOAD", "DELETE", name="auditaction"),
                nullable=False,
            ),
            sa.Column("entity_type", sa.String(length=64), nullable=False),
            sa.Column("entity_id", sa.String(length=64), nullable=False),
            sa.Column("request_id", sa.String(length=64), nullable=False),
            sa.Column("ip_address", sa.String(length=64), nullable=False),
            sa.Column("details", sa.JSON(), nullable=True),
            sa.Column("timestamp", sa.DateTime(timezone=True), nullable=False),
            sa.PrimaryKeyConstraint("id", name="pk_audit_events"),
        )


def downgrade() -> None:
    bind = op.get_bind()
    tables = set(inspect(bind).get_table_names())
    if "audit_events" in tables:
        op.drop_table("audit_events")
        if bind.dialect.name == "postgresql":
            sa.Enum(name="auditaction").drop(bind, checkfirst=True)
    if "patients" in tables:
        op.drop_table("patients")
