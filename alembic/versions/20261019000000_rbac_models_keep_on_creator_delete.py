"""Keep RBAC models when their creating admin is deleted.

Revision ID: 20261019000000
Revises: 20261018000000
Create Date: 2026-10-19

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa

revision: str = "20261019000000"
down_revision: Union[str, None] = "20261018000000"
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None

# PostgreSQL's default name for the unnamed constraint in the initial schema.
CREATED_BY_FK = "rbac_models_created_by_fkey"


def upgrade() -> None:
    op.drop_constraint(CREATED_BY_FK, "rbac_models", type_="foreignkey")
    op.alter_column(
        "rbac_models",
        "created_by",
        existing_type=sa.String(length=36),
        nullable=True,
    )
    op.create_foreign_key(
        CREATED_BY_FK,
        "rbac_models",
        "users",
        ["created_by"],
        ["id"],
        ondelete="SET NULL",
    )


def downgrade() -> None:
    op.drop_constraint(CREATED_BY_FK, "rbac_models", type_="foreignkey")
    # Orphaned models cannot satisfy NOT NULL again.
    op.execute("DELETE FROM rbac_models WHERE created_by IS NULL")
    op.alter_column(
        "rbac_models",
        "created_by",
        existing_type=sa.String(length=36),
        nullable=False,
    )
    op.create_foreign_key(
        CREATED_BY_FK,
        "rbac_models",
        "users",
        ["created_by"],
        ["id"],
        ondelete="CASCADE",
    )
