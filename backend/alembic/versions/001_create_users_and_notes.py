"""Create users and notes tables

Revision ID: 001
Revises: None
Create Date: 2026-10-18 00:00:00.000000+00:00

What:  Creates `users` and the owner-scoped `notes` table.
How:   Portable column types (Integer keys, timezone-aware DateTime) so the
       same migration runs on PostgreSQL and SQLite.

Rollback: downgrade() drops both tables (destructive, all data lost).
"""

from typing import Sequence, Union

import sqlalchemy as sa
from alembic import op

# revision identifiers
revision: str = "001"
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    op.create_table(
        "users",
        sa.Column("id", sa.Integer(), autoincrement=True, nullable=False),
        sa.Column("username", sa.String(100), nullable=False,
                  comment="Login name as entered"),
        sa.Column("username_normalized", sa.String(200), nullable=False,
                  comment="Lower-cased username; case-insensitive lookup key"),
        sa.Column("email", sa.String(255), nullable=False),
        sa.Column("password_hash", sa.String(255), nullable=False,
                  comment="Salted one-way hash in passlib format"),
        sa.Column("first_name", sa.String(100), nullable=True),
        sa.Column("last_name", sa.String(100), nullable=True),
        sa.Column(
            "created_at",
            sa.DateTime(timezone=True),
            server_default=sa.text("CURRENT_TIMESTAMP"),
            nullable=False,
        ),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint("username"),
        sa.UniqueConstraint("username_normalized"),
        sa.UniqueConstraint("email"),
    )

    op.create_table(
        "notes",
        sa.Column("id", sa.Integer(), autoincrement=True, nullable=False),
        sa.Column("title", sa.String(100), nullable=False),
        sa.Column("content", sa.String(8000), nullable=False),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False,
                  comment="When this note was created (UTC)"),
        sa.Column("modified_at", sa.DateTime(timezone=True), nullable=True,
                  comment="When this note was last updated (UTC); NULL if never"),
        sa.Column("owner_id", sa.Integer(), nullable=False),
        sa.ForeignKeyConstraint(["owner_id"], ["users.id"], ondelete="CASCADE"),
        sa.PrimaryKeyConstraint("id"),
    )

    # Every note query filters on owner_id
    op.create_index("idx_notes_owner_id", "notes", ["owner_id"])


def downgrade() -> None:
    op.drop_index("idx_notes_owner_id", table_name="notes")
    op.drop_table("notes")
    op.drop_table("users")
