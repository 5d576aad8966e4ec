"""series catalog baseline

Revision ID: 0001_baseline
Revises:
Create Date: 2026-10-19

Series and characters tables. Titles, genres and names carry a case-folded
key column; series titles are unique on that key, character name uniqueness
per series is enforced by the service layer. Ids are never reused.
"""

import sqlalchemy as sa

from alembic import op

# revision identifiers, used by Alembic.
revision = "0001_baseline"
down_revision = None
branch_labels = None
depends_on = None


def upgrade() -> None:
    op.create_table(
        "series",
        sa.Column("id", sa.Integer(), autoincrement=True, nullable=False),
        sa.Column("title", sa.String(255), nullable=False),
        sa.Column("title_key", sa.Text(), nullable=False),
        sa.Column("genre", sa.String(100), nullable=False),
        sa.Column("genre_key", sa.Text(), nullable=False),
        sa.Column("release_date", sa.Date(), nullable=False),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("updated_at", sa.DateTime(timezone=True), nullable=True),
        sa.PrimaryKeyConstraint("id"),
        sqlite_autoincrement=True,
    )
    op.create_index("ix_series_release_date", "series", ["release_date"])
    op.create_index("uq_series_title_key", "series", ["title_key"], unique=True)
    op.create_index("ix_series_genre_key", "series", ["genre_key"])

    op.create_table(
        "characters",
        sa.Column("id", sa.Integer(), autoincrement=True, nullable=False),
        sa.Column("name", sa.String(255), nullable=False),
        sa.Column("name_key", sa.Text(), nullable=False),
        sa.Column("description", sa.String(500), nullable=True),
        sa.Column("series_id", sa.Integer(), nullable=False),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("updated_at", sa.DateTime(timezone=True), nullable=True),
        sa.ForeignKeyConstraint(["series_id"], ["series.id"], ondelete="CASCADE"),
        sa.PrimaryKeyConstraint("id"),
        sqlite_autoincrement=True,
    )
    op.create_index("ix_characters_series_id_id", "characters", ["series_id", "id"])
    op.create_index(
        "ix_characters_series_id_name_key", "characters", ["series_id", "name_key"]
    )


def downgrade() -> None:
    op.drop_index("ix_characters_series_id_name_key", table_name="characters")
    op.drop_index("ix_characters_series_id_id", table_name="characters")
    op.drop_table("characters")
    op.drop_index("ix_series_genre_key", table_name="series")
    op.drop_index("uq_series_title_key", table_name="series")
    op.drop_index("ix_series_release_date", table_name="series")
    op.drop_table("series")
