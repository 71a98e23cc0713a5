"""Create directory tables

Revision ID: 001
Revises: None
Create Date: 2025-08-05 00:00:00.000000+00:00

Creates professionals, reviews, sub_categories, partners and partner_offers.
Portable column types only; ids are uuid4 strings generated by the app.

Rollback: downgrade() drops all five tables.
"""

from typing import Sequence, Union

import sqlalchemy as sa
from alembic import op

revision: str = "001"
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def _id_column() -> sa.Column:
    return sa.Column("id", sa.String(64), primary_key=True, nullable=False)


def upgrade() -> None:
    op.create_table(
        "professionals",
        _id_column(),
        sa.Column("title", sa.String(255), nullable=True),
        sa.Column("email", sa.String(255), nullable=True),
        sa.Column("category", sa.String(255), nullable=True),
        sa.Column("sub_category", sa.String(255), nullable=True),
        sa.Column("speciality", sa.String(255), nullable=True),
        sa.Column("description", sa.Text(), nullable=True),
        sa.Column("subtitle", sa.Text(), nullable=True),
        sa.Column("address", sa.String(500), nullable=True),
        sa.Column("city", sa.String(255), nullable=True),
        sa.Column("phone", sa.String(64), nullable=True),
        sa.Column("website", sa.String(500), nullable=True),
        sa.Column("facebook", sa.String(500), nullable=True),
        sa.Column("instagram", sa.String(500), nullable=True),
        sa.Column("tiktok", sa.String(500), nullable=True),
        sa.Column("youtube", sa.String(500), nullable=True),
        sa.Column("whatsapp", sa.String(500), nullable=True),
        sa.Column("plan", sa.String(64), nullable=True),
        sa.Column("is_active", sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column("sponsor", sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column("payment_id", sa.String(255), nullable=True),
        sa.Column("amount_paid", sa.Float(), nullable=False, server_default="0"),
        sa.Column("expiry_date", sa.DateTime(timezone=True), nullable=True),
        sa.Column(
            "created_at",
            sa.DateTime(timezone=True),
            nullable=False,
            server_default=sa.func.now(),
        ),
        sa.Column("image", sa.Text(), nullable=True),
        *[sa.Column(f"gallery_image_{slot}", sa.Text(), nullable=True) for slot in range(1, 6)],
    )
    op.create_index("idx_professionals_title", "professionals", ["title"])

    op.create_table(
        "reviews",
        _id_column(),
        sa.Column("professional_id", sa.String(64), nullable=True),
        # Older rows stored the professional id here
        sa.Column("image", sa.String(255), nullable=True),
        sa.Column("author_name", sa.String(255), nullable=True),
        sa.Column("rating", sa.Integer(), nullable=True),
        sa.Column("title", sa.String(255), nullable=True),
        sa.Column("message", sa.Text(), nullable=True),
        sa.Column("date_created", sa.DateTime(timezone=True), nullable=True),
        sa.Column("date_created_formatted", sa.String(64), nullable=True),
    )
    op.create_index("idx_reviews_professional_id", "reviews", ["professional_id"])
    op.create_index(
        "idx_reviews_date_created",
        "reviews",
        [sa.text("date_created DESC")],
    )

    op.create_table(
        "sub_categories",
        _id_column(),
        sa.Column("title", sa.String(255), nullable=False),
        sa.Column("category", sa.String(255), nullable=True),
        sa.Column("image", sa.Text(), nullable=True),
    )

    op.create_table(
        "partners",
        _id_column(),
        sa.Column("title", sa.String(255), nullable=False),
        sa.Column("description", sa.Text(), nullable=True),
        sa.Column("website", sa.String(500), nullable=True),
        sa.Column("image", sa.Text(), nullable=True),
    )

    op.create_table(
        "partner_offers",
        _id_column(),
        sa.Column("partner_id", sa.String(64), nullable=True),
        sa.Column("title", sa.String(255), nullable=False),
        sa.Column("description", sa.Text(), nullable=True),
        sa.Column("discount", sa.String(64), nullable=True),
        sa.Column("image", sa.Text(), nullable=True),
    )


def downgrade() -> None:
    op.drop_table("partner_offers")
    op.drop_table("partners")
    op.drop_table("sub_categories")
    op.drop_index("idx_reviews_date_created", table_name="reviews")
    op.drop_index("idx_reviews_professional_id", table_name="reviews")
    op.drop_table("reviews")
    op.drop_index("idx_professionals_title", table_name="professionals")
    op.drop_table("professionals")
