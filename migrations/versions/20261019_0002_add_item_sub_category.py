"""Add sub-category to learning items."""

from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision: str = "20261019_0002"
down_revision: Union[str, None] = "20261019_0001"
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    op.add_column(
        "learning_items",
        sa.Column("sub_category", sa.String(length=255), nullable=True),
    )
    op.create_index(
        "ix_learning_items_category_sub_category",
        "learning_items",
        ["category", "sub_category"],
    )


def downgrade() -> None:
    op.drop_index("ix_learning_items_category_sub_category", table_name="learning_items")
    with op.batch_alter_table("learning_items") as batch_op:
        batch_op.drop_column("sub_category")
