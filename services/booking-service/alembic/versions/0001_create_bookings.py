from alembic import op
import sqlalchemy as sa

revision = "0001"
down_revision = None
branch_labels = None
depends_on = None


def upgrade():
    op.create_table(
        "bookings",
        sa.Column("id", sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column("start", sa.DateTime(), nullable=False),
        sa.Column("end", sa.DateTime(), nullable=False),
        sa.Column("status", sa.String(length=16), nullable=False),
        sa.Column("booker_id", sa.Integer(), nullable=False),
        sa.Column("item_id", sa.Integer(), nullable=False),
        sa.Column("item_owner_id", sa.Integer(), nullable=False),
    )
    op.create_index("ix_bookings_status", "bookings", ["status"], unique=False)
    op.create_index("ix_bookings_booker_id", "bookings", ["booker_id"], unique=False)
    op.create_index("ix_bookings_item_id", "bookings", ["item_id"], unique=False)
    op.create_index("ix_bookings_item_owner_id", "bookings", ["item_owner_id"], unique=False)
    op.create_index("ix_bookings_item_status_end", "bookings", ["item_id", "status", "end"], unique=False)


def downgrade():
    op.drop_index("ix_bookings_item_status_end", table_name="bookings")
    op.drop_index("ix_bookings_item_owner_id", table_name="bookings")
    op.drop_index("ix_bookings_item_id", table_name="bookings")
    op.drop_index("ix_bookings_booker_id", table_name="bookings")
    op.drop_index("ix_bookings_status", table_name="bookings")
    op.drop_table("bookings")
