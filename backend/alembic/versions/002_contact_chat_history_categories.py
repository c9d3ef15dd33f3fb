"""Contact messages, chat transcripts, blog categories and the landing page flag

Revision ID: 002_contact_chat_history_categories
Revises: 001_initial_schema
Create Date: 2026-10-19 16:00:00
"""
from alembic import op
import sqlalchemy as sa

revision = "002_contact_chat_history_categories"
down_revision = "001_initial_schema"
branch_labels = None
depends_on = None


def _timestamp(name: str, nullable: bool = False) -> sa.Column:
    return sa.Column(name, sa.DateTime(timezone=True), nullable=nullable)


def upgrade() -> None:
    op.add_column(
        "pages",
        sa.Column("is_main_landing", sa.Boolean(), nullable=False, server_default=sa.false()),
    )

    op.create_table(
        "contact_messages",
        sa.Column("id", sa.Uuid(), primary_key=True),
        sa.Column("name", sa.String(255), nullable=False),
        sa.Column("email", sa.String(320), nullable=False),
        sa.Column("subject", sa.String(500)),
        sa.Column("message", sa.Text(), nullable=False),
        sa.Column("is_read", sa.Boolean(), nullable=False, server_default=sa.false()),
        _timestamp("created_at"),
    )
    op.create_index("ix_contact_messages_created_at", "contact_messages", ["created_at"])

    op.create_table(
        "chat_messages",
        sa.Column("id", sa.Uuid(), primary_key=True),
        sa.Column("session_id", sa.String(255), nullable=False),
        sa.Column("role", sa.String(20), nullable=False),
        sa.Column("content", sa.Text(), nullable=False),
        _timestamp("created_at"),
    )
    op.create_index("ix_chat_messages_session_id", "chat_messages", ["session_id"])
    op.create_index("ix_chat_messages_created_at", "chat_messages", ["created_at"])

    op.create_table(
        "blog_categories",
        sa.Column("id", sa.Uuid(), primary_key=True),
        sa.Column("name", sa.String(255), nullable=False),
        sa.Column("slug", sa.String(255), nullable=False),
        sa.Column("description", sa.Text()),
        sa.Column("order_index", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("enabled", sa.Boolean(), nullable=False, server_default=sa.true()),
        _timestamp("created_at"),
    )
    op.create_index("ix_blog_categories_slug", "blog_categories", ["slug"], unique=True)

    op.create_table(
        "blog_post_categories",
        sa.Column("post_id", sa.Uuid(), sa.ForeignKey("blog_posts.id", ondelete="CASCADE"), primary_key=True),
        sa.Column("category_id", sa.Uuid(), sa.ForeignKey("blog_categories.id", ondelete="CASCADE"),
                  primary_key=True),
    )


def downgrade() -> None:
    for table in ("blog_post_categories", "blog_categories", "chat_messages", "contact_messages"):
        op.drop_table(table)
    op.drop_column("pages", "is_main_landing")
