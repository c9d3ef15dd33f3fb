"""Initial schema: content, site chrome, newsletter, agent tasks, analytics

Revision ID: 001_initial_schema
Revises:
Create Date: 2026-10-19 10:00:00
"""
from alembic import op
import sqlalchemy as sa
from sqlalchemy.dialects import postgresql

revision = "001_initial_schema"
down_revision = None
branch_labels = None
depends_on = None

JSON = sa.JSON().with_variant(postgresql.JSONB(), "postgresql")


def _timestamp(name: str, nullable: bool = False) -> sa.Column:
    return sa.Column(name, sa.DateTime(timezone=True), nullable=nullable)


def upgrade() -> None:
    op.create_table(
        "projects",
        sa.Column("id", sa.Uuid(), primary_key=True),
        sa.Column("title", sa.String(255), nullable=False),
        sa.Column("description", sa.Text(), nullable=False),
        sa.Column("demo_link", sa.String(2048), nullable=False, server_default="#"),
        sa.Column("problem_statement", sa.Text()),
        sa.Column("why_built", sa.Text()),
        sa.Column("order_index", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("enabled", sa.Boolean(), nullable=False, server_default=sa.true()),
        _timestamp("created_at"),
        _timestamp("updated_at"),
    )
    op.create_table(
        "project_images",
        sa.Column("id", sa.Uuid(), primary_key=True),
        sa.Column("project_id", sa.Uuid(), sa.ForeignKey("projects.id", ondelete="CASCADE"), nullable=False),
        sa.Column("image_url", sa.String(2048), nullable=False),
        sa.Column("image_path", sa.String(1024)),
        sa.Column("order_index", sa.Integer(), nullable=False, server_default="0"),
        _timestamp("created_at"),
    )
    op.create_index("ix_project_images_project_id", "project_images", ["project_id"])

    op.create_table(
        "pages",
        sa.Column("id", sa.Uuid(), primary_key=True),
        sa.Column("slug", sa.String(255), nullable=False),
        sa.Column("title", sa.String(255), nullable=False),
        sa.Column("description", sa.Text()),
        sa.Column("enabled", sa.Boolean(), nullable=False, server_default=sa.true()),
        sa.Column("show_in_nav", sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column("order_index", sa.Integer(), nullable=False, server_default="0"),
        _timestamp("created_at"),
        _timestamp("updated_at"),
    )
    op.create_index("ix_pages_slug", "pages", ["slug"], unique=True)

    op.create_table(
        "page_blocks",
        sa.Column("id", sa.Uuid(), primary_key=True),
        sa.Column("page_slug", sa.String(255), nullable=False),
        sa.Column("block_type", sa.String(100), nullable=False),
        sa.Column("block_config", JSON, nullable=False),
        sa.Column("order_index", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("enabled", sa.Boolean(), nullable=False, server_default=sa.true()),
        _timestamp("created_at"),
        _timestamp("updated_at"),
    )
    op.create_index("ix_page_blocks_page_slug", "page_blocks", ["page_slug"])

    op.create_table(
        "blog_posts",
        sa.Column("id", sa.Uuid(), primary_key=True),
        sa.Column("title", sa.String(500), nullable=False),
        sa.Column("slug", sa.String(500), nullable=False),
        sa.Column("content", sa.Text(), nullable=False, server_default=""),
        sa.Column("excerpt", sa.Text()),
        sa.Column("cover_image_url", sa.String(2048)),
        sa.Column("author_name", sa.String(255)),
        sa.Column("status", sa.String(20), nullable=False, server_default="draft"),
        sa.Column("source", sa.String(20), nullable=False, server_default="manual"),
        sa.Column("seo_title", sa.String(500)),
        sa.Column("seo_description", sa.Text()),
        sa.Column("seo_keywords", JSON),
        _timestamp("published_at", nullable=True),
        _timestamp("created_at"),
        _timestamp("updated_at"),
    )
    op.create_index("ix_blog_posts_slug", "blog_posts", ["slug"], unique=True)

    op.create_table(
        "nav_links",
        sa.Column("id", sa.Uuid(), primary_key=True),
        sa.Column("label", sa.String(255), nullable=False),
        sa.Column("url", sa.String(2048), nullable=False),
        sa.Column("order_index", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("enabled", sa.Boolean(), nullable=False, server_default=sa.true()),
        sa.Column("is_external", sa.Boolean(), nullable=False, server_default=sa.false()),
        _timestamp("created_at"),
    )
    op.create_table(
        "chat_settings",
        sa.Column("id", sa.Uuid(), primary_key=True),
        sa.Column("webhook_url", sa.String(2048)),
        sa.Column("initial_placeholder", sa.String(500)),
        sa.Column("active_placeholder", sa.String(500)),
        sa.Column("show_quick_actions", sa.Boolean(), nullable=False, server_default=sa.true()),
        _timestamp("updated_at"),
    )
    op.create_table(
        "featured_in",
        sa.Column("id", sa.Uuid(), primary_key=True),
        sa.Column("title", sa.String(255), nullable=False),
        sa.Column("description", sa.Text()),
        sa.Column("image_url", sa.String(2048)),
        sa.Column("link", sa.String(2048)),
        sa.Column("order_index", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("enabled", sa.Boolean(), nullable=False, server_default=sa.true()),
        _timestamp("created_at"),
    )
    op.create_table(
        "quick_actions",
        sa.Column("id", sa.Uuid(), primary_key=True),
        sa.Column("label", sa.String(255), nullable=False),
        sa.Column("message", sa.Text(), nullable=False),
        sa.Column("icon", sa.String(100)),
        sa.Column("order_index", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("enabled", sa.Boolean(), nullable=False, server_default=sa.true()),
        _timestamp("created_at"),
    )

    op.create_table(
        "newsletter_subscribers",
        sa.Column("id", sa.Uuid(), primary_key=True),
        sa.Column("email", sa.String(320), nullable=False),
        sa.Column("name", sa.String(255)),
        sa.Column("status", sa.String(20), nullable=False, server_default="active"),
        _timestamp("subscribed_at"),
        _timestamp("unsubscribed_at", nullable=True),
    )
    op.create_index("ix_newsletter_subscribers_email", "newsletter_subscribers", ["email"], unique=True)

    op.create_table(
        "newsletter_campaigns",
        sa.Column("id", sa.Uuid(), primary_key=True),
        sa.Column("subject", sa.String(500), nullable=False),
        sa.Column("content", sa.Text(), nullable=False, server_default=""),
        sa.Column("status", sa.String(20), nullable=False, server_default="draft"),
        _timestamp("scheduled_for", nullable=True),
        _timestamp("sent_at", nullable=True),
        sa.Column("recipient_count", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("open_count", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("click_count", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("agent_notes", sa.Text()),
        _timestamp("created_at"),
    )

    op.create_table(
        "agent_tasks",
        sa.Column("id", sa.Uuid(), primary_key=True),
        sa.Column("task_type", sa.String(50), nullable=False),
        sa.Column("status", sa.String(20), nullable=False, server_default="pending"),
        sa.Column("input_data", JSON),
        sa.Column("output_data", JSON),
        _timestamp("created_at"),
        _timestamp("completed_at", nullable=True),
    )
    op.create_index("ix_agent_tasks_task_type", "agent_tasks", ["task_type"])

    op.create_table(
        "modules",
        sa.Column("id", sa.Uuid(), primary_key=True),
        sa.Column("module_type", sa.String(100), nullable=False),
        sa.Column("module_config", JSON, nullable=False),
        sa.Column("enabled", sa.Boolean(), nullable=False, server_default=sa.true()),
        _timestamp("updated_at"),
    )
    op.create_index("ix_modules_module_type", "modules", ["module_type"], unique=True)

    op.create_table(
        "page_views",
        sa.Column("id", sa.Uuid(), primary_key=True),
        sa.Column("page_slug", sa.String(500), nullable=False),
        sa.Column("visitor_id", sa.String(255)),
        sa.Column("user_agent", sa.Text()),
        sa.Column("referrer", sa.String(2048)),
        _timestamp("created_at"),
    )
    op.create_index("ix_page_views_page_slug", "page_views", ["page_slug"])
    op.create_index("ix_page_views_visitor_id", "page_views", ["visitor_id"])
    op.create_index("ix_page_views_created_at", "page_views", ["created_at"])

    op.create_table(
        "chat_analytics",
        sa.Column("id", sa.Uuid(), primary_key=True),
        sa.Column("visitor_id", sa.String(255)),
        sa.Column("message_count", sa.Integer(), nullable=False, server_default="0"),
        _timestamp("session_start"),
        _timestamp("session_end", nullable=True),
        _timestamp("created_at"),
    )
    op.create_index("ix_chat_analytics_visitor_id", "chat_analytics", ["visitor_id"])


def downgrade() -> None:
    for table in (
        "chat_analytics", "page_views", "modules", "agent_tasks",
        "newsletter_campaigns", "newsletter_subscribers", "quick_actions",
        "featured_in", "chat_settings", "nav_links", "blog_posts",
        "page_blocks", "pages", "project_images", "projects",
    ):
        op.drop_table(table)
