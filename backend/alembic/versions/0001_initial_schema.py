"""Initial schema - users, listings, blog posts and wizard drafts.

Revision ID: 0001
Revises: (none)
Create Date: 2026-10-19
"""

revision = "0001"
down_revision = None
branch_labels = None
depends_on = None

from alembic import op
import sqlalchemy as sa


def upgrade() -> None:
    # ── Users ────────────────────────────────────────────────

    op.create_table(
        "users",
        sa.Column("id", sa.String(36), primary_key=True),
        sa.Column("email", sa.String(255), nullable=False),
        sa.Column("hashed_password", sa.String(255), nullable=False),
        sa.Column("full_name", sa.String(255), nullable=False),
        sa.Column("phone", sa.String(20)),
        sa.Column("role", sa.Enum("ADMIN", "AGENT", "USER", name="userrole"), nullable=False),
        sa.Column("is_active", sa.Boolean(), server_default=sa.true()),
        sa.Column("bio", sa.Text()),
        sa.Column("avatar_url", sa.String(500)),
        sa.Column("custom_permissions", sa.JSON(), nullable=True),
        sa.Column("preferred_language", sa.String(5), server_default="es", nullable=False),
        sa.Column("preferred_theme", sa.String(10), server_default="light", nullable=False),
        sa.Column("created_at", sa.DateTime(), server_default=sa.func.now()),
        sa.Column("updated_at", sa.DateTime(), server_default=sa.func.now()),
    )
    op.create_index("ix_users_email", "users", ["email"], unique=True)

    # ── Properties ───────────────────────────────────────────

    op.create_table(
        "properties",
        sa.Column("id", sa.String(36), primary_key=True),
        sa.Column("title", sa.String(255), nullable=False),
        sa.Column("description", sa.Text(), nullable=False),
        sa.Column("price", sa.Float(), nullable=False),
        sa.Column("currency", sa.String(3), server_default="USD"),
        sa.Column("surface", sa.Float(), nullable=False),
        sa.Column("property_type", sa.String(20), nullable=False),
        sa.Column("bedrooms", sa.Integer()),
        sa.Column("bathrooms", sa.Integer()),
        sa.Column("characteristics", sa.JSON()),
        sa.Column("address", sa.JSON()),
        sa.Column("latitude", sa.Float()),
        sa.Column("longitude", sa.Float()),
        sa.Column("images", sa.JSON()),
        sa.Column("videos", sa.JSON()),
        sa.Column("status", sa.String(20), server_default="draft"),
        sa.Column("language", sa.String(5), server_default="es"),
        sa.Column("ai_generated", sa.JSON()),
        sa.Column("featured", sa.Boolean(), server_default=sa.false()),
        sa.Column("owner_id", sa.String(36), sa.ForeignKey("users.id")),
        sa.Column("created_at", sa.DateTime(), server_default=sa.func.now()),
        sa.Column("updated_at", sa.DateTime(), server_default=sa.func.now()),
    )
    op.create_index("ix_properties_property_type", "properties", ["property_type"])
    op.create_index("ix_properties_status", "properties", ["status"])
    op.create_index("ix_properties_owner_id", "properties", ["owner_id"])

    # ── Lands ────────────────────────────────────────────────

    op.create_table(
        "lands",
        sa.Column("id", sa.String(36), primary_key=True),
        sa.Column("name", sa.String(255), nullable=False),
        sa.Column("description", sa.Text(), nullable=False),
        sa.Column("price", sa.Float(), nullable=False),
        sa.Column("currency", sa.String(3), server_default="USD"),
        sa.Column("surface", sa.Float(), nullable=False),
        sa.Column("land_type", sa.String(20), nullable=False),
        sa.Column("zoning", sa.String(100)),
        sa.Column("utilities", sa.JSON()),
        sa.Column("characteristics", sa.JSON()),
        sa.Column("location", sa.String(200)),
        sa.Column("address", sa.JSON()),
        sa.Column("latitude", sa.Float()),
        sa.Column("longitude", sa.Float()),
        sa.Column("access_roads", sa.JSON()),
        sa.Column("nearby_landmarks", sa.JSON()),
        sa.Column("images", sa.JSON()),
        sa.Column("aerial_images", sa.JSON()),
        sa.Column("document_images", sa.JSON()),
        sa.Column("tags", sa.JSON()),
        sa.Column("seo_title", sa.String(60)),
        sa.Column("seo_description", sa.String(160)),
        sa.Column("status", sa.String(20), server_default="draft"),
        sa.Column("language", sa.String(5), server_default="es"),
        sa.Column("ai_generated", sa.JSON()),
        sa.Column("owner_id", sa.String(36), sa.ForeignKey("users.id")),
        sa.Column("created_at", sa.DateTime(), server_default=sa.func.now()),
        sa.Column("updated_at", sa.DateTime(), server_default=sa.func.now()),
    )
    op.create_index("ix_lands_land_type", "lands", ["land_type"])
    op.create_index("ix_lands_status", "lands", ["status"])
    op.create_index("ix_lands_owner_id", "lands", ["owner_id"])

    # ── Blog ─────────────────────────────────────────────────

    op.create_table(
        "blog_posts",
        sa.Column("id", sa.String(36), primary_key=True),
        sa.Column("title", sa.String(200), nullable=False),
        sa.Column("slug", sa.String(220), nullable=False),
        sa.Column("content", sa.Text(), nullable=False),
        sa.Column("excerpt", sa.Text()),
        sa.Column("category", sa.String(30), server_default="general"),
        sa.Column("tags", sa.JSON()),
        sa.Column("cover_image", sa.String(500)),
        sa.Column("images", sa.JSON()),
        sa.Column("seo_title", sa.String(60)),
        sa.Column("seo_description", sa.String(160)),
        sa.Column("read_time", sa.Integer(), server_default="1"),
        sa.Column("status", sa.String(20), server_default="draft"),
        sa.Column("published_at", sa.DateTime()),
        sa.Column("author_id", sa.String(36), sa.ForeignKey("users.id")),
        sa.Column("created_at", sa.DateTime(), server_default=sa.func.now()),
        sa.Column("updated_at", sa.DateTime(), server_default=sa.func.now()),
    )
    op.create_index("ix_blog_posts_slug", "blog_posts", ["slug"], unique=True)
    op.create_index("ix_blog_posts_category", "blog_posts", ["category"])
    op.create_index("ix_blog_posts_status", "blog_posts", ["status"])
    op.create_index("ix_blog_posts_author_id", "blog_posts", ["author_id"])

    # ── Wizard drafts ────────────────────────────────────────

    op.create_table(
        "wizard_drafts",
        sa.Column("id", sa.String(36), primary_key=True),
        sa.Column("user_id", sa.String(36), sa.ForeignKey("users.id"), nullable=False),
        sa.Column("wizard_type", sa.String(20), nullable=False),
        sa.Column("title", sa.String(255)),
        sa.Column("form_data", sa.JSON()),
        sa.Column("current_step", sa.Integer(), server_default="1"),
        sa.Column("step_progress", sa.JSON()),
        sa.Column("completion_percentage", sa.Integer(), server_default="0"),
        sa.Column("created_at", sa.DateTime(), server_default=sa.func.now()),
        sa.Column("updated_at", sa.DateTime(), server_default=sa.func.now()),
    )
    op.create_index("ix_wizard_drafts_user_id", "wizard_drafts", ["user_id"])
    op.create_index("ix_wizard_drafts_wizard_type", "wizard_drafts", ["wizard_type"])


def downgrade() -> None:
    op.drop_table("wizard_drafts")
    op.drop_table("blog_posts")
    op.drop_table("lands")
    op.drop_table("properties")
    op.drop_table("users")
    sa.Enum(name="userrole").drop(op.get_bind(), checkfirst=True)
