"""Initial database schema

Revision ID: 001
Revises:
Create Date: 2026-10-19 00:00:00.000000

"""

import sqlalchemy as sa
from alembic import op

# revision identifiers, used by Alembic.
revision = "001"
down_revision = None
branch_labels = None
depends_on = None

visibility_enum = sa.Enum("PUBLIC", "DRAFT", "PRIVATE", name="visibility")
project_status_enum = sa.Enum(
    "COMPLETED", "IN_PROGRESS", "ON_HOLD", name="projectstatus"
)


def _timestamps() -> list:
    return [
        sa.Column(
            "created_at",
            sa.DateTime(timezone=True),
            server_default=sa.text("CURRENT_TIMESTAMP"),
            nullable=True,
        ),
        sa.Column(
            "updated_at",
            sa.DateTime(timezone=True),
            server_default=sa.text("CURRENT_TIMESTAMP"),
            nullable=True,
        ),
    ]


def _engagement_table(name: str) -> None:
    op.create_table(
        name,
        sa.Column(
            "profile_id",
            sa.Uuid(),
            sa.ForeignKey("profiles.id", ondelete="CASCADE"),
            primary_key=True,
        ),
        sa.Column(
            "project_id",
            sa.Uuid(),
            sa.ForeignKey("projects.id", ondelete="CASCADE"),
            primary_key=True,
        ),
        sa.Column(
            "created_at",
            sa.DateTime(timezone=True),
            server_default=sa.text("CURRENT_TIMESTAMP"),
            nullable=True,
        ),
    )
    op.create_index(f"ix_{name}_project", name, ["project_id"])


def upgrade() -> None:
    # Accounts
    op.create_table(
        "users",
        sa.Column("id", sa.Uuid(), primary_key=True),
        sa.Column("email", sa.String(255), nullable=False, unique=True, index=True),
        sa.Column("hashed_password", sa.String(255), nullable=False),
        sa.Column("is_active", sa.Boolean(), server_default=sa.true(), nullable=True),
        sa.Column("last_login_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("login_count", sa.Integer(), server_default="0", nullable=True),
        *_timestamps(),
    )
    op.create_index("ix_users_email_active", "users", ["email", "is_active"])

    # Profiles
    op.create_table(
        "profiles",
        sa.Column("id", sa.Uuid(), primary_key=True),
        sa.Column(
            "user_id",
            sa.Uuid(),
            sa.ForeignKey("users.id", ondelete="CASCADE"),
            nullable=False,
            unique=True,
        ),
        sa.Column("username", sa.String(30), nullable=False, unique=True, index=True),
        sa.Column("full_name", sa.String(100), nullable=True),
        sa.Column("headline", sa.String(200), nullable=True),
        sa.Column("bio", sa.Text(), nullable=True),
        sa.Column("avatar_url", sa.Text(), nullable=True),
        sa.Column("github_url", sa.Text(), nullable=True),
        sa.Column("linkedin_url", sa.Text(), nullable=True),
        sa.Column("twitter_url", sa.Text(), nullable=True),
        sa.Column("website_url", sa.Text(), nullable=True),
        sa.Column("open_to_work", sa.Boolean(), server_default=sa.false(), nullable=True),
        *_timestamps(),
    )

    # Skill vocabulary
    op.create_table(
        "skills",
        sa.Column("id", sa.Uuid(), primary_key=True),
        sa.Column("name", sa.String(50), nullable=False, unique=True, index=True),
        sa.Column("category", sa.String(50), nullable=True),
        sa.Column(
            "created_at",
            sa.DateTime(timezone=True),
            server_default=sa.text("CURRENT_TIMESTAMP"),
            nullable=True,
        ),
    )

    # Projects
    op.create_table(
        "projects",
        sa.Column("id", sa.Uuid(), primary_key=True),
        sa.Column(
            "profile_id",
            sa.Uuid(),
            sa.ForeignKey("profiles.id", ondelete="CASCADE"),
            nullable=False,
        ),
        sa.Column("title", sa.String(200), nullable=False),
        sa.Column("slug", sa.String(220), nullable=False),
        sa.Column("short_desc", sa.String(500), nullable=True),
        sa.Column("full_desc", sa.Text(), nullable=True),
        sa.Column("cover_image_url", sa.Text(), nullable=True),
        sa.Column("demo_video_url", sa.Text(), nullable=True),
        sa.Column("github_url", sa.Text(), nullable=True),
        sa.Column("live_url", sa.Text(), nullable=True),
        sa.Column("visibility", visibility_enum, nullable=False, server_default="PUBLIC"),
        sa.Column(
            "status", project_status_enum, nullable=False, server_default="COMPLETED"
        ),
        sa.Column("category", sa.String(50), nullable=True),
        sa.Column("likes_count", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("saves_count", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("views_count", sa.Integer(), nullable=False, server_default="0"),
        *_timestamps(),
    )
    op.create_index("ix_projects_profile_created", "projects", ["profile_id", "created_at"])
    op.create_index(
        "ix_projects_visibility_created", "projects", ["visibility", "created_at"]
    )
    op.create_index("ix_projects_visibility_likes", "projects", ["visibility", "likes_count"])
    op.create_index("ix_projects_category", "projects", ["category"])

    op.create_table(
        "project_skills",
        sa.Column(
            "project_id",
            sa.Uuid(),
            sa.ForeignKey("projects.id", ondelete="CASCADE"),
            primary_key=True,
        ),
        sa.Column(
            "skill_id",
            sa.Uuid(),
            sa.ForeignKey("skills.id", ondelete="CASCADE"),
            primary_key=True,
        ),
    )

    # Engagement records; the composite primary key makes each pair unique
    _engagement_table("project_likes")
    _engagement_table("project_saves")
    op.create_index(
        "ix_project_saves_profile_created", "project_saves", ["profile_id", "created_at"]
    )


def downgrade() -> None:
    op.drop_table("project_saves")
    op.drop_table("project_likes")
    op.drop_table("project_skills")
    op.drop_table("projects")
    op.drop_table("skills")
    op.drop_table("profiles")
    op.drop_table("users")

    visibility_enum.drop(op.get_bind(), checkfirst=True)
    project_status_enum.drop(op.get_bind(), checkfirst=True)
