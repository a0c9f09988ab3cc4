"""users, problems and submissions

Revision ID: 0001_initial_schema
Revises:
Create Date: 2026-10-17 00:00:00.000000

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa

# revision identifiers, used by Alembic.
revision: str = "0001_initial_schema"
down_revision: Union[str, Sequence[str], None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


_user_role = sa.Enum("user", "admin", name="userrole")
_difficulty = sa.Enum("easy", "medium", "hard", name="difficulty")
_submission_status = sa.Enum("pending", "accepted", "wrong", "error", name="submissionstatus")


def _timestamps():
    return [
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
        sa.Column("updated_at", sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
    ]


def upgrade() -> None:
    op.create_table(
        "users",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("name", sa.String(length=20), nullable=False),
        sa.Column("email_id", sa.String(length=255), nullable=False),
        sa.Column("age", sa.Integer(), nullable=True),
        sa.Column("role", _user_role, nullable=False),
        sa.Column("password", sa.String(length=255), nullable=False),
        *_timestamps(),
    )
    op.create_index("ix_users_id", "users", ["id"])
    op.create_index("ix_users_email_id", "users", ["email_id"], unique=True)

    op.create_table(
        "problems",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("title", sa.String(length=255), nullable=False),
        sa.Column("description", sa.Text(), nullable=False),
        sa.Column("difficulty", _difficulty, nullable=False),
        sa.Column("tags", sa.JSON(), nullable=False),
        sa.Column("creator_id", sa.Integer(), sa.ForeignKey("users.id", ondelete="SET NULL"), nullable=True),
        *_timestamps(),
    )
    op.create_index("ix_problems_id", "problems", ["id"])
    op.create_index("ix_problems_creator_id", "problems", ["creator_id"])

    op.create_table(
        "problem_test_cases",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("problem_id", sa.Integer(), sa.ForeignKey("problems.id", ondelete="CASCADE"), nullable=False),
        sa.Column("input", sa.Text(), nullable=False),
        sa.Column("output", sa.Text(), nullable=False),
        sa.Column("explanation", sa.Text(), nullable=True),
        sa.Column("is_hidden", sa.Boolean(), nullable=False),
        sa.Column("position", sa.Integer(), nullable=False),
    )
    op.create_index("ix_problem_test_cases_problem_id", "problem_test_cases", ["problem_id"])

    for table, column in (("problem_start_code", "initial_code"), ("problem_reference_solutions", "solution")):
        op.create_table(
            table,
            sa.Column("id", sa.Integer(), primary_key=True),
            sa.Column("problem_id", sa.Integer(), sa.ForeignKey("problems.id", ondelete="CASCADE"), nullable=False),
            sa.Column("language", sa.String(length=20), nullable=False),
            sa.Column(column, sa.Text(), nullable=False),
        )
        op.create_index(f"ix_{table}_problem_id", table, ["problem_id"])

    op.create_table(
        "user_solved_problems",
        sa.Column("user_id", sa.Integer(), sa.ForeignKey("users.id", ondelete="CASCADE"), primary_key=True),
        sa.Column("problem_id", sa.Integer(), sa.ForeignKey("problems.id", ondelete="CASCADE"), primary_key=True),
        sa.Column("solved_at", sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
    )

    op.create_table(
        "submissions",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("user_id", sa.Integer(), sa.ForeignKey("users.id", ondelete="CASCADE"), nullable=False),
        sa.Column("problem_id", sa.Integer(), sa.ForeignKey("problems.id", ondelete="CASCADE"), nullable=False),
        sa.Column("code", sa.Text(), nullable=False),
        sa.Column("language", sa.String(length=20), nullable=False),
        sa.Column("status", _submission_status, nullable=False),
        sa.Column("runtime", sa.Float(), nullable=False),
        sa.Column("memory", sa.Integer(), nullable=False),
        sa.Column("error_message", sa.Text(), nullable=False),
        sa.Column("test_cases_passed", sa.Integer(), nullable=False),
        sa.Column("test_cases_total", sa.Integer(), nullable=False),
        *_timestamps(),
    )
    op.create_index("ix_submissions_id", "submissions", ["id"])
    op.create_index("ix_submissions_user_problem", "submissions", ["user_id", "problem_id"])


def downgrade() -> None:
    op.drop_index("ix_submissions_user_problem", table_name="submissions")
    op.drop_index("ix_submissions_id", table_name="submissions")
    op.drop_table("submissions")
    op.drop_table("user_solved_problems")
    for table in ("problem_reference_solutions", "problem_start_code", "problem_test_cases"):
        op.drop_index(f"ix_{table}_problem_id", table_name=table)
        op.drop_table(table)
    op.drop_index("ix_problems_creator_id", table_name="problems")
    op.drop_index("ix_problems_id", table_name="problems")
    op.drop_table("problems")
    op.drop_index("ix_users_email_id", table_name="users")
    op.drop_index("ix_users_id", table_name="users")
    op.drop_table("users")
    bind = op.get_bind()
    for enum_type in (_submission_status, _difficulty, _user_role):
        enum_type.drop(bind, checkfirst=True)
