"""Initial academic plan (PPA) schema."""
from __future__ import annotations

from alembic import op
import sqlalchemy as sa

revision = "20250110_000001"
down_revision = None
branch_labels = None
depends_on = None


def upgrade() -> None:
    op.create_table(
        "academic_periods",
        sa.Column("id", sa.String(length=36), nullable=False),
        sa.Column("code", sa.String(length=20), nullable=False),
        sa.Column("name", sa.String(length=200), nullable=False),
        sa.Column("start_date", sa.Date(), nullable=True),
        sa.Column("end_date", sa.Date(), nullable=True),
        sa.Column("is_active", sa.Boolean(), nullable=False, server_default="1"),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index(op.f("ix_academic_periods_code"), "academic_periods", ["code"], unique=True)

    op.create_table(
        "subjects",
        sa.Column("id", sa.String(length=36), nullable=False),
        sa.Column("code", sa.String(length=20), nullable=False),
        sa.Column("name", sa.String(length=200), nullable=False),
        sa.Column("description", sa.Text(), nullable=True),
        sa.Column("is_active", sa.Boolean(), nullable=False, server_default="1"),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index(op.f("ix_subjects_code"), "subjects", ["code"], unique=True)

    op.create_table(
        "teacher_assignments",
        sa.Column("id", sa.String(length=36), nullable=False),
        sa.Column("teacher_id", sa.String(length=64), nullable=False),
        sa.Column("subject_id", sa.String(length=36), nullable=False),
        sa.Column("academic_period_id", sa.String(length=36), nullable=False),
        sa.Column("is_active", sa.Boolean(), nullable=False, server_default="1"),
        sa.ForeignKeyConstraint(["subject_id"], ["subjects.id"], ondelete="CASCADE"),
        sa.ForeignKeyConstraint(["academic_period_id"], ["academic_periods.id"], ondelete="CASCADE"),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index(op.f("ix_teacher_assignments_teacher_id"), "teacher_assignments", ["teacher_id"], unique=False)
    op.create_index(op.f("ix_teacher_assignments_subject_id"), "teacher_assignments", ["subject_id"], unique=False)
    op.create_index(
        op.f("ix_teacher_assignments_academic_period_id"),
        "teacher_assignments",
        ["academic_period_id"],
        unique=False,
    )

    op.create_table(
        "plans",
        sa.Column("id", sa.String(length=36), nullable=False),
        sa.Column("title", sa.String(length=300), nullable=False),
        sa.Column("description", sa.Text(), nullable=True),
        sa.Column("general_objective", sa.Text(), nullable=True),
        sa.Column("specific_objectives", sa.Text(), nullable=True),
        sa.Column("academic_period_id", sa.String(length=36), nullable=False),
        sa.Column("primary_teacher_id", sa.String(length=64), nullable=False),
        sa.Column("status", sa.String(length=32), nullable=False),
        sa.Column("is_continuation_of", sa.String(length=36), nullable=True),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False),
        sa.Column("updated_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("version", sa.Integer(), nullable=False),
        sa.ForeignKeyConstraint(["academic_period_id"], ["academic_periods.id"], ondelete="RESTRICT"),
        sa.ForeignKeyConstraint(["is_continuation_of"], ["plans.id"], ondelete="RESTRICT"),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint("is_continuation_of", name="uq_plans_is_continuation_of"),
    )
    op.create_index(op.f("ix_plans_academic_period_id"), "plans", ["academic_period_id"], unique=False)
    op.create_index(op.f("ix_plans_primary_teacher_id"), "plans", ["primary_teacher_id"], unique=False)

    op.create_table(
        "plan_teacher_assignments",
        sa.Column("plan_id", sa.String(length=36), nullable=False),
        sa.Column("teacher_assignment_id", sa.String(length=36), nullable=False),
        sa.ForeignKeyConstraint(["plan_id"], ["plans.id"], ondelete="CASCADE"),
        sa.ForeignKeyConstraint(["teacher_assignment_id"], ["teacher_assignments.id"], ondelete="RESTRICT"),
        sa.PrimaryKeyConstraint("plan_id", "teacher_assignment_id"),
    )

    op.create_table(
        "plan_students",
        sa.Column("id", sa.String(length=36), nullable=False),
        sa.Column("name", sa.String(length=200), nullable=False),
        sa.Column("position", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("plan_id", sa.String(length=36), nullable=False),
        sa.ForeignKeyConstraint(["plan_id"], ["plans.id"], ondelete="CASCADE"),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index(op.f("ix_plan_students_plan_id"), "plan_students", ["plan_id"], unique=False)

    op.create_table(
        "plan_attachments",
        sa.Column("id", sa.String(length=36), nullable=False),
        sa.Column("plan_id", sa.String(length=36), nullable=False),
        sa.Column("type", sa.String(length=32), nullable=False),
        sa.Column("name", sa.String(length=300), nullable=False),
        sa.Column("file_key", sa.String(length=500), nullable=False),
        sa.Column("content_type", sa.String(length=100), nullable=True),
        sa.Column("uploaded_by_user_id", sa.String(length=64), nullable=False),
        sa.Column("uploaded_at", sa.DateTime(timezone=True), nullable=False),
        sa.Column("is_deleted", sa.Boolean(), nullable=False, server_default="0"),
        sa.Column("deleted_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("deleted_by_user_id", sa.String(length=64), nullable=True),
        sa.ForeignKeyConstraint(["plan_id"], ["plans.id"], ondelete="CASCADE"),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index(op.f("ix_plan_attachments_plan_id"), "plan_attachments", ["plan_id"], unique=False)
    op.create_index(op.f("ix_plan_attachments_type"), "plan_attachments", ["type"], unique=False)

    op.create_table(
        "plan_history",
        sa.Column("id", sa.String(length=36), nullable=False),
        sa.Column("plan_id", sa.String(length=36), nullable=False),
        sa.Column("sequence", sa.Integer(), nullable=False),
        sa.Column("action_type", sa.String(length=48), nullable=False),
        sa.Column("performed_by_user_id", sa.String(length=64), nullable=False),
        sa.Column("performed_at", sa.DateTime(timezone=True), nullable=False),
        sa.Column("old_value", sa.Text(), nullable=True),
        sa.Column("new_value", sa.Text(), nullable=True),
        sa.Column("notes", sa.Text(), nullable=True),
        sa.ForeignKeyConstraint(["plan_id"], ["plans.id"], ondelete="RESTRICT"),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint("plan_id", "sequence", name="uq_plan_history_sequence"),
    )
    op.create_index(op.f("ix_plan_history_plan_id"), "plan_history", ["plan_id"], unique=False)


def downgrade() -> None:
    op.drop_index(op.f("ix_plan_history_plan_id"), table_name="plan_history")
    op.drop_table("plan_history")
    op.drop_index(op.f("ix_plan_attachments_type"), table_name="plan_attachments")
    op.drop_index(op.f("ix_plan_attachments_plan_id"), table_name="plan_attachments")
    op.drop_table("plan_attachments")
    op.drop_index(op.f("ix_plan_students_plan_id"), table_name="plan_students")
    op.drop_table("plan_students")
    op.drop_table("plan_teacher_assignments")
    op.drop_index(op.f("ix_plans_primary_teacher_id"), table_name="plans")
    op.drop_index(op.f("ix_plans_academic_period_id"), table_name="plans")
    op.drop_table("plans")
    op.drop_index(op.f("ix_teacher_assignments_academic_period_id"), table_name="teacher_assignments")
    op.drop_index(op.f("ix_teacher_assignments_subject_id"), table_name="teacher_assignments")
    op.drop_index(op.f("ix_teacher_assignments_teacher_id"), table_name="teacher_assignments")
    op.drop_table("teacher_assignments")
    op.drop_index(op.f("ix_subjects_code"), table_name="subjects")
    op.drop_table("subjects")
    op.drop_index(op.f("ix_academic_periods_code"), table_name="academic_periods")
    op.drop_table("academic_periods")
