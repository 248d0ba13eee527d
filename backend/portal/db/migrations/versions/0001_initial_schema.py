"""initial enrollment schema

Revision ID: 0001
Revises:
Create Date: 2024-03-01 10:00:00
"""

from alembic import op
import sqlalchemy as sa

revision = "0001"
down_revision = None
branch_labels = None
depends_on = None


def upgrade() -> None:
    op.create_table(
        "upload_batches",
        sa.Column("id", sa.Uuid(), primary_key=True),
        sa.Column("batch_name", sa.String(255), nullable=False),
        sa.Column("description", sa.Text(), nullable=True),
        sa.Column("uploaded_by", sa.String(255), nullable=True),
        sa.Column("uploaded_at", sa.DateTime(timezone=True), nullable=False),
    )
    op.create_index("ix_upload_batches_uploaded_at", "upload_batches", ["uploaded_at"])

    op.create_table(
        "employees",
        sa.Column("id", sa.Uuid(), primary_key=True),
        sa.Column("emp_id", sa.String(50), nullable=False),
        sa.Column("name", sa.String(255), nullable=False),
        sa.Column("email", sa.String(320), nullable=False),
        sa.Column("date_of_birth", sa.Date(), nullable=True),
        sa.Column("gender", sa.String(10), nullable=False),
        sa.Column("mobile", sa.String(20), nullable=False),
        sa.Column("joining_date", sa.Date(), nullable=False),
        sa.Column("policy_start", sa.Date(), nullable=False),
        sa.Column("policy_end", sa.Date(), nullable=False),
        sa.Column("department", sa.String(255), nullable=True),
        sa.Column("designation", sa.String(255), nullable=True),
        sa.Column("salary", sa.Numeric(12, 2), nullable=True),
        sa.Column("enrolled", sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column("enrollment_date", sa.Date(), nullable=True),
        sa.Column("enrollment_status", sa.String(20), nullable=False, server_default="pending"),
        sa.Column("enrollment_due_date", sa.Date(), nullable=True),
        sa.Column("role", sa.String(20), nullable=False, server_default="employee"),
        sa.Column(
            "batch_id",
            sa.Uuid(),
            sa.ForeignKey("upload_batches.id", ondelete="SET NULL"),
            nullable=True,
        ),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False),
        sa.Column("updated_at", sa.DateTime(timezone=True), nullable=False),
    )
    op.create_index("ix_employees_emp_id", "employees", ["emp_id"], unique=True)
    op.create_index("ix_employees_email", "employees", ["email"])
    op.create_index("ix_employees_enrollment_status", "employees", ["enrollment_status"])
    op.create_index("ix_employees_batch_id", "employees", ["batch_id"])

    for table in ("family_members", "parents"):
        op.create_table(
            table,
            sa.Column("id", sa.Uuid(), primary_key=True),
            sa.Column(
                "employee_id",
                sa.Uuid(),
                sa.ForeignKey("employees.id", ondelete="CASCADE"),
                nullable=False,
            ),
            sa.Column("name", sa.String(255), nullable=False),
            sa.Column("relationship", sa.String(20), nullable=False),
            sa.Column("date_of_birth", sa.Date(), nullable=False),
            sa.Column("gender", sa.String(10), nullable=False),
            sa.Column("age", sa.Integer(), nullable=True),
            sa.Column("created_at", sa.DateTime(timezone=True), nullable=False),
        )
        op.create_index(f"ix_{table}_employee_id", table, ["employee_id"])

    op.create_table(
        "enrollments",
        sa.Column("id", sa.Uuid(), primary_key=True),
        sa.Column(
            "employee_id",
            sa.Uuid(),
            sa.ForeignKey("employees.id", ondelete="CASCADE"),
            nullable=False,
        ),
        sa.Column("parental_coverage_selected", sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column("parental_coverage_type", sa.String(20), nullable=True),
        sa.Column("main_policy_premium", sa.Numeric(12, 2), nullable=False, server_default="0"),
        sa.Column("parental_policy_premium", sa.Numeric(12, 2), nullable=False, server_default="0"),
        sa.Column("gst_amount", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("total_premium", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("monthly_deduction", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("pro_rata_factor", sa.Float(), nullable=False, server_default="0"),
        sa.Column("policy_remaining_days", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("enrollment_date", sa.Date(), nullable=False),
        sa.Column("status", sa.String(20), nullable=False, server_default="pending"),
        sa.Column("submitted_at", sa.DateTime(timezone=True), nullable=False),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False),
    )
    # One enrollment per employee
    op.create_index("ix_enrollments_employee_id", "enrollments", ["employee_id"], unique=True)
    op.create_index("ix_enrollments_status", "enrollments", ["status"])


def downgrade() -> None:
    op.drop_table("enrollments")
    op.drop_table("parents")
    op.drop_table("family_members")
    op.drop_table("employees")
    op.drop_table("upload_batches")
