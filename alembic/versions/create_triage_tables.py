"""create_triage_tables

Revision ID: create_triage_tables
Revises:
Create Date: 2026-10-18 09:00:00.000000
"""

from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa

revision: str = "create_triage_tables"
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    op.create_table(
        "patients",
        sa.Column("id", sa.Uuid(), nullable=False),
        sa.Column("name", sa.String(length=200), nullable=False),
        sa.Column("age", sa.Integer(), nullable=False),
        sa.Column("contact", sa.String(length=50), nullable=False),
        sa.Column("complaint", sa.Text(), nullable=False),
        sa.Column("symptoms", sa.JSON(), nullable=False),
        sa.Column("blood_pressure", sa.String(length=20), nullable=True),
        sa.Column("pulse", sa.Integer(), nullable=True),
        sa.Column("temperature", sa.Float(), nullable=True),
        sa.Column(
            "priority",
            sa.Enum("critical", "urgent", "nonUrgent", name="priority_class_enum"),
            nullable=False,
        ),
        sa.Column("token_number", sa.Integer(), nullable=False),
        sa.Column("appointment_date", sa.Date(), nullable=False),
        sa.Column("slot_index", sa.Integer(), nullable=False),
        sa.Column("appointment_start_time", sa.Time(), nullable=False),
        sa.Column("appointment_end_time", sa.Time(), nullable=False),
        sa.Column(
            "status",
            sa.Enum("waiting", "inTreatment", name="patient_status_enum"),
            nullable=False,
        ),
        sa.Column("check_in_time", sa.DateTime(timezone=True), nullable=True),
        sa.Column("assigned_room_id", sa.Uuid(), nullable=True),
        sa.Column("assigned_room_number", sa.String(length=20), nullable=True),
        sa.Column("notes", sa.Text(), nullable=False),
        sa.Column(
            "created_at",
            sa.DateTime(timezone=True),
            server_default=sa.text("CURRENT_TIMESTAMP"),
            nullable=False,
        ),
        sa.Column(
            "updated_at",
            sa.DateTime(timezone=True),
            server_default=sa.text("CURRENT_TIMESTAMP"),
            nullable=False,
        ),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint("assigned_room_id"),
    )
    op.create_index(op.f("ix_patients_name"), "patients", ["name"])
    op.create_index(op.f("ix_patients_contact"), "patients", ["contact"])
    op.create_index(op.f("ix_patients_priority"), "patients", ["priority"])
    op.create_index(op.f("ix_patients_appointment_date"), "patients", ["appointment_date"])
    op.create_index(op.f("ix_patients_status"), "patients", ["status"])
    op.create_index(op.f("ix_patients_check_in_time"), "patients", ["check_in_time"])

    op.create_table(
        "rooms",
        sa.Column("id", sa.Uuid(), nullable=False),
        sa.Column("room_number", sa.String(length=20), nullable=False),
        sa.Column(
            "status",
            sa.Enum("available", "occupied", name="room_status_enum"),
            nullable=False,
        ),
        sa.Column("assigned_patient_id", sa.Uuid(), nullable=True),
        sa.Column("assigned_patient_name", sa.String(length=200), nullable=True),
        sa.Column("assigned_time", sa.DateTime(timezone=True), nullable=True),
        sa.Column(
            "created_at",
            sa.DateTime(timezone=True),
            server_default=sa.text("CURRENT_TIMESTAMP"),
            nullable=False,
        ),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint("room_number"),
        sa.UniqueConstraint("assigned_patient_id"),
    )
    op.create_index(op.f("ix_rooms_status"), "rooms", ["status"])

    op.create_table(
        "audit_logs",
        sa.Column("id", sa.Uuid(), nullable=False),
        sa.Column("action", sa.String(length=50), nullable=False),
        sa.Column("patient_id", sa.Uuid(), nullable=True),
        sa.Column("patient_name", sa.String(length=200), nullable=True),
        sa.Column("performed_by", sa.String(length=100), nullable=False),
        sa.Column("details", sa.Text(), nullable=True),
        sa.Column("timestamp", sa.DateTime(timezone=True), nullable=False),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index(op.f("ix_audit_logs_patient_id"), "audit_logs", ["patient_id"])
    op.create_index(op.f("ix_audit_logs_timestamp"), "audit_logs", ["timestamp"])

    op.create_table(
        "token_counters",
        sa.Column("series_key", sa.String(length=100), nullable=False),
        sa.Column("last_value", sa.Integer(), nullable=False),
        sa.Column("updated_at", sa.DateTime(timezone=True), nullable=False),
        sa.PrimaryKeyConstraint("series_key"),
    )


def downgrade() -> None:
    op.drop_table("token_counters")

    op.drop_index(op.f("ix_audit_logs_timestamp"), table_name="audit_logs")
    op.drop_index(op.f("ix_audit_logs_patient_id"), table_name="audit_logs")
    op.drop_table("audit_logs")

    op.drop_index(op.f("ix_rooms_status"), table_name="rooms")
    op.drop_table("rooms")

    op.drop_index(op.f("ix_patients_check_in_time"), table_name="patients")
    op.drop_index(op.f("ix_patients_status"), table_name="patients")
    op.drop_index(op.f("ix_patients_appointment_date"), table_name="patients")
    op.drop_index(op.f("ix_patients_priority"), table_name="patients")
    op.drop_index(op.f("ix_patients_contact"), table_name="patients")
    op.drop_index(op.f("ix_patients_name"), table_name="patients")
    op.drop_table("patients")

    sa.Enum(name="room_status_enum").drop(op.get_bind(), checkfirst=True)
    sa.Enum(name="patient_status_enum").drop(op.get_bind(), checkfirst=True)
    sa.Enum(name="priority_class_enum").drop(op.get_bind(), checkfirst=True)
