"""initial club schema

Revision ID: 3f1c2a9e7b10
Revises: 
Create Date: 2026-10-18 10:12:41.118204

"""
from typing import Sequence, Union
from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision: str = '3f1c2a9e7b10'
down_revision: Union[str, Sequence[str], None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None

member_status = sa.Enum("active", "inactive", "pending_validation", name="memberstatusenum")
adherent_status = sa.Enum("active", "inactive", name="adherentstatusenum")
list_state = sa.Enum(
    "draft", "sent", "processed", "cancelled_by_member", "cancelled_by_admin", "expired",
    name="guestliststateenum",
)
payment_method = sa.Enum("cash", "transfer", "till", name="paymentmethodenum")
person_role = sa.Enum("titular", "family", "adherent", "guest", name="personroleenum")
review_result = sa.Enum("fit", "unfit", name="reviewresultenum")
entry_type = sa.Enum(
    "titular", "familiar", "adherente", "invitado_diario", "invitado_cumpleanos", name="entrytypeenum",
)


def _fitness_columns():
    return [
        sa.Column("fitness_valid", sa.Boolean(), nullable=True),
        sa.Column("fitness_issued_at", sa.Date(), nullable=True),
        sa.Column("fitness_expires_at", sa.Date(), nullable=True),
        sa.Column("fitness_invalidity_reason", sa.String(length=255), nullable=True),
    ]


def upgrade() -> None:
    """Socios, grupo familiar, listas diarias, revisiones médicas y estadísticas."""
    op.create_table(
        "members",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("member_number", sa.String(length=32), nullable=False),
        sa.Column("first_name", sa.String(length=120), nullable=False),
        sa.Column("last_name", sa.String(length=120), nullable=False),
        sa.Column("dni", sa.String(length=16), nullable=False),
        sa.Column("email", sa.String(length=254), nullable=True),
        sa.Column("birth_date", sa.Date(), nullable=True),
        sa.Column("status", member_status, nullable=False),
        *_fitness_columns(),
        sa.Column("created_at", sa.DateTime(), server_default=sa.func.now()),
        sa.Column("updated_at", sa.DateTime(), nullable=True),
    )
    op.create_index("ix_members_id", "members", ["id"])
    op.create_index("ix_members_member_number", "members", ["member_number"], unique=True)
    op.create_index("ix_members_dni", "members", ["dni"], unique=True)
    op.create_index("ix_members_last_name", "members", ["last_name"])

    for table in ("family_members", "adherents"):
        extra = (
            [sa.Column("relationship", sa.String(length=40), nullable=True)]
            if table == "family_members"
            else [sa.Column("status", adherent_status, nullable=False)]
        )
        op.create_table(
            table,
            sa.Column("id", sa.Integer(), primary_key=True),
            sa.Column("titular_id", sa.Integer(), sa.ForeignKey("members.id", ondelete="CASCADE"), nullable=False),
            sa.Column("first_name", sa.String(length=120), nullable=False),
            sa.Column("last_name", sa.String(length=120), nullable=False),
            sa.Column("dni", sa.String(length=16), nullable=False),
            sa.Column("birth_date", sa.Date(), nullable=True),
            *extra,
            *_fitness_columns(),
        )
        op.create_index(f"ix_{table}_id", table, ["id"])
        op.create_index(f"ix_{table}_titular_id", table, ["titular_id"])
        op.create_index(f"ix_{table}_dni", table, ["dni"])

    op.create_table(
        "guest_lists",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("titular_id", sa.Integer(), sa.ForeignKey("members.id", ondelete="CASCADE"), nullable=False),
        sa.Column("list_date", sa.Date(), nullable=False),
        sa.Column("state", list_state, nullable=False),
        sa.Column("responding_member_has_entered", sa.Boolean(), nullable=False),
        sa.Column("version", sa.Integer(), nullable=False),
        sa.Column("created_at", sa.DateTime(), server_default=sa.func.now()),
        sa.Column("updated_at", sa.DateTime(), nullable=True),
        sa.UniqueConstraint("titular_id", "list_date", name="uq_guest_lists_titular_date"),
    )
    op.create_index("ix_guest_lists_id", "guest_lists", ["id"])
    op.create_index("ix_guest_lists_titular_id", "guest_lists", ["titular_id"])
    op.create_index("ix_guest_lists_list_date", "guest_lists", ["list_date"])

    op.create_table(
        "daily_guests",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("guest_list_id", sa.Integer(), sa.ForeignKey("guest_lists.id", ondelete="CASCADE"), nullable=False),
        sa.Column("first_name", sa.String(length=120), nullable=False),
        sa.Column("last_name", sa.String(length=120), nullable=False),
        sa.Column("dni", sa.String(length=16), nullable=False),
        sa.Column("birth_date", sa.Date(), nullable=True),
        sa.Column("entered", sa.Boolean(), nullable=False),
        sa.Column("entered_at", sa.DateTime(), nullable=True),
        sa.Column("is_birthday_guest", sa.Boolean(), nullable=True),
        sa.Column("entered_as_birthday", sa.Boolean(), nullable=False),
        sa.Column("payment_method", payment_method, nullable=True),
        *_fitness_columns(),
        sa.UniqueConstraint("guest_list_id", "dni", name="uq_daily_guests_list_dni"),
    )
    op.create_index("ix_daily_guests_id", "daily_guests", ["id"])
    op.create_index("ix_daily_guests_guest_list_id", "daily_guests", ["guest_list_id"])

    op.create_table(
        "member_entries",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("guest_list_id", sa.Integer(), sa.ForeignKey("guest_lists.id", ondelete="CASCADE"), nullable=False),
        sa.Column("dni", sa.String(length=16), nullable=False),
        sa.Column("created_at", sa.DateTime(), server_default=sa.func.now()),
        sa.UniqueConstraint("guest_list_id", "dni", name="uq_member_entries_list_dni"),
    )
    op.create_index("ix_member_entries_id", "member_entries", ["id"])
    op.create_index("ix_member_entries_guest_list_id", "member_entries", ["guest_list_id"])

    op.create_table(
        "medical_reviews",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("titular_id", sa.Integer(), sa.ForeignKey("members.id", ondelete="CASCADE"), nullable=False),
        sa.Column("person_role", person_role, nullable=False),
        sa.Column("person_dni", sa.String(length=16), nullable=False),
        sa.Column("review_date", sa.Date(), nullable=False),
        sa.Column("result", review_result, nullable=False),
        sa.Column("expires_at", sa.Date(), nullable=True),
        sa.Column("notes", sa.String(length=500), nullable=True),
        sa.Column("doctor", sa.String(length=120), nullable=True),
        sa.Column("created_at", sa.DateTime(), server_default=sa.func.now()),
    )
    op.create_index("ix_medical_reviews_id", "medical_reviews", ["id"])
    op.create_index("ix_medical_reviews_titular_id", "medical_reviews", ["titular_id"])
    op.create_index("ix_medical_reviews_person_dni", "medical_reviews", ["person_dni"])

    op.create_table(
        "entry_stats",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("stat_date", sa.Date(), nullable=False),
        sa.Column("entry_type", entry_type, nullable=False),
        sa.Column("total", sa.Integer(), nullable=False),
        sa.UniqueConstraint("stat_date", "entry_type", name="uq_entry_stats_date_type"),
    )
    op.create_index("ix_entry_stats_id", "entry_stats", ["id"])
    op.create_index("ix_entry_stats_stat_date", "entry_stats", ["stat_date"])


def downgrade() -> None:
    for table in ("entry_stats", "medical_reviews", "member_entries", "daily_guests",
                  "guest_lists", "adherents", "family_members", "members"):
        op.drop_table(table)
    bind = op.get_bind()
    for enum in (entry_type, review_result, person_role, payment_method, list_state,
                 adherent_status, member_status):
        enum.drop(bind, checkfirst=True)
