"""wedding operations core schema

Revision ID: 20261019_0001
Revises:
Create Date: 2026-10-19 00:00:01
"""

from __future__ import annotations

from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision = "20261019_0001"
down_revision = None
branch_labels = None
depends_on = None

USER_ROLE = sa.Enum("admin", "user", "vendor", name="userrole")
LEAD_STATUS = sa.Enum("INQUIRY", "PROPOSAL", "BOOKED", "COMPLETED", name="leadstatus")
SAVE_STATUS = sa.Enum("DRAFT", "SUBMITTED", "ARCHIVED", name="savestatus")
LEAD_SOURCE = sa.Enum("DIRECT", "WEBSITE", "REFERRAL", "SOCIAL_MEDIA", "WEDDING_FAIR", "OTHER", name="leadsource")
PROPOSAL_STATUS = sa.Enum("DRAFT", "SENT", "VIEWED", "ACCEPTED", "REJECTED", name="proposalstatus")
PROPOSAL_TEMPLATE = sa.Enum("classic", "modern", "traditional", "scratch", name="proposaltemplate")
LINE_ITEM_STATUS = sa.Enum("PENDING", "ASSIGNED", name="lineitemstatus")
PLAN_SERVICE_STATUS = sa.Enum("PENDING", "ASSIGNED", "ACCEPTED", "DECLINED", name="planservicestatus")
NOTIFICATION_TYPE = sa.Enum(
    "PROPOSAL_SENT", "PROPOSAL_VIEWED", "PROPOSAL_ACCEPTED", "PROPOSAL_REJECTED", name="notificationtype"
)


def _audit_columns() -> list[sa.Column]:
    return [
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False),
        sa.Column("updated_at", sa.DateTime(timezone=True), nullable=False),
    ]


def upgrade() -> None:
    op.create_table(
        "users",
        sa.Column("id", sa.String(36), primary_key=True),
        sa.Column("name", sa.String(255), nullable=False),
        sa.Column("email", sa.String(320), nullable=False),
        sa.Column("role", USER_ROLE, nullable=False),
        sa.Column("is_active", sa.Boolean(), nullable=False),
        *_audit_columns(),
        sa.UniqueConstraint("email", name="uq_users_email"),
    )
    op.create_index("idx_users_role", "users", ["role"])

    op.create_table(
        "vendors",
        sa.Column("id", sa.String(36), primary_key=True),
        sa.Column("name", sa.String(255), nullable=False),
        sa.Column("email", sa.String(320), nullable=False),
        sa.Column("contact_no", sa.String(40)),
        sa.Column("service_types", sa.Text()),
        sa.Column("minimum_amount", sa.BigInteger(), nullable=False),
        sa.Column("maximum_amount", sa.BigInteger(), nullable=False),
        sa.Column("is_active", sa.Boolean(), nullable=False),
        *_audit_columns(),
        sa.UniqueConstraint("email", name="uq_vendors_email"),
    )
    op.create_index("idx_vendors_active_amounts", "vendors", ["is_active", "minimum_amount", "maximum_amount"])

    op.create_table(
        "teams",
        sa.Column("id", sa.String(36), primary_key=True),
        sa.Column("vendor_id", sa.String(36), sa.ForeignKey("vendors.id", ondelete="CASCADE"), nullable=False),
        sa.Column("name", sa.String(255), nullable=False),
        sa.Column("description", sa.Text()),
        *_audit_columns(),
    )
    op.create_index("idx_teams_vendor", "teams", ["vendor_id"])

    op.create_table(
        "team_members",
        sa.Column("id", sa.String(36), primary_key=True),
        sa.Column("vendor_id", sa.String(36), sa.ForeignKey("vendors.id", ondelete="CASCADE"), nullable=False),
        sa.Column("name", sa.String(255), nullable=False),
        sa.Column("email", sa.String(320)),
        sa.Column("phone", sa.String(40)),
        sa.Column("role", sa.String(120)),
        *_audit_columns(),
    )
    op.create_index("idx_team_members_vendor", "team_members", ["vendor_id"])

    op.create_table(
        "team_memberships",
        sa.Column("id", sa.String(36), primary_key=True),
        sa.Column("team_id", sa.String(36), sa.ForeignKey("teams.id", ondelete="CASCADE"), nullable=False),
        sa.Column(
            "team_member_id", sa.String(36), sa.ForeignKey("team_members.id", ondelete="CASCADE"), nullable=False
        ),
        sa.UniqueConstraint("team_id", "team_member_id", name="uq_team_memberships_pair"),
    )

    op.create_table(
        "vendor_services",
        sa.Column("id", sa.String(36), primary_key=True),
        sa.Column("vendor_id", sa.String(36), sa.ForeignKey("vendors.id", ondelete="CASCADE"), nullable=False),
        sa.Column("title", sa.String(255), nullable=False),
        sa.Column("category", sa.String(120)),
        sa.Column("price", sa.Float(), nullable=False),
        *_audit_columns(),
    )
    op.create_index("idx_vendor_services_vendor", "vendor_services", ["vendor_id"])

    op.create_table(
        "leads",
        sa.Column("id", sa.String(36), primary_key=True),
        sa.Column("partner1_name", sa.String(255)),
        sa.Column("partner2_name", sa.String(255)),
        sa.Column("primary_contact", sa.String(255)),
        sa.Column("phone_number", sa.String(40)),
        sa.Column("whatsapp_number", sa.String(40)),
        sa.Column("whatsapp_same_as_phone", sa.Boolean(), nullable=False),
        sa.Column("email", sa.String(320)),
        sa.Column("wedding_date", sa.DateTime(timezone=True)),
        sa.Column("flexible_dates", sa.Boolean(), nullable=False),
        sa.Column("guest_count_min", sa.Integer()),
        sa.Column("guest_count_max", sa.Integer()),
        sa.Column("budget_min", sa.BigInteger()),
        sa.Column("budget_max", sa.BigInteger()),
        sa.Column("budget", sa.BigInteger()),
        sa.Column("preferred_locations", sa.JSON(), nullable=False),
        sa.Column("lead_source", LEAD_SOURCE),
        sa.Column("referral_details", sa.Text()),
        sa.Column("initial_notes", sa.Text()),
        sa.Column("service_types", sa.Text()),
        sa.Column("title", sa.String(512)),
        sa.Column("description", sa.Text()),
        sa.Column("status", LEAD_STATUS, nullable=False),
        sa.Column("save_status", SAVE_STATUS, nullable=False),
        sa.Column("created_by_id", sa.String(36), sa.ForeignKey("users.id", ondelete="SET NULL")),
        *_audit_columns(),
    )
    op.create_index("idx_leads_status", "leads", ["status"])
    op.create_index("idx_leads_save_status", "leads", ["save_status"])
    op.create_index("idx_leads_created_by", "leads", ["created_by_id"])

    op.create_table(
        "cards",
        sa.Column("id", sa.String(36), primary_key=True),
        sa.Column("lead_id", sa.String(36), sa.ForeignKey("leads.id", ondelete="CASCADE"), nullable=False),
        sa.Column("vendor_id", sa.String(36), sa.ForeignKey("vendors.id", ondelete="CASCADE"), nullable=False),
        *_audit_columns(),
        sa.UniqueConstraint("lead_id", "vendor_id", name="uq_cards_lead_vendor"),
    )
    op.create_index("idx_cards_vendor", "cards", ["vendor_id"])

    op.create_table(
        "card_teams",
        sa.Column("id", sa.String(36), primary_key=True),
        sa.Column("card_id", sa.String(36), sa.ForeignKey("cards.id", ondelete="CASCADE"), nullable=False),
        sa.Column("team_id", sa.String(36), sa.ForeignKey("teams.id", ondelete="CASCADE"), nullable=False),
        *_audit_columns(),
        sa.UniqueConstraint("card_id", "team_id", name="uq_card_teams_card_team"),
    )

    op.create_table(
        "wedding_plans",
        sa.Column("id", sa.String(36), primary_key=True),
        sa.Column("lead_id", sa.String(36), sa.ForeignKey("leads.id", ondelete="CASCADE"), nullable=False),
        sa.Column("user_id", sa.String(36), sa.ForeignKey("users.id", ondelete="SET NULL")),
        sa.Column("total_budget", sa.BigInteger()),
        sa.Column("guests", sa.Integer()),
        *_audit_columns(),
        sa.UniqueConstraint("lead_id", name="uq_wedding_plans_lead"),
    )

    op.create_table(
        "wedding_events",
        sa.Column("id", sa.String(36), primary_key=True),
        sa.Column(
            "wedding_plan_id", sa.String(36), sa.ForeignKey("wedding_plans.id", ondelete="CASCADE"), nullable=False
        ),
        sa.Column("name", sa.String(255), nullable=False),
        sa.Column("date", sa.DateTime(timezone=True)),
        sa.Column("start_time", sa.String(20)),
        sa.Column("end_time", sa.String(20)),
        *_audit_columns(),
    )
    op.create_index("idx_wedding_events_plan", "wedding_events", ["wedding_plan_id"])

    op.create_table(
        "wedding_plan_services",
        sa.Column("id", sa.String(36), primary_key=True),
        sa.Column(
            "wedding_plan_id", sa.String(36), sa.ForeignKey("wedding_plans.id", ondelete="CASCADE"), nullable=False
        ),
        sa.Column(
            "vendor_service_id", sa.String(36), sa.ForeignKey("vendor_services.id", ondelete="SET NULL")
        ),
        sa.Column("quantity", sa.Integer(), nullable=False),
        sa.Column("notes", sa.Text()),
        sa.Column("status", PLAN_SERVICE_STATUS, nullable=False),
        *_audit_columns(),
    )
    op.create_index(
        "idx_wedding_plan_services_plan_status", "wedding_plan_services", ["wedding_plan_id", "status"]
    )

    op.create_table(
        "proposals",
        sa.Column("id", sa.String(36), primary_key=True),
        sa.Column("lead_id", sa.String(36), sa.ForeignKey("leads.id", ondelete="CASCADE"), nullable=False),
        sa.Column("reference", sa.String(32), nullable=False, unique=True),
        sa.Column("title", sa.String(512)),
        sa.Column("template", PROPOSAL_TEMPLATE, nullable=False),
        sa.Column("company_name", sa.String(255)),
        sa.Column("company_email", sa.String(320)),
        sa.Column("company_phone", sa.String(40)),
        sa.Column("company_address", sa.Text()),
        sa.Column("client_name", sa.String(255)),
        sa.Column("client_email", sa.String(320)),
        sa.Column("client_phone", sa.String(40)),
        sa.Column("intro_html", sa.Text()),
        sa.Column("terms_text", sa.Text()),
        sa.Column("payment_terms", sa.Text()),
        sa.Column("taxes_percent", sa.Float(), nullable=False),
        sa.Column("discount", sa.Float(), nullable=False),
        sa.Column("subtotal", sa.Float(), nullable=False),
        sa.Column("grand_total", sa.Float(), nullable=False),
        sa.Column("status", PROPOSAL_STATUS, nullable=False),
        sa.Column("budget_min", sa.BigInteger()),
        sa.Column("budget_max", sa.BigInteger()),
        sa.Column("guest_count_min", sa.Integer()),
        sa.Column("guest_count_max", sa.Integer()),
        sa.Column("preferred_locations", sa.JSON(), nullable=False),
        sa.Column("events", sa.JSON(), nullable=False),
        sa.Column("sent_at", sa.DateTime(timezone=True)),
        sa.Column("viewed_at", sa.DateTime(timezone=True)),
        sa.Column("accepted_at", sa.DateTime(timezone=True)),
        sa.Column("rejected_at", sa.DateTime(timezone=True)),
        *_audit_columns(),
    )
    op.create_index(
        "uq_proposals_lead_draft",
        "proposals",
        ["lead_id"],
        unique=True,
        postgresql_where=sa.text("status = 'DRAFT'"),
        sqlite_where=sa.text("status = 'DRAFT'"),
    )
    op.create_index("idx_proposals_lead_status", "proposals", ["lead_id", "status"])

    op.create_table(
        "proposal_services",
        sa.Column("id", sa.String(36), primary_key=True),
        sa.Column("proposal_id", sa.String(36), sa.ForeignKey("proposals.id", ondelete="CASCADE"), nullable=False),
        sa.Column("order", sa.Integer(), nullable=False),
        sa.Column("name", sa.String(255), nullable=False),
        sa.Column("description", sa.Text()),
        sa.Column("category", sa.String(120)),
        sa.Column("price", sa.Float(), nullable=False),
        sa.Column("quantity", sa.Integer(), nullable=False),
        sa.Column("vendor_id", sa.String(36), sa.ForeignKey("vendors.id", ondelete="SET NULL")),
        sa.Column("vendor_service_id", sa.String(36), sa.ForeignKey("vendor_services.id", ondelete="SET NULL")),
        sa.Column("status", LINE_ITEM_STATUS, nullable=False),
        *_audit_columns(),
    )
    op.create_index("idx_proposal_services_proposal", "proposal_services", ["proposal_id"])

    op.create_table(
        "proposal_custom_lines",
        sa.Column("id", sa.String(36), primary_key=True),
        sa.Column("proposal_id", sa.String(36), sa.ForeignKey("proposals.id", ondelete="CASCADE"), nullable=False),
        sa.Column("order", sa.Integer(), nullable=False),
        sa.Column("label", sa.String(255), nullable=False),
        sa.Column("unit_price", sa.Float(), nullable=False),
        sa.Column("quantity", sa.Integer(), nullable=False),
        *_audit_columns(),
    )
    op.create_index("idx_proposal_custom_lines_proposal", "proposal_custom_lines", ["proposal_id"])

    op.create_table(
        "proposal_versions",
        sa.Column("id", sa.String(36), primary_key=True),
        sa.Column("proposal_id", sa.String(36), sa.ForeignKey("proposals.id", ondelete="CASCADE"), nullable=False),
        sa.Column("snapshot", sa.JSON(), nullable=False),
        sa.Column("created_by_id", sa.String(36)),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False),
    )
    op.create_index(
        "idx_proposal_versions_proposal_created", "proposal_versions", ["proposal_id", "created_at"]
    )

    op.create_table(
        "notifications",
        sa.Column("id", sa.String(36), primary_key=True),
        sa.Column("message", sa.Text(), nullable=False),
        sa.Column("type", NOTIFICATION_TYPE, nullable=False),
        sa.Column("recipient_id", sa.String(36)),
        sa.Column("recipient_role", sa.String(20)),
        sa.Column("is_read", sa.Boolean(), nullable=False),
        *_audit_columns(),
    )
    op.create_index("idx_notifications_recipient_read", "notifications", ["recipient_id", "is_read"])
    op.create_index("idx_notifications_recipient_role", "notifications", ["recipient_role"])


def downgrade() -> None:
    for table in (
        "notifications",
        "proposal_versions",
        "proposal_custom_lines",
        "proposal_services",
        "proposals",
        "wedding_plan_services",
        "wedding_events",
        "wedding_plans",
        "card_teams",
        "cards",
        "leads",
        "vendor_services",
        "team_memberships",
        "team_members",
        "teams",
        "vendors",
        "users",
    ):
        op.drop_table(table)

    bind = op.get_bind()
    for enum_type in (
        NOTIFICATION_TYPE,
        PLAN_SERVICE_STATUS,
        LINE_ITEM_STATUS,
        PROPOSAL_TEMPLATE,
        PROPOSAL_STATUS,
        LEAD_SOURCE,
        SAVE_STATUS,
        LEAD_STATUS,
        USER_ROLE,
    ):
        enum_type.drop(bind, checkfirst=True)
