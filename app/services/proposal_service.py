"""Proposal engine: drafts, totals, versions and the status lifecycle."""

from __future__ import annotations

import logging
from collections.abc import Callable, Iterable
from dataclasses import dataclass, field
from typing import Any

from sqlalchemy import func, or_
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import selectinload

from app.core.config import get_config
from app.core.exceptions import NotFoundError, ValidationError
from app.models.base import utcnow
from app.models.enums import (
    LineItemStatus,
    NotificationType,
    ProposalAction,
    ProposalStatus,
    ProposalTemplate,
    UserRole,
)
from app.models.lead import Lead
from app.models.proposal import Proposal, ProposalCustomLine, ProposalServiceItem, ProposalVersion
from app.models.vendor import Vendor, VendorService
from app.orchestration.state_machine import FINALIZE_MACHINE, TRANSITION_ROLES, resolve_transition
from app.services.base_service import BaseService
from app.services.wedding_plan_store import WeddingPlanStore
from app.tasks.notification_tasks import dispatch_fan_out

logger = logging.getLogger(__name__)

Notifier = Callable[[str, NotificationType, str | None], Any]

DRAFT_SCALAR_FIELDS = (
    "title",
    "template",
    "company_name",
    "company_email",
    "company_phone",
    "company_address",
    "client_name",
    "client_email",
    "client_phone",
    "intro_html",
    "terms_text",
    "payment_terms",
    "taxes_percent",
    "discount",
    "budget_min",
    "budget_max",
    "guest_count_min",
    "guest_count_max",
    "preferred_locations",
)

NO_STATUS_CHANGE = "No status change required"


@dataclass(frozen=True)
class ProposalTotals:
    subtotal: float
    grand_total: float


def compute_totals(
    services: Iterable[tuple[float, int]],
    custom_lines: Iterable[tuple[float, int]],
    discount: float = 0.0,
    taxes_percent: float = 0.0,
) -> ProposalTotals:
    """subtotal = sum of line amounts; grand total = max(0, subtotal - discount) plus tax."""
    subtotal = sum(price * quantity for price, quantity in services)
    subtotal += sum(unit_price * quantity for unit_price, quantity in custom_lines)
    taxable = max(0.0, subtotal - (discount or 0.0))
    return ProposalTotals(subtotal=subtotal, grand_total=taxable * (1 + (taxes_percent or 0.0) / 100))


def totals_for(proposal: Proposal) -> ProposalTotals:
    return compute_totals(
        ((item.price, item.quantity) for item in proposal.services),
        ((line.unit_price, line.quantity) for line in proposal.custom_lines),
        proposal.discount,
        proposal.taxes_percent,
    )


def serialize_proposal(proposal: Proposal) -> dict[str, Any]:
    """JSON-ready snapshot of the live proposal, used for version rows."""
    return {
        "id": proposal.id,
        "reference": proposal.reference,
        "lead_id": proposal.lead_id,
        "status": proposal.status.value,
        "title": proposal.title,
        "template": proposal.template.value if proposal.template else None,
        "client_name": proposal.client_name,
        "company_name": proposal.company_name,
        "intro_html": proposal.intro_html,
        "terms_text": proposal.terms_text,
        "payment_terms": proposal.payment_terms,
        "taxes_percent": proposal.taxes_percent,
        "discount": proposal.discount,
        "subtotal": proposal.subtotal,
        "grand_total": proposal.grand_total,
        "events": list(proposal.events or []),
        "services": [
            {
                "name": item.name,
                "description": item.description,
                "category": item.category,
                "price": item.price,
                "quantity": item.quantity,
                "vendor_id": item.vendor_id,
                "vendor_service_id": item.vendor_service_id,
                "status": item.status.value,
            }
            for item in proposal.services
        ],
        "custom_lines": [
            {"label": line.label, "unit_price": line.unit_price, "quantity": line.quantity}
            for line in proposal.custom_lines
        ],
    }


@dataclass
class ProposalWithVersions:
    proposal: Proposal
    versions: list[ProposalVersion]


@dataclass
class StatusChangeResult:
    proposal: Proposal
    changed: bool
    message: str


@dataclass
class AssignmentResult:
    assigned: list[str] = field(default_factory=list)
    failures: list[dict[str, str]] = field(default_factory=list)


def _require_quantity(quantity: Any, label: str) -> int:
    if quantity is None:
        return 1
    if int(quantity) < 1:
        raise ValidationError(f"{label} quantity must be at least 1")
    return int(quantity)


class ProposalService(BaseService):
    """Service for the proposal lifecycle.

    Status changes are committed before notifications are dispatched; a failed
    dispatch is logged and never undoes the change.
    """

    def __init__(self, db=None, notify: Notifier | None = None) -> None:
        super().__init__(db)
        self.notify = notify or dispatch_fan_out

    # -- lookups -----------------------------------------------------------

    def _get_proposal(self, proposal_id: str) -> Proposal:
        proposal = (
            self.db.query(Proposal)
            .options(selectinload(Proposal.services), selectinload(Proposal.custom_lines))
            .filter(Proposal.id == proposal_id)
            .first()
        )
        if proposal is None:
            raise NotFoundError(f"Proposal {proposal_id} not found")
        return proposal

    def _line_category(self, item: dict[str, Any]) -> str:
        if item.get("category"):
            return item["category"]
        if item.get("vendor_service_id"):
            catalog = self.db.get(VendorService, item["vendor_service_id"])
            if catalog is not None and catalog.category:
                return catalog.category
        return "Other"

    def _find_draft(self, lead_id: str) -> Proposal | None:
        return (
            self.db.query(Proposal)
            .filter(Proposal.lead_id == lead_id, Proposal.status == ProposalStatus.DRAFT)
            .first()
        )

    def _recent_versions(self, proposal_id: str, limit: int) -> list[ProposalVersion]:
        return (
            self.db.query(ProposalVersion)
            .filter(ProposalVersion.proposal_id == proposal_id)
            .order_by(ProposalVersion.created_at.desc(), ProposalVersion.id.desc())
            .limit(limit)
            .all()
        )

    # -- drafts ------------------------------------------------------------

    def _new_draft(self, lead: Lead) -> Proposal:
        proposal = Proposal(
            lead_id=lead.id,
            status=ProposalStatus.DRAFT,
            title=lead.title,
            template=ProposalTemplate.CLASSIC,
            client_name=lead.couple_name or None,
            client_email=lead.email,
            client_phone=lead.phone_number,
            taxes_percent=float(get_config().DEFAULT_TAXES_PERCENT),
            discount=0.0,
            budget_min=lead.budget_min,
            budget_max=lead.budget_max,
            guest_count_min=lead.guest_count_min,
            guest_count_max=lead.guest_count_max,
            preferred_locations=list(lead.preferred_locations or []),
            events=[],
        )
        self.db.add(proposal)
        try:
            self.db.flush()
        except IntegrityError:
            # Another request created the draft first; continue with theirs.
            self.rollback()
            winner = self._find_draft(lead.id)
            if winner is None:
                raise
            logger.info(
                "proposal.draft_create_race",
                extra={"event": "proposal.draft_create_race", "lead_id": lead.id, "proposal_id": winner.id},
            )
            return winner
        return proposal

    def save_draft(self, lead_id: str, payload: dict[str, Any]) -> Proposal:
        """Update the lead's draft, creating it when missing, and persist fresh totals."""
        lead = self.get_or_404(Lead, lead_id)
        proposal = self._find_draft(lead_id) or self._new_draft(lead)

        for name in DRAFT_SCALAR_FIELDS:
            if name in payload and payload[name] is not None:
                value = payload[name]
                if name == "template":
                    value = ProposalTemplate(value)
                setattr(proposal, name, value)
        if (proposal.discount or 0) < 0:
            raise ValidationError("discount must not be negative")

        proposal.services.clear()
        proposal.custom_lines.clear()
        self.db.flush()
        for index, item in enumerate(payload.get("services") or []):
            proposal.services.append(
                ProposalServiceItem(
                    order=index,
                    name=item["name"],
                    description=item.get("description"),
                    category=self._line_category(item),
                    price=float(item.get("price") or 0),
                    quantity=_require_quantity(item.get("quantity"), "service"),
                    vendor_id=item.get("vendor_id"),
                    vendor_service_id=item.get("vendor_service_id"),
                    status=LineItemStatus(item.get("status") or LineItemStatus.PENDING),
                )
            )

        for index, line in enumerate(payload.get("custom_lines") or []):
            proposal.custom_lines.append(
                ProposalCustomLine(
                    order=index,
                    label=line["label"],
                    unit_price=float(line.get("unit_price") or 0),
                    quantity=_require_quantity(line.get("quantity"), "custom line"),
                )
            )

        # An empty event list falls back to the wedding plan.
        proposal.events = list(payload.get("events") or []) or WeddingPlanStore(self.db).event_snapshot(lead_id)

        totals = totals_for(proposal)
        proposal.subtotal = totals.subtotal
        proposal.grand_total = totals.grand_total
        self.commit()
        self.db.refresh(proposal)
        logger.info(
            "proposal.draft_saved",
            extra={"event": "proposal.draft_saved", "lead_id": lead_id, "proposal_id": proposal.id},
        )
        return proposal

    def get_draft(self, lead_id: str) -> ProposalWithVersions:
        self.get_or_404(Lead, lead_id)
        draft = self._find_draft(lead_id)
        if draft is None:
            raise NotFoundError(f"No draft proposal for lead {lead_id}")
        limit = get_config().PROPOSAL_DRAFT_VERSION_LIMIT
        return ProposalWithVersions(proposal=draft, versions=self._recent_versions(draft.id, limit))

    # -- versions and reads ------------------------------------------------

    def save_version(
        self,
        proposal_id: str,
        snapshot: dict[str, Any] | None = None,
        created_by_id: str | None = None,
    ) -> ProposalVersion:
        proposal = self._get_proposal(proposal_id)
        version = ProposalVersion(
            proposal_id=proposal.id,
            snapshot=snapshot if snapshot is not None else serialize_proposal(proposal),
            created_by_id=created_by_id,
        )
        self.db.add(version)
        self.commit()
        self.db.refresh(version)
        return version

    def get_proposal(self, proposal_id: str) -> ProposalWithVersions:
        proposal = self._get_proposal(proposal_id)
        limit = get_config().PROPOSAL_DETAIL_VERSION_LIMIT
        return ProposalWithVersions(proposal=proposal, versions=self._recent_versions(proposal.id, limit))

    def list_proposals(self, status: ProposalStatus | None = None, search: str | None = None) -> list[Proposal]:
        query = self.db.query(Proposal)
        if status is not None:
            query = query.filter(Proposal.status == status)
        if search:
            pattern = f"%{search.lower()}%"
            query = query.filter(
                or_(
                    func.lower(Proposal.reference).like(pattern),
                    func.lower(Proposal.title).like(pattern),
                    func.lower(Proposal.client_name).like(pattern),
                )
            )
        return query.order_by(Proposal.created_at.desc()).all()

    # -- lifecycle ---------------------------------------------------------

    def _owner_id(self, proposal: Proposal) -> str | None:
        lead = self.db.query(Lead).filter(Lead.id == proposal.lead_id).first()
        return lead.created_by_id if lead else None

    def _send_notification(self, proposal: Proposal, notification_type: NotificationType, verb: str) -> None:
        message = f"Proposal {proposal.reference} for {proposal.client_name or 'client'} was {verb}"
        try:
            self.notify(message, notification_type, self._owner_id(proposal))
        except Exception:
            logger.exception(
                "proposal.notification_failed",
                extra={
                    "event": "proposal.notification_failed",
                    "proposal_id": proposal.id,
                    "notification_type": notification_type.value,
                },
            )

    def finalize(self, proposal_id: str) -> Proposal:
        proposal = self._get_proposal(proposal_id)
        FINALIZE_MACHINE.assert_transition(proposal.status.value, ProposalStatus.SENT.value)
        proposal.status = ProposalStatus.SENT
        proposal.sent_at = utcnow()
        self.commit()
        self.db.refresh(proposal)
        logger.info("proposal.finalized", extra={"event": "proposal.finalized", "proposal_id": proposal.id})
        self._send_notification(proposal, NotificationType.PROPOSAL_SENT, "sent")
        return proposal

    def _reconcile_acceptance(self, proposal: Proposal) -> None:
        accepted_ids = WeddingPlanStore(self.db).accept_services(proposal.lead_id)
        matched = [item for item in proposal.services if item.vendor_service_id and item.vendor_service_id in accepted_ids]
        if not matched:
            # No plan overlap: every still-pending line counts as assigned.
            matched = [item for item in proposal.services if item.status == LineItemStatus.PENDING]
        for item in matched:
            item.status = LineItemStatus.ASSIGNED
        logger.info(
            "proposal.acceptance_reconciled",
            extra={
                "event": "proposal.acceptance_reconciled",
                "proposal_id": proposal.id,
                "plan_services_accepted": len(accepted_ids),
                "lines_assigned": len(matched),
            },
        )

    def update_status(self, proposal_id: str, viewer_role: UserRole | str, action: ProposalAction | str) -> StatusChangeResult:
        try:
            verb = ProposalAction(action)
        except ValueError as exc:
            raise ValidationError(f"Invalid action: {action}") from exc
        try:
            role = UserRole(viewer_role)
        except ValueError as exc:
            raise ValidationError(f"Invalid role: {viewer_role}") from exc

        proposal = self._get_proposal(proposal_id)
        if role not in TRANSITION_ROLES:
            return StatusChangeResult(proposal=proposal, changed=False, message=NO_STATUS_CHANGE)

        transition = resolve_transition(proposal.status, verb, role)
        if transition is None:
            logger.info(
                "proposal.transition_ignored",
                extra={
                    "event": "proposal.transition_ignored",
                    "proposal_id": proposal.id,
                    "status": proposal.status.value,
                    "action": verb.value,
                },
            )
            return StatusChangeResult(proposal=proposal, changed=False, message=NO_STATUS_CHANGE)

        proposal.status = transition.target
        setattr(proposal, transition.timestamp_field, utcnow())
        if transition.target == ProposalStatus.ACCEPTED:
            self._reconcile_acceptance(proposal)
        self.commit()
        self.db.refresh(proposal)
        logger.info(
            "proposal.status_updated",
            extra={"event": "proposal.status_updated", "proposal_id": proposal.id, "status": proposal.status.value},
        )
        self._send_notification(proposal, transition.notification_type, transition.verb)
        return StatusChangeResult(proposal=proposal, changed=True, message=f"Proposal {transition.verb}")

    def assign_vendors(self, proposal_id: str, assignments: list[dict[str, str]]) -> AssignmentResult:
        """Assign vendors line by line; each assignment commits or fails on its own."""
        proposal = self._get_proposal(proposal_id)
        result = AssignmentResult()
        for assignment in assignments:
            service_id = assignment.get("service_id")
            vendor_id = assignment.get("vendor_id")
            try:
                item = (
                    self.db.query(ProposalServiceItem)
                    .filter(ProposalServiceItem.id == service_id, ProposalServiceItem.proposal_id == proposal.id)
                    .first()
                )
                if item is None:
                    raise NotFoundError(f"Proposal service {service_id} not found")
                if self.db.query(Vendor.id).filter(Vendor.id == vendor_id).first() is None:
                    raise NotFoundError(f"Vendor {vendor_id} not found")
                item.vendor_id = vendor_id
                item.status = LineItemStatus.ASSIGNED
                item.updated_at = utcnow()
                self.commit()
                result.assigned.append(item.id)
            except Exception as exc:
                self.rollback()
                result.failures.append({"service_id": str(service_id), "reason": str(exc)})
                logger.warning(
                    "proposal.vendor_assignment_failed",
                    extra={
                        "event": "proposal.vendor_assignment_failed",
                        "proposal_id": proposal_id,
                        "service_id": service_id,
                        "reason": str(exc),
                    },
                )
        return result
