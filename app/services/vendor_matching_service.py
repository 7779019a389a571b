"""Rule-based vendor matching and kanban card materialization for leads."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field

from sqlalchemy import func
from sqlalchemy.orm import selectinload

from app.core.exceptions import NotFoundError
from app.models.kanban_card import CardTeam, KanbanCard
from app.models.lead import Lead
from app.models.vendor import Team, Vendor
from app.services.base_service import BaseService

logger = logging.getLogger(__name__)

OVERLAP_POINTS = 30
MIDPOINT_POINTS = 30


def parse_service_types(raw: str | None) -> set[str]:
    """Lower-case, trim and comma-split a service tag string."""
    if not raw:
        return set()
    return {part.strip().lower() for part in raw.split(",") if part.strip()}


def score_vendor(vendor_min: int, vendor_max: int, lead_min: int, lead_max: int) -> int:
    """Score 0-60: share of the lead range the vendor covers, plus a bonus when the lead midpoint fits."""
    score = 0.0
    overlap_start = max(vendor_min, lead_min)
    overlap_end = min(vendor_max, lead_max)
    if overlap_end >= overlap_start:
        lead_range = lead_max - lead_min
        if lead_range <= 0:
            score += OVERLAP_POINTS
        else:
            overlap_pct = (overlap_end - overlap_start) / lead_range * 100
            score += min(OVERLAP_POINTS, overlap_pct * 0.3)

    midpoint = (lead_min + lead_max) / 2
    if vendor_min <= midpoint <= vendor_max:
        score += MIDPOINT_POINTS
    return round(score)


@dataclass
class MatchedVendor:
    id: str
    name: str
    email: str
    contact_no: str | None
    service_types: str | None
    minimum_amount: int
    maximum_amount: int
    team_count: int
    match_score: int


@dataclass
class CardSyncResult:
    """Outcome of one card materialization run."""

    lead_id: str
    cards_created: int = 0
    links_created: int = 0
    failures: list[dict[str, str]] = field(default_factory=list)

    @property
    def ok(self) -> bool:
        return not self.failures


class VendorMatchingService(BaseService):
    """Service for lead/vendor matching and card-team assignment."""

    def get_lead(self, lead_id: str) -> Lead:
        return self.get_or_404(Lead, lead_id)

    def match_vendors_for_lead(self, lead: Lead) -> list[MatchedVendor]:
        if lead.budget_min is None or lead.budget_max is None:
            logger.info(
                "matching.lead_without_budget",
                extra={"event": "matching.lead_without_budget", "lead_id": lead.id},
            )
            return []

        team_counts = (
            self.db.query(Team.vendor_id, func.count(Team.id).label("team_count"))
            .group_by(Team.vendor_id)
            .subquery()
        )
        rows = (
            self.db.query(Vendor, team_counts.c.team_count)
            .join(team_counts, team_counts.c.vendor_id == Vendor.id)
            .filter(
                Vendor.is_active.is_(True),
                Vendor.minimum_amount <= lead.budget_max,
                Vendor.maximum_amount >= lead.budget_min,
                team_counts.c.team_count > 0,
            )
            .all()
        )

        wanted = parse_service_types(lead.service_types)
        matched: list[MatchedVendor] = []
        for vendor, team_count in rows:
            if wanted and not wanted & parse_service_types(vendor.service_types):
                continue
            matched.append(
                MatchedVendor(
                    id=vendor.id,
                    name=vendor.name,
                    email=vendor.email,
                    contact_no=vendor.contact_no,
                    service_types=vendor.service_types,
                    minimum_amount=vendor.minimum_amount,
                    maximum_amount=vendor.maximum_amount,
                    team_count=team_count,
                    match_score=score_vendor(
                        vendor.minimum_amount, vendor.maximum_amount, lead.budget_min, lead.budget_max
                    ),
                )
            )

        matched.sort(key=lambda item: (-item.match_score, item.name))
        logger.info(
            "matching.vendors_matched",
            extra={
                "event": "matching.vendors_matched",
                "lead_id": lead.id,
                "budget_min": lead.budget_min,
                "budget_max": lead.budget_max,
                "matched": len(matched),
            },
        )
        return matched

    def match_vendors_for_lead_id(self, lead_id: str) -> list[MatchedVendor]:
        return self.match_vendors_for_lead(self.get_lead(lead_id))

    def _upsert_vendor_card(
        self,
        lead_id: str,
        vendor_id: str,
        team_ids: list[str],
        result: CardSyncResult,
    ) -> None:
        self.get_or_404(Vendor, vendor_id)

        card = (
            self.db.query(KanbanCard)
            .filter(KanbanCard.lead_id == lead_id, KanbanCard.vendor_id == vendor_id)
            .first()
        )
        if card is None:
            card = KanbanCard(lead_id=lead_id, vendor_id=vendor_id)
            self.db.add(card)
            self.db.flush()
            result.cards_created += 1

        linked = {row.team_id for row in card.card_teams}
        valid_team_ids = {
            row.id
            for row in self.db.query(Team.id).filter(Team.vendor_id == vendor_id, Team.id.in_(team_ids)).all()
        }
        for team_id in dict.fromkeys(team_ids):
            if team_id in linked:
                continue
            if team_id not in valid_team_ids:
                result.failures.append({"vendor_id": vendor_id, "team_id": team_id, "reason": "team not found for vendor"})
                logger.warning(
                    "matching.team_link_skipped",
                    extra={"event": "matching.team_link_skipped", "lead_id": lead_id, "vendor_id": vendor_id, "team_id": team_id},
                )
                continue
            card.card_teams.append(CardTeam(team_id=team_id))
            linked.add(team_id)
            result.links_created += 1

    def create_or_update_cards(self, lead_id: str, team_ids_by_vendor: dict[str, list[str]]) -> CardSyncResult:
        """Additively upsert one card per vendor and its team links.

        Each vendor is committed on its own, so a failure for one vendor never
        rolls back links already applied for another.
        """
        self.get_lead(lead_id)
        result = CardSyncResult(lead_id=lead_id)
        for vendor_id, team_ids in team_ids_by_vendor.items():
            try:
                self._upsert_vendor_card(lead_id, vendor_id, list(team_ids or []), result)
                self.commit()
            except Exception as exc:
                self.rollback()
                result.failures.append({"vendor_id": vendor_id, "reason": str(exc)})
                logger.warning(
                    "matching.card_upsert_failed",
                    extra={
                        "event": "matching.card_upsert_failed",
                        "lead_id": lead_id,
                        "vendor_id": vendor_id,
                        "reason": str(exc),
                    },
                )

        logger.info(
            "matching.cards_synced",
            extra={
                "event": "matching.cards_synced",
                "lead_id": lead_id,
                "cards_created": result.cards_created,
                "links_created": result.links_created,
                "failures": len(result.failures),
            },
        )
        return result

    def unassign_teams(self, lead_id: str, vendor_id: str, team_ids: list[str] | None = None) -> int:
        """Remove team links from a card; with no team ids the whole card goes. Returns rows removed."""
        card = (
            self.db.query(KanbanCard)
            .filter(KanbanCard.lead_id == lead_id, KanbanCard.vendor_id == vendor_id)
            .first()
        )
        if card is None:
            raise NotFoundError(f"No card for lead {lead_id} and vendor {vendor_id}")

        if team_ids is None:
            removed = len(card.card_teams) + 1
            self.db.delete(card)
        else:
            doomed = [row for row in card.card_teams if row.team_id in set(team_ids)]
            for row in doomed:
                card.card_teams.remove(row)
            removed = len(doomed)
        self.commit()
        return removed

    def list_cards_for_lead(self, lead_id: str) -> list[KanbanCard]:
        self.get_lead(lead_id)
        return (
            self.db.query(KanbanCard)
            .options(
                selectinload(KanbanCard.vendor),
                selectinload(KanbanCard.card_teams).selectinload(CardTeam.team),
            )
            .filter(KanbanCard.lead_id == lead_id)
            .order_by(KanbanCard.created_at)
            .all()
        )
