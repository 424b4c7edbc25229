"""Financial aggregates over campaigns, collaborations and the ledger."""

from collections.abc import Iterable
from dataclasses import dataclass
from decimal import ROUND_HALF_UP, Decimal
from typing import Any

from agency_manager.models import (
    Campaign,
    CampaignStatus,
    Collaboration,
    ExtraCost,
    Income,
    PaymentStatus,
    Talent,
)


def margin_percentage(revenue: float, margin: float) -> float:
    """Margin as a percentage of revenue, rounded half-up to one decimal.

    Zero revenue yields 0.0.
    """
    if revenue <= 0:
        return 0.0
    percentage = margin / revenue * 100
    return float(Decimal(percentage).quantize(Decimal("0.1"), rounding=ROUND_HALF_UP))


@dataclass
class Analytics:
    """Revenue, payouts, costs and margin plus headline counts."""

    revenue: float = 0
    talent_payouts: float = 0
    extra_costs: float = 0
    margin: float = 0
    margin_percentage: float = 0.0
    income_received: float = 0
    income_pending: float = 0
    collaborations_total: int = 0
    collaborations_paid: int = 0
    collaborations_unpaid: int = 0
    talents_total: int = 0
    talents_active: int = 0
    campaigns_total: int = 0
    campaigns_active: int = 0
    campaigns_closed: int = 0

    @classmethod
    def from_wire(cls, payload: dict[str, Any]) -> "Analytics":
        """Parse the server's /analytics response."""
        totals = payload.get("totals", {})
        income = payload.get("income", {})
        collaborations = payload.get("collaborations") or payload.get("campaignTalents") or {}
        talents = payload.get("talents", {})
        campaigns = payload.get("campaigns", {})
        return cls(
            revenue=totals.get("fatturato", 0),
            talent_payouts=totals.get("talentPayouts", 0),
            extra_costs=totals.get("extraCosts", 0),
            margin=totals.get("utile", 0),
            margin_percentage=round(float(totals.get("marginPercentage") or 0), 1),
            income_received=income.get("received", 0),
            income_pending=income.get("pending", 0),
            collaborations_total=collaborations.get("total", 0),
            collaborations_paid=collaborations.get("paid", 0),
            collaborations_unpaid=collaborations.get("unpaid", 0),
            talents_total=talents.get("total", 0),
            talents_active=talents.get("active", 0),
            campaigns_total=campaigns.get("total", 0),
            campaigns_active=campaigns.get("active", 0),
            campaigns_closed=campaigns.get("closed", 0),
        )

    def to_wire(self) -> dict[str, Any]:
        return {
            "totals": {
                "fatturato": self.revenue,
                "talentPayouts": self.talent_payouts,
                "extraCosts": self.extra_costs,
                "utile": self.margin,
                "marginPercentage": self.margin_percentage,
            },
            "income": {"received": self.income_received, "pending": self.income_pending},
            "collaborations": {
                "total": self.collaborations_total,
                "paid": self.collaborations_paid,
                "unpaid": self.collaborations_unpaid,
            },
            "talents": {"total": self.talents_total, "active": self.talents_active},
            "campaigns": {
                "total": self.campaigns_total,
                "active": self.campaigns_active,
                "closed": self.campaigns_closed,
            },
        }


def compute_analytics(
    campaigns: Iterable[Campaign],
    collaborations: Iterable[Collaboration],
    costs: Iterable[ExtraCost],
    income: Iterable[Income],
    talents: Iterable[Talent] = (),
) -> Analytics:
    """Compute the aggregates locally, matching the server's /analytics figures."""
    campaigns = list(campaigns)
    collaborations = list(collaborations)
    costs = list(costs)
    income = list(income)
    talents = list(talents)

    revenue = sum(c.total_budget or 0 for c in campaigns)
    talent_payouts = sum(c.fee or 0 for c in collaborations)
    extra_costs = sum(c.amount or 0 for c in costs)
    margin = revenue - talent_payouts - extra_costs

    return Analytics(
        revenue=revenue,
        talent_payouts=talent_payouts,
        extra_costs=extra_costs,
        margin=margin,
        margin_percentage=margin_percentage(revenue, margin),
        income_received=sum(i.amount for i in income if i.status == "received"),
        income_pending=sum(i.amount for i in income if i.status == "pending"),
        collaborations_total=len(collaborations),
        collaborations_paid=sum(1 for c in collaborations if c.payment_status == PaymentStatus.PAID),
        collaborations_unpaid=sum(1 for c in collaborations if c.payment_status == PaymentStatus.UNPAID),
        talents_total=len(talents),
        talents_active=sum(1 for t in talents if t.status == "active"),
        campaigns_total=len(campaigns),
        campaigns_active=sum(1 for c in campaigns if c.status == CampaignStatus.ACTIVE),
        campaigns_closed=sum(1 for c in campaigns if c.status == CampaignStatus.CLOSED),
    )
