"""
Lead scoring for open prospects.

Each lead is scored on four factors worth up to 25 points each (company fit,
deal size, engagement and timing) for a total between 0 and 100.
"""

import re
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Dict, List

from .formatting import days_since, deal_value, format_currency

FACTOR_CAP = 25

FIT_INDUSTRY_TERMS = ("saas", "software", "tech")
FIT_MARKETING_TERMS = ("marketing", "media", "content", "agency")
FIT_TITLE_TERMS = ("cmo", "marketing", "head of growth")

# (minimum MRR, points), checked top down
DEAL_SIZE_BANDS = ((10000, 25), (5000, 20), (2000, 15), (500, 10))
DEAL_SIZE_LABELS = {25: "High-value deal", 20: "Mid-high deal", 15: "Mid-value deal", 10: "Starter deal"}

ENGAGEMENT_POINTS = {
    "lead": 5,
    "in-contact": 15,
    "negotiating": 25,
    "won": 25,
    "lost": 0,
}

# (max days since last update, points)
TIMING_BANDS = ((3, 25), (7, 20), (14, 12), (30, 6))

RECOMMENDATION_BANDS = (
    (80, "Hot lead - prioritize immediate follow-up"),
    (60, "Strong prospect - schedule a call this week"),
    (40, "Worth pursuing - send personalized outreach"),
    (20, "Nurture - add to email sequence"),
)
COLD_RECOMMENDATION = "Cold - low priority, revisit later"


@dataclass
class LeadScore:
    """Score breakdown for a single lead."""
    company_fit: int
    deal_size: int
    engagement: int
    timing: int
    signals: List[str] = field(default_factory=list)

    @property
    def total(self) -> int:
        return self.company_fit + self.deal_size + self.engagement + self.timing

    @property
    def recommendation(self) -> str:
        for threshold, text in RECOMMENDATION_BANDS:
            if self.total >= threshold:
                return text
        return COLD_RECOMMENDATION

    def to_dict(self) -> Dict[str, Any]:
        return {
            "score": self.total,
            "company_fit": self.company_fit,
            "deal_size": self.deal_size,
            "engagement": self.engagement,
            "timing": self.timing,
            "signals": list(self.signals),
            "recommendation": self.recommendation,
        }


def _company_fit(customer: Dict[str, Any], signals: List[str]) -> int:
    company = (customer.get("company") or "").lower()
    name = (customer.get("name") or "").lower()
    email = (customer.get("email") or "").lower()
    points = 0

    if any(term in company for term in FIT_INDUSTRY_TERMS):
        points += 8
        signals.append("Tech/SaaS company")
    if any(term in company for term in FIT_MARKETING_TERMS):
        points += 10
        signals.append("Marketing-focused company")
    if any(term in name for term in FIT_TITLE_TERMS):
        points += 7
        signals.append("Decision maker contact")
    if email:
        points += 3
        # "Northwind Media" -> "northwindmedia"
        domain = re.sub(r"[^a-z0-9]", "", company)
        if domain and domain in email:
            points += 2
            signals.append("Company email verified")

    return min(points, FACTOR_CAP)


def _deal_size(customer: Dict[str, Any], signals: List[str]) -> int:
    value = deal_value(customer)
    for minimum, points in DEAL_SIZE_BANDS:
        if value >= minimum:
            signals.append(f"{DEAL_SIZE_LABELS[points]} ({format_currency(minimum)}+ MRR)")
            return points
    if value > 0:
        signals.append("Small deal potential")
        return 5
    return 3


def _engagement(customer: Dict[str, Any], signals: List[str]) -> int:
    status = customer.get("status") or ""
    if status == "negotiating":
        signals.append("In negotiation")
    elif status == "in-contact":
        signals.append("Actively engaged")
    return ENGAGEMENT_POINTS.get(status, 0)


def _timing(customer: Dict[str, Any], now: datetime, signals: List[str]) -> int:
    points = 2
    idle = days_since(customer.get("updated_at"), now)
    if idle is not None:
        for max_days, band_points in TIMING_BANDS:
            if idle <= max_days:
                points = band_points
                break
        if idle <= 7:
            signals.append("Recently active")
        elif idle > 30:
            signals.append("Going cold (30+ days silent)")

    age = days_since(customer.get("created_at"), now)
    if age is not None and age <= 7 and customer.get("status") == "lead":
        points += 5
        signals.append("Fresh lead")

    return min(points, FACTOR_CAP)


def score_lead(customer: Dict[str, Any], now: datetime) -> LeadScore:
    """
    Score a customer record as a sales lead.

    Args:
        customer: Customer record from the store
        now: Reference time for the timing factor

    Returns:
        LeadScore with the factor breakdown and recommendation
    """
    signals: List[str] = []
    return LeadScore(
        company_fit=_company_fit(customer, signals),
        deal_size=_deal_size(customer, signals),
        engagement=_engagement(customer, signals),
        timing=_timing(customer, now, signals),
        signals=signals,
    )
