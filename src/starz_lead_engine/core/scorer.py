"""Lead scoring engine - weighs deal value and urgency of sales leads."""

import logging
import math
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, Dict, Iterable, List, Mapping, Optional, Tuple, Union

from .config import ScoringConfig
from .models import Lead, Timeline
from .tables import (
    AUTHORITY_TITLES,
    BUDGET_BRACKETS,
    COMPANY_SIZE_SCORES,
    CONTACT_URGENCY_BOOST,
    DEFAULT_BUDGET_SCORE,
    DEFAULT_COMPANY_SIZE_SCORE,
    DEFAULT_SOURCE_QUALITY,
    DEFAULT_TIMELINE_SCORE,
    LEAD_STATUS_POINTS,
    OTHER_PROFILE,
    PIPELINE_STAGE_POINTS,
    QUALIFICATION_POINTS,
    RECENCY_POINTS,
    SOURCE_QUALITY_SCORES,
    TIMELINE_SCORES,
    TIMELINE_URGENCY_BOOST,
    classify_industry,
)

logger = logging.getLogger(__name__)

LeadLike = Union[Lead, Mapping[str, Any]]

_DEFAULT_CONFIG = ScoringConfig()

# Base recommendation pairs by minimum ai_score, highest first
_TIER_RECOMMENDATIONS: Tuple[Tuple[int, Tuple[str, str]], ...] = (
    (80, ("🔥 High-priority lead - Contact immediately",
          "💰 High deal potential - Prepare premium service proposals")),
    (65, ("📞 Priority contact - Reach out within 2 hours",
          "📋 Prepare detailed service presentation")),
    (45, ("📅 Schedule follow-up within 24 hours",
          "📧 Send informational materials")),
    (0, ("📝 Add to nurture campaign",
         "🔍 Gather more qualification information")),
)

QUALIFY_BUDGET = "💵 Qualify budget requirements during next contact"
FAST_TRACK = "⚡ Urgent timeline - Fast-track proposal process"
LOW_ENGAGEMENT = "📈 Low engagement - Try different contact methods"
INCOMPLETE_QUALIFICATION = "❓ Incomplete qualification - Focus on BANT discovery"


@dataclass(frozen=True)
class ScoreFactors:
    """The eight sub-scores behind a lead's composite score."""

    industry_value: int
    company_size_value: int
    budget_score: int
    timeline_score: int
    engagement_score: int
    source_quality: int
    urgency_multiplier: float
    qualification_level: int

    def to_dict(self) -> Dict[str, Any]:
        return {
            "industry_value": self.industry_value,
            "company_size_value": self.company_size_value,
            "budget_score": self.budget_score,
            "timeline_score": self.timeline_score,
            "engagement_score": self.engagement_score,
            "source_quality": self.source_quality,
            "urgency_multiplier": self.urgency_multiplier,
            "qualification_level": self.qualification_level,
        }


@dataclass(frozen=True)
class LeadScoringResult:
    """Result of scoring one lead. Created fresh on every call."""

    ai_score: int
    score_factors: ScoreFactors
    industry_score: int
    urgency_level: str
    qualification_score: int
    recommendations: Tuple[str, ...] = field(default_factory=tuple)
    priority_level: str = "low"
    industry: str = OTHER_PROFILE.industry

    @property
    def summary(self) -> str:
        """Get a one-line human-readable summary."""
        return (
            f"{self.ai_score}/100 - {self.priority_level} priority, "
            f"{self.urgency_level} urgency ({self.industry})"
        )

    def to_dict(self) -> Dict[str, Any]:
        """Serialize to a JSON-friendly dict."""
        return {
            "ai_score": self.ai_score,
            "score_factors": self.score_factors.to_dict(),
            "industry": self.industry,
            "industry_score": self.industry_score,
            "urgency_level": self.urgency_level,
            "qualification_score": self.qualification_score,
            "recommendations": list(self.recommendations),
            "priority_level": self.priority_level,
        }


@dataclass(frozen=True)
class ScoredLead:
    """A lead with its scoring result attached."""

    lead: Lead
    result: LeadScoringResult

    @property
    def ai_score(self) -> int:
        return self.result.ai_score

    def to_dict(self) -> Dict[str, Any]:
        data = self.lead.to_dict()
        data["calculated_score"] = self.result.to_dict()
        return data


# === Sub-scores ===

def calculate_industry_score(notes: Optional[str]) -> int:
    """Score industry value from keywords in the lead's notes."""
    return classify_industry(notes).score


def calculate_company_size_score(company_size: Optional[str]) -> int:
    if not company_size:
        return DEFAULT_COMPANY_SIZE_SCORE
    return COMPANY_SIZE_SCORES.get(company_size, DEFAULT_COMPANY_SIZE_SCORE)


def calculate_budget_score(budget: Optional[int], deal_value: Optional[int]) -> int:
    """Score deal size in cents. A zero or missing budget falls back to deal value."""
    value = budget or deal_value or 0
    for minimum, score in BUDGET_BRACKETS:
        if value >= minimum:
            return score
    return DEFAULT_BUDGET_SCORE


def calculate_timeline_score(timeline: Optional[str]) -> int:
    if not timeline:
        return DEFAULT_TIMELINE_SCORE
    return TIMELINE_SCORES.get(timeline, DEFAULT_TIMELINE_SCORE)


def calculate_engagement_score(lead: Lead, now: datetime) -> int:
    """Score engagement from contact recency, lead status and pipeline stage.

    Statuses and stages outside the point tables (``closed_won`` and the
    like) contribute nothing.
    """
    score = 0

    if lead.last_contacted_at:
        days_since_contact = math.floor(_seconds_since(lead.last_contacted_at, now) / 86400)
        for max_days, points in RECENCY_POINTS:
            if days_since_contact <= max_days:
                score += points
                break

    if lead.lead_status:
        score += LEAD_STATUS_POINTS.get(lead.lead_status, 0)
    if lead.pipeline_stage:
        score += PIPELINE_STAGE_POINTS.get(lead.pipeline_stage, 0)

    return min(100, score)


def calculate_source_quality(lead_source: Optional[str]) -> int:
    if not lead_source:
        return DEFAULT_SOURCE_QUALITY
    return SOURCE_QUALITY_SCORES.get(lead_source, DEFAULT_SOURCE_QUALITY)


def calculate_urgency_multiplier(lead: Lead, now: datetime, cap: float = 1.5) -> float:
    """Scale factor for time-sensitive leads, from 1.0 up to ``cap``."""
    multiplier = 1.0

    if lead.timeline:
        multiplier += TIMELINE_URGENCY_BOOST.get(lead.timeline, 0.0)

    if lead.last_contacted_at:
        hours_ago = _seconds_since(lead.last_contacted_at, now) / 3600
        for max_hours, boost in CONTACT_URGENCY_BOOST:
            if hours_ago <= max_hours:
                multiplier += boost
                break

    return round(min(cap, multiplier), 2)


def calculate_qualification_score(lead: Lead) -> int:
    """BANT-style qualification: budget, authority, need/timeline, reachability."""
    score = 0

    if lead.budget and lead.budget > 0:
        score += QUALIFICATION_POINTS
    if lead.position and any(title in lead.position.lower() for title in AUTHORITY_TITLES):
        score += QUALIFICATION_POINTS
    if lead.timeline and lead.timeline != Timeline.UNKNOWN:
        score += QUALIFICATION_POINTS
    if lead.phone and lead.email:
        score += QUALIFICATION_POINTS

    return score


# === Classification ===

def determine_urgency_level(
    ai_score: int,
    factors: ScoreFactors,
    config: ScoringConfig = _DEFAULT_CONFIG,
) -> str:
    if ai_score >= config.critical_score and factors.timeline_score >= config.critical_timeline:
        return "critical"
    if ai_score >= config.high_urgency_score and factors.timeline_score >= config.high_urgency_timeline:
        return "high"
    if ai_score >= config.medium_urgency_score:
        return "medium"
    return "low"


def determine_priority_level(ai_score: int, config: ScoringConfig = _DEFAULT_CONFIG) -> str:
    if ai_score >= config.urgent_threshold:
        return "urgent"
    if ai_score >= config.high_threshold:
        return "high"
    if ai_score >= config.medium_threshold:
        return "medium"
    return "low"


def generate_recommendations(ai_score: int, factors: ScoreFactors) -> Tuple[str, ...]:
    """Build the ordered next-step list: a base pair plus factor-specific notes."""
    recommendations: List[str] = []

    for minimum, pair in _TIER_RECOMMENDATIONS:
        if ai_score >= minimum:
            recommendations.extend(pair)
            break

    if factors.budget_score < 40:
        recommendations.append(QUALIFY_BUDGET)
    if factors.timeline_score >= 85:
        recommendations.append(FAST_TRACK)
    if factors.engagement_score < 30:
        recommendations.append(LOW_ENGAGEMENT)
    if factors.qualification_level < 50:
        recommendations.append(INCOMPLETE_QUALIFICATION)

    return tuple(recommendations)


# === Public API ===

def calculate_lead_score(
    lead: LeadLike,
    now: Optional[datetime] = None,
    config: Optional[ScoringConfig] = None,
) -> LeadScoringResult:
    """Score a lead.

    ``lead`` may be a Lead or a CRM contact mapping. ``now`` is the instant
    contact recency is measured against; it defaults to the current time,
    so pass it explicitly when results must be reproducible.
    """
    lead = _as_lead(lead)
    now = now or datetime.now(timezone.utc)
    config = config or _DEFAULT_CONFIG

    profile = classify_industry(lead.notes)
    factors = ScoreFactors(
        industry_value=profile.score,
        company_size_value=calculate_company_size_score(lead.company_size),
        budget_score=calculate_budget_score(lead.budget, lead.deal_value),
        timeline_score=calculate_timeline_score(lead.timeline),
        engagement_score=calculate_engagement_score(lead, now),
        source_quality=calculate_source_quality(lead.lead_source),
        urgency_multiplier=calculate_urgency_multiplier(lead, now, config.urgency_multiplier_cap),
        qualification_level=calculate_qualification_score(lead),
    )

    base_score = (
        factors.industry_value * config.weight("industry")
        + factors.company_size_value * config.weight("company_size")
        + factors.budget_score * config.weight("budget")
        + factors.timeline_score * config.weight("timeline")
        + factors.engagement_score * config.weight("engagement")
        + factors.source_quality * config.weight("source_quality")
        + factors.qualification_level * config.weight("qualification")
    )
    ai_score = max(0, min(100, _round_half_up(base_score * factors.urgency_multiplier)))

    result = LeadScoringResult(
        ai_score=ai_score,
        score_factors=factors,
        industry_score=factors.industry_value,
        urgency_level=determine_urgency_level(ai_score, factors, config),
        qualification_score=factors.qualification_level,
        recommendations=generate_recommendations(ai_score, factors),
        priority_level=determine_priority_level(ai_score, config),
        industry=profile.industry,
    )

    logger.debug(f"Scored lead {lead.id}: {result.summary}")
    return result


def score_multiple_leads(
    leads: Iterable[LeadLike],
    now: Optional[datetime] = None,
    config: Optional[ScoringConfig] = None,
) -> Dict[int, LeadScoringResult]:
    """Score a batch of leads keyed by id. Leads without an id are skipped."""
    now = now or datetime.now(timezone.utc)
    results: Dict[int, LeadScoringResult] = {}

    for item in leads:
        lead = _as_lead(item)
        if lead.id is None:
            continue
        results[lead.id] = calculate_lead_score(lead, now=now, config=config)

    return results


def sort_leads_by_priority(
    leads: Iterable[LeadLike],
    now: Optional[datetime] = None,
    config: Optional[ScoringConfig] = None,
) -> List[ScoredLead]:
    """Score every lead and order by descending ai_score.

    The sort is stable, so leads with equal scores keep their input order.
    """
    now = now or datetime.now(timezone.utc)
    scored = []
    for item in leads:
        lead = _as_lead(item)
        scored.append(ScoredLead(lead=lead, result=calculate_lead_score(lead, now=now, config=config)))

    return sorted(scored, key=lambda s: s.result.ai_score, reverse=True)


class LeadScorer:
    """Scores leads against a fixed scoring configuration."""

    def __init__(self, config: Optional[ScoringConfig] = None):
        """Initialize with optional custom configuration."""
        self.config = config or ScoringConfig()

    def score_lead(self, lead: LeadLike, now: Optional[datetime] = None) -> LeadScoringResult:
        return calculate_lead_score(lead, now=now, config=self.config)

    def score_leads(
        self, leads: Iterable[LeadLike], now: Optional[datetime] = None
    ) -> Dict[int, LeadScoringResult]:
        return score_multiple_leads(leads, now=now, config=self.config)

    def rank_leads(self, leads: Iterable[LeadLike], now: Optional[datetime] = None) -> List[ScoredLead]:
        return sort_leads_by_priority(leads, now=now, config=self.config)

    def explain_score(self, result: LeadScoringResult) -> str:
        """Get a detailed explanation of a scoring result."""
        factors = result.score_factors
        weighted = [
            ("Industry", factors.industry_value, self.config.weight("industry")),
            ("Company size", factors.company_size_value, self.config.weight("company_size")),
            ("Budget", factors.budget_score, self.config.weight("budget")),
            ("Timeline", factors.timeline_score, self.config.weight("timeline")),
            ("Engagement", factors.engagement_score, self.config.weight("engagement")),
            ("Source quality", factors.source_quality, self.config.weight("source_quality")),
            ("Qualification", factors.qualification_level, self.config.weight("qualification")),
        ]

        lines = [
            f"AI Score: {result.ai_score} ({result.priority_level.upper()} priority, "
            f"{result.urgency_level} urgency)",
            f"Industry: {result.industry}",
            "",
            "Factor Breakdown:",
        ]
        for label, score, weight in weighted:
            lines.append(f"  {label}: {score} x {weight:.2f} = {score * weight:.2f}")
        lines.append(f"  Urgency multiplier: x{factors.urgency_multiplier:.2f}")

        lines.extend(["", "Recommendations:"])
        lines.extend(f"  {rec}" for rec in result.recommendations)

        return "\n".join(lines)


def quick_score(lead: LeadLike) -> int:
    """Quick helper to score a lead and return just the ai_score."""
    return calculate_lead_score(lead).ai_score


def _as_lead(lead: LeadLike) -> Lead:
    if isinstance(lead, Lead):
        return lead
    return Lead.from_dict(lead)


def _seconds_since(then: datetime, now: datetime) -> float:
    """Seconds elapsed between two instants. Naive datetimes are local time."""
    if then.tzinfo is None:
        then = then.astimezone()
    if now.tzinfo is None:
        now = now.astimezone()
    return (now - then).total_seconds()


def _round_half_up(value: float) -> int:
    return int(math.floor(value + 0.5))
