"""Starz Lead Engine - multi-factor lead scoring for the Starz sales CRM."""

from .core import (
    Lead,
    LeadScorer,
    LeadScoringResult,
    ScoreFactors,
    ScoredLead,
    calculate_lead_score,
    score_multiple_leads,
    sort_leads_by_priority,
)

__version__ = "1.0.0"

__all__ = [
    "Lead",
    "LeadScorer",
    "LeadScoringResult",
    "ScoreFactors",
    "ScoredLead",
    "calculate_lead_score",
    "score_multiple_leads",
    "sort_leads_by_priority",
]
