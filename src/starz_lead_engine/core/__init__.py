"""Core scoring engine for lead prioritization."""

from .models import Lead, CompanySize, Timeline, LeadSource, LeadStatus, PipelineStage
from .scorer import (
    LeadScorer,
    LeadScoringResult,
    ScoreFactors,
    ScoredLead,
    calculate_lead_score,
    score_multiple_leads,
    sort_leads_by_priority,
)
from .tables import IndustryProfile, INDUSTRY_PROFILES
from .config import ScoringConfig, ScoringConfigManager

__all__ = [
    "Lead",
    "CompanySize",
    "Timeline",
    "LeadSource",
    "LeadStatus",
    "PipelineStage",
    "LeadScorer",
    "LeadScoringResult",
    "ScoreFactors",
    "ScoredLead",
    "calculate_lead_score",
    "score_multiple_leads",
    "sort_leads_by_priority",
    "IndustryProfile",
    "INDUSTRY_PROFILES",
    "ScoringConfig",
    "ScoringConfigManager",
]
