"""Static lookup tables for lead scoring - tuned for small-business service sales."""

from dataclasses import dataclass
from types import MappingProxyType
from typing import Mapping, Optional, Tuple

from .models import CompanySize, LeadSource, LeadStatus, PipelineStage, Timeline


@dataclass(frozen=True)
class IndustryProfile:
    """An industry, the note keywords that identify it, and its value score."""

    industry: str
    keywords: Tuple[str, ...]
    score: int

    def matches(self, text: str) -> bool:
        """Check whether any keyword occurs in already lower-cased text."""
        return any(keyword in text for keyword in self.keywords)


# Scanned in order, first match wins. Keywords overlap ("state" vs
# "real estate"), so the order is part of the scoring model.
INDUSTRY_PROFILES: Tuple[IndustryProfile, ...] = (
    IndustryProfile(
        "healthcare",
        ("medical", "healthcare", "clinic", "hospital", "dental", "doctor", "physician"),
        95,
    ),
    IndustryProfile("legal", ("law", "legal", "attorney", "lawyer", "firm", "litigation"), 90),
    IndustryProfile("finance", ("financial", "bank", "investment", "accounting", "insurance"), 88),
    IndustryProfile("real_estate", ("real estate", "property", "realtor", "mortgage"), 85),
    IndustryProfile("automotive", ("auto", "car", "vehicle", "dealership", "repair"), 82),
    IndustryProfile(
        "home_services",
        ("plumbing", "hvac", "electrical", "roofing", "cleaning", "landscaping"),
        80,
    ),
    IndustryProfile("restaurant", ("restaurant", "food", "dining", "catering"), 75),
    IndustryProfile("retail", ("retail", "store", "shop", "e-commerce"), 70),
    IndustryProfile("education", ("school", "education", "university", "training"), 68),
    IndustryProfile("nonprofit", ("nonprofit", "charity", "foundation"), 45),
    IndustryProfile("government", ("government", "municipal", "city", "state"), 40),
)

OTHER_INDUSTRY = "other"
DEFAULT_INDUSTRY_SCORE = 50

# Returned when no industry keyword matches
OTHER_PROFILE = IndustryProfile(OTHER_INDUSTRY, (), DEFAULT_INDUSTRY_SCORE)

# Keys are str enums, so plain string values look up the same entries
COMPANY_SIZE_SCORES: Mapping[str, int] = MappingProxyType({
    CompanySize.ENTERPRISE: 100,
    CompanySize.LARGE: 85,
    CompanySize.MEDIUM: 70,
    CompanySize.SMALL: 55,
    CompanySize.STARTUP: 40,
})
DEFAULT_COMPANY_SIZE_SCORE = 50

SOURCE_QUALITY_SCORES: Mapping[str, int] = MappingProxyType({
    LeadSource.REFERRAL: 95,
    LeadSource.WEBSITE: 85,
    LeadSource.GOOGLE_ADS: 80,
    LeadSource.LINKEDIN: 75,
    LeadSource.FACEBOOK: 70,
    LeadSource.CHAT_WIDGET: 68,
    LeadSource.YELP: 65,
    LeadSource.GOOGLE_MAPS: 60,
    LeadSource.COLD_CALL: 45,
    LeadSource.EMAIL: 40,
    LeadSource.OTHER: 35,
})
DEFAULT_SOURCE_QUALITY = 35

TIMELINE_SCORES: Mapping[str, int] = MappingProxyType({
    Timeline.IMMEDIATE: 100,
    Timeline.ONE_MONTH: 85,
    Timeline.THREE_MONTHS: 70,
    Timeline.SIX_MONTHS: 55,
    Timeline.ONE_YEAR: 35,
    Timeline.UNKNOWN: 25,
})
DEFAULT_TIMELINE_SCORE = 25

# (minimum cents, score), highest first
BUDGET_BRACKETS: Tuple[Tuple[int, int], ...] = (
    (1_000_000, 100),  # $10,000+
    (500_000, 85),  # $5,000+
    (300_000, 70),  # $3,000+
    (150_000, 55),  # $1,500+
    (50_000, 40),  # $500+
)
DEFAULT_BUDGET_SCORE = 25

# (maximum whole days since last contact, points)
RECENCY_POINTS: Tuple[Tuple[int, int], ...] = (
    (1, 30),
    (3, 20),
    (7, 10),
)

LEAD_STATUS_POINTS: Mapping[str, int] = MappingProxyType({
    LeadStatus.QUALIFIED: 25,
    LeadStatus.PROPOSAL: 20,
    LeadStatus.NEGOTIATION: 15,
    LeadStatus.CONTACTED: 10,
    LeadStatus.NEW: 5,
})

PIPELINE_STAGE_POINTS: Mapping[str, int] = MappingProxyType({
    PipelineStage.NEGOTIATION: 25,
    PipelineStage.PROPOSAL: 20,
    PipelineStage.DEMO: 15,
    PipelineStage.QUALIFIED: 10,
    PipelineStage.PROSPECT: 5,
})

TIMELINE_URGENCY_BOOST: Mapping[str, float] = MappingProxyType({
    Timeline.IMMEDIATE: 0.3,
    Timeline.ONE_MONTH: 0.2,
    Timeline.THREE_MONTHS: 0.1,
})

# (maximum hours since last contact, boost)
CONTACT_URGENCY_BOOST: Tuple[Tuple[int, float], ...] = (
    (24, 0.2),
    (72, 0.1),
)

AUTHORITY_TITLES: Tuple[str, ...] = ("owner", "ceo", "manager", "director")

# Each BANT criterion met is worth this many qualification points
QUALIFICATION_POINTS = 25


def find_industry(notes: str) -> Optional[IndustryProfile]:
    """Get the first industry whose keywords appear in the notes."""
    text = notes.lower()
    for profile in INDUSTRY_PROFILES:
        if profile.matches(text):
            return profile
    return None


def classify_industry(notes: Optional[str]) -> IndustryProfile:
    """Get the matching industry, or the 'other' profile when nothing matches."""
    return find_industry(notes or "") or OTHER_PROFILE
