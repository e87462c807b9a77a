"""Tests for the scoring engine."""

from datetime import datetime, timedelta, timezone
from itertools import product

import pytest

from starz_lead_engine.core.config import ScoringConfig
from starz_lead_engine.core.models import Lead, Timeline, LeadSource
from starz_lead_engine.core.scorer import (
    FAST_TRACK,
    INCOMPLETE_QUALIFICATION,
    LOW_ENGAGEMENT,
    QUALIFY_BUDGET,
    LeadScorer,
    calculate_lead_score,
    quick_score,
    score_multiple_leads,
    sort_leads_by_priority,
)

NOW = datetime(2026, 3, 2, 12, 0, tzinfo=timezone.utc)


def hot_lead(**overrides) -> Lead:
    """A healthcare enterprise lead that maxes out most factors."""
    values = dict(
        id=1,
        first_name="Dana",
        last_name="Reyes",
        company="Northside Medical Group",
        position="CEO",
        phone="555-0100",
        email="dana@northside.example",
        notes="Multi-location medical clinic looking to replace their website",
        company_size="enterprise",
        budget=1_200_000,
        timeline="immediate",
        lead_source="referral",
        lead_status="qualified",
        pipeline_stage="negotiation",
        last_contacted_at=NOW - timedelta(hours=2),
    )
    values.update(overrides)
    return Lead(**values)


class TestCalculateLeadScore:
    """Tests for calculate_lead_score."""

    def test_empty_lead_uses_defaults(self):
        """An empty record scores from the documented defaults."""
        result = calculate_lead_score(Lead(), now=NOW)
        factors = result.score_factors

        assert factors.industry_value == 50
        assert factors.company_size_value == 50
        assert factors.budget_score == 25
        assert factors.timeline_score == 25
        assert factors.engagement_score == 0
        assert factors.source_quality == 35
        assert factors.urgency_multiplier == 1.0
        assert factors.qualification_level == 0

        # 10 + 7.5 + 5 + 3.75 + 0 + 3.5 + 0 = 29.75
        assert result.ai_score == 30
        assert result.priority_level == "low"
        assert result.urgency_level == "low"
        assert result.industry == "other"

    def test_empty_mapping(self):
        """An empty mapping is accepted like an empty Lead."""
        assert calculate_lead_score({}, now=NOW) == calculate_lead_score(Lead(), now=NOW)

    def test_empty_lead_recommendations(self):
        """Empty leads get the nurture pair and every gap note except fast-track."""
        result = calculate_lead_score(Lead(), now=NOW)
        assert result.recommendations == (
            "📝 Add to nurture campaign",
            "🔍 Gather more qualification information",
            QUALIFY_BUDGET,
            LOW_ENGAGEMENT,
            INCOMPLETE_QUALIFICATION,
        )

    def test_hot_lead(self):
        """A fully qualified urgent lead is capped at 100."""
        result = calculate_lead_score(hot_lead(), now=NOW)

        assert result.score_factors.engagement_score == 80
        assert result.score_factors.urgency_multiplier == 1.5
        assert result.score_factors.qualification_level == 100
        assert result.ai_score == 100
        assert result.priority_level == "urgent"
        assert result.urgency_level == "critical"
        assert result.industry == "healthcare"
        assert result.industry_score == 95
        assert result.qualification_score == 100
        assert result.recommendations == (
            "🔥 High-priority lead - Contact immediately",
            "💰 High deal potential - Prepare premium service proposals",
            FAST_TRACK,
        )

    def test_high_score_unknown_timeline_is_medium_urgency(self):
        """Without a near-term timeline a high score only reaches medium urgency."""
        result = calculate_lead_score(hot_lead(timeline="unknown"), now=NOW)

        # 19 + 15 + 20 + 3.75 + 8 + 9.5 + 7.5 = 82.75, x1.2 = 99.3
        assert result.ai_score == 99
        assert result.score_factors.timeline_score == 25
        assert result.urgency_level == "medium"
        assert result.priority_level == "urgent"

    def test_high_urgency_lead(self):
        """A solid three-month lead lands in high priority and high urgency."""
        lead = Lead(
            id=7,
            notes="Regional retail store chain",
            company_size="medium",
            budget=300_000,
            timeline="3_months",
            lead_source="website",
            lead_status="contacted",
            pipeline_stage="demo",
            position="Store Manager",
            phone="555-0199",
            email="ops@example.com",
        )
        result = calculate_lead_score(lead, now=NOW)

        # 14 + 10.5 + 14 + 10.5 + 2.5 + 8.5 + 10 = 70, x1.1 = 77
        assert result.ai_score == 77
        assert result.urgency_level == "high"
        assert result.priority_level == "high"
        assert result.recommendations == (
            "📞 Priority contact - Reach out within 2 hours",
            "📋 Prepare detailed service presentation",
            LOW_ENGAGEMENT,
        )

    def test_rounds_half_up(self):
        """Composite scores ending in .5 round up."""
        # 10 + 8.25 + 5 + 3.75 + 0 + 3.5 + 0 = 30.5
        result = calculate_lead_score(Lead(company_size="small"), now=NOW)
        assert result.ai_score == 31

    def test_deterministic_for_fixed_now(self):
        """Same input at the same instant gives the same result."""
        lead = hot_lead(last_contacted_at=NOW - timedelta(days=2))
        assert calculate_lead_score(lead, now=NOW) == calculate_lead_score(lead, now=NOW)

    def test_score_depends_on_now(self):
        """Recency factors are measured against the injected time."""
        lead = hot_lead(timeline="6_months")
        fresh = calculate_lead_score(lead, now=NOW)
        stale = calculate_lead_score(lead, now=NOW + timedelta(days=30))
        assert fresh.score_factors.engagement_score > stale.score_factors.engagement_score
        assert fresh.score_factors.urgency_multiplier > stale.score_factors.urgency_multiplier

    def test_mapping_input_is_not_mutated(self):
        """CRM contact mappings are read, never written."""
        contact = {
            "id": 3,
            "companySize": "large",
            "leadSource": "linkedin",
            "timeline": "1_month",
            "notes": "Insurance agency",
        }
        snapshot = dict(contact)

        result = calculate_lead_score(contact, now=NOW)

        assert contact == snapshot
        assert result.score_factors.company_size_value == 85
        assert result.score_factors.source_quality == 75
        assert result.score_factors.timeline_score == 85
        assert result.industry == "finance"

    def test_enum_values_accepted(self):
        """Enum members score the same as their string values."""
        by_enum = calculate_lead_score(
            Lead(timeline=Timeline.IMMEDIATE, lead_source=LeadSource.YELP), now=NOW
        )
        by_str = calculate_lead_score(Lead(timeline="immediate", lead_source="yelp"), now=NOW)
        assert by_enum.ai_score == by_str.ai_score
        assert by_enum.score_factors == by_str.score_factors

    def test_result_to_dict(self):
        """Results serialize to plain data."""
        data = calculate_lead_score(hot_lead(), now=NOW).to_dict()
        assert data["ai_score"] == 100
        assert data["priority_level"] == "urgent"
        assert data["score_factors"]["urgency_multiplier"] == 1.5
        assert isinstance(data["recommendations"], list)

    def test_custom_config_weights(self):
        """Weights come from the supplied configuration."""
        weights = {factor: 0.0 for factor in ScoringConfig().weights}
        weights["budget"] = 1.0
        config = ScoringConfig(weights=weights)

        assert calculate_lead_score(Lead(), now=NOW, config=config).ai_score == 25
        assert calculate_lead_score(Lead(budget=600_000), now=NOW, config=config).ai_score == 85

    def test_custom_priority_thresholds(self):
        """Priority thresholds come from the supplied configuration."""
        config = ScoringConfig(urgent_threshold=30, high_threshold=20, medium_threshold=10)
        assert calculate_lead_score(Lead(), now=NOW, config=config).priority_level == "urgent"


class TestScoreProperties:
    """Properties that hold over a spread of leads."""

    LEADS = [
        Lead(
            timeline=timeline,
            lead_source=source,
            lead_status=status,
            budget=budget,
            position=position,
            last_contacted_at=contacted,
            notes="dental practice",
            phone="555-0101",
            email="x@example.com",
        )
        for timeline, source, status, budget, position, contacted in product(
            [None, "immediate", "1_month", "1_year", "unknown"],
            [None, "referral", "cold_call"],
            [None, "new", "qualified", "closed_won"],
            [None, 0, 75_000, 2_000_000],
            [None, "Owner"],
            [None, NOW - timedelta(hours=3), NOW - timedelta(days=10)],
        )
    ]

    def test_scores_bounded(self):
        """ai_score and every sub-score stay in range."""
        for lead in self.LEADS:
            result = calculate_lead_score(lead, now=NOW)
            factors = result.score_factors
            assert 0 <= result.ai_score <= 100
            assert 1.0 <= factors.urgency_multiplier <= 1.5
            for value in (
                factors.industry_value,
                factors.company_size_value,
                factors.budget_score,
                factors.timeline_score,
                factors.engagement_score,
                factors.source_quality,
                factors.qualification_level,
            ):
                assert 0 <= value <= 100

    def test_recommendation_count(self):
        """Every result carries between 2 and 6 recommendations."""
        for lead in self.LEADS:
            result = calculate_lead_score(lead, now=NOW)
            assert 2 <= len(result.recommendations) <= 6

    def test_levels_are_known(self):
        """Levels are always one of the documented labels."""
        for lead in self.LEADS:
            result = calculate_lead_score(lead, now=NOW)
            assert result.urgency_level in ("critical", "high", "medium", "low")
            assert result.priority_level in ("urgent", "high", "medium", "low")


class TestBatchOperations:
    """Tests for score_multiple_leads and sort_leads_by_priority."""

    def test_score_multiple_keys_by_id(self):
        """Results are keyed by lead id."""
        leads = [Lead(id=10), hot_lead(id=20)]
        results = score_multiple_leads(leads, now=NOW)
        assert set(results) == {10, 20}
        assert results[20].ai_score == 100

    def test_score_multiple_skips_missing_id(self):
        """Leads without an id are skipped silently."""
        leads = [Lead(id=1), Lead(), Lead(id=2)]
        results = score_multiple_leads(leads, now=NOW)
        assert len(results) == len(leads) - 1

    def test_score_multiple_keeps_id_zero(self):
        """Zero is a defined id."""
        assert 0 in score_multiple_leads([Lead(id=0)], now=NOW)

    def test_score_multiple_accepts_mappings(self):
        """Contact mappings are scored like Leads."""
        results = score_multiple_leads([{"id": 5, "timeline": "immediate"}], now=NOW)
        assert results[5].score_factors.timeline_score == 100

    def test_sort_descending(self):
        """Leads are ordered by descending ai_score."""
        leads = [Lead(id=1), hot_lead(id=2), Lead(id=3, company_size="enterprise")]
        ranked = sort_leads_by_priority(leads, now=NOW)
        assert [s.lead.id for s in ranked] == [2, 3, 1]
        scores = [s.ai_score for s in ranked]
        assert scores == sorted(scores, reverse=True)

    def test_sort_is_stable(self):
        """Equal scores keep their input order."""
        leads = [Lead(id=1), Lead(id=2), Lead(id=3), hot_lead(id=4)]
        ranked = sort_leads_by_priority(leads, now=NOW)
        assert [s.lead.id for s in ranked] == [4, 1, 2, 3]

    def test_sort_keeps_leads_without_id(self):
        """Ranking includes every lead, with or without an id."""
        ranked = sort_leads_by_priority([Lead(), hot_lead(id=None)], now=NOW)
        assert len(ranked) == 2
        assert ranked[0].lead.id is None
        assert ranked[0].ai_score == 100

    def test_scored_lead_to_dict(self):
        """Ranked leads serialize with the result attached."""
        ranked = sort_leads_by_priority([hot_lead()], now=NOW)
        data = ranked[0].to_dict()
        assert data["first_name"] == "Dana"
        assert data["calculated_score"]["ai_score"] == 100


class TestLeadScorer:
    """Tests for the LeadScorer wrapper."""

    def setup_method(self):
        """Set up test fixtures."""
        self.scorer = LeadScorer()

    def test_score_lead(self):
        assert self.scorer.score_lead(Lead(), now=NOW).ai_score == 30

    def test_rank_leads(self):
        ranked = self.scorer.rank_leads([Lead(id=1), hot_lead(id=2)], now=NOW)
        assert [s.lead.id for s in ranked] == [2, 1]

    def test_score_leads(self):
        assert set(self.scorer.score_leads([Lead(id=1), Lead()], now=NOW)) == {1}

    def test_explain_score(self):
        """Explanations list every factor and recommendation."""
        result = self.scorer.score_lead(hot_lead(), now=NOW)
        text = self.scorer.explain_score(result)

        assert text.startswith("AI Score: 100 (URGENT priority, critical urgency)")
        assert "Industry: healthcare" in text
        assert "Budget: 100 x 0.20 = 20.00" in text
        assert "Urgency multiplier: x1.50" in text
        assert FAST_TRACK in text

    def test_quick_score(self):
        assert quick_score({"company_size": "small"}) == 31
