"""Configurable composite weights and level thresholds."""

import json
import logging
import os
from dataclasses import dataclass, field
from datetime import datetime
from pathlib import Path
from typing import Dict, List, Optional

logger = logging.getLogger(__name__)

HOME_ENV_VAR = "STARZ_LEAD_ENGINE_HOME"

# Timeline and contact boosts together never exceed this
MAX_URGENCY_MULTIPLIER_CAP = 1.5

WEIGHTED_FACTORS = (
    "industry",
    "company_size",
    "budget",
    "timeline",
    "engagement",
    "source_quality",
    "qualification",
)


def default_weights() -> Dict[str, float]:
    """Weights of the seven weighted sub-scores. They sum to 1.0."""
    return {
        "industry": 0.20,
        "company_size": 0.15,
        "budget": 0.20,
        "timeline": 0.15,
        "engagement": 0.10,
        "source_quality": 0.10,
        "qualification": 0.10,
    }


def default_config_dir() -> Path:
    """Directory holding engine settings."""
    override = os.environ.get(HOME_ENV_VAR)
    if override:
        return Path(override)
    return Path.home() / ".starz-lead-engine"


@dataclass
class ScoringConfig:
    """Composite weights and thresholds for level classification."""

    weights: Dict[str, float] = field(default_factory=default_weights)

    # Urgency multiplier ceiling
    urgency_multiplier_cap: float = MAX_URGENCY_MULTIPLIER_CAP

    # Priority level thresholds on ai_score
    urgent_threshold: int = 80
    high_threshold: int = 65
    medium_threshold: int = 45

    # Urgency level gates: (ai_score minimum, timeline_score minimum)
    critical_score: int = 80
    critical_timeline: int = 85
    high_urgency_score: int = 70
    high_urgency_timeline: int = 70
    medium_urgency_score: int = 50

    updated_at: datetime = field(default_factory=datetime.now)

    def weight(self, factor: str) -> float:
        """Get the weight for a factor, 0.0 if it is not configured."""
        return self.weights.get(factor, 0.0)

    def validate(self) -> List[str]:
        """Check the configuration, returning a list of problems."""
        problems = []

        unknown = sorted(set(self.weights) - set(WEIGHTED_FACTORS))
        if unknown:
            problems.append(f"Unknown weight factors: {', '.join(unknown)}")

        negative = sorted(k for k, v in self.weights.items() if v < 0)
        if negative:
            problems.append(f"Negative weights: {', '.join(negative)}")

        total = sum(self.weights.values())
        if abs(total - 1.0) > 1e-6:
            problems.append(f"Weights sum to {total:.2f}, expected 1.00")

        if not 1.0 <= self.urgency_multiplier_cap <= MAX_URGENCY_MULTIPLIER_CAP:
            problems.append(
                f"Urgency multiplier cap must be between 1.0 and {MAX_URGENCY_MULTIPLIER_CAP}"
            )

        if not (self.urgent_threshold >= self.high_threshold >= self.medium_threshold):
            problems.append("Priority thresholds must be ordered urgent >= high >= medium")

        if not (self.critical_score >= self.high_urgency_score >= self.medium_urgency_score):
            problems.append("Urgency score gates must be ordered critical >= high >= medium")

        return problems

    def to_dict(self) -> Dict:
        """Serialize to a JSON-friendly dict."""
        return {
            "weights": dict(self.weights),
            "urgency_multiplier_cap": self.urgency_multiplier_cap,
            "urgent_threshold": self.urgent_threshold,
            "high_threshold": self.high_threshold,
            "medium_threshold": self.medium_threshold,
            "critical_score": self.critical_score,
            "critical_timeline": self.critical_timeline,
            "high_urgency_score": self.high_urgency_score,
            "high_urgency_timeline": self.high_urgency_timeline,
            "medium_urgency_score": self.medium_urgency_score,
            "updated_at": self.updated_at.isoformat(),
        }

    @classmethod
    def from_dict(cls, data: Dict) -> "ScoringConfig":
        """Build a config from saved data, filling gaps with defaults."""
        defaults = cls()
        weights = default_weights()
        weights.update(data.get("weights", {}))

        updated_at = defaults.updated_at
        if data.get("updated_at"):
            updated_at = datetime.fromisoformat(data["updated_at"])

        return cls(
            weights=weights,
            urgency_multiplier_cap=data.get("urgency_multiplier_cap", defaults.urgency_multiplier_cap),
            urgent_threshold=data.get("urgent_threshold", defaults.urgent_threshold),
            high_threshold=data.get("high_threshold", defaults.high_threshold),
            medium_threshold=data.get("medium_threshold", defaults.medium_threshold),
            critical_score=data.get("critical_score", defaults.critical_score),
            critical_timeline=data.get("critical_timeline", defaults.critical_timeline),
            high_urgency_score=data.get("high_urgency_score", defaults.high_urgency_score),
            high_urgency_timeline=data.get("high_urgency_timeline", defaults.high_urgency_timeline),
            medium_urgency_score=data.get("medium_urgency_score", defaults.medium_urgency_score),
            updated_at=updated_at,
        )


class ScoringConfigManager:
    """Manage and persist scoring configuration."""

    def __init__(self, config_path: Optional[Path] = None):
        """Initialize config manager."""
        self.config_path = config_path or default_config_dir() / "scoring_config.json"
        self.config = self._load_config()

    def _load_config(self) -> ScoringConfig:
        """Load configuration from file."""
        if self.config_path.exists():
            try:
                with open(self.config_path, 'r') as f:
                    return ScoringConfig.from_dict(json.load(f))
            except (OSError, ValueError, TypeError, AttributeError) as e:
                logger.error(f"Error loading scoring config {self.config_path}: {e}")

        return ScoringConfig()

    def save_config(self):
        """Save configuration to file."""
        self.config_path.parent.mkdir(parents=True, exist_ok=True)
        with open(self.config_path, 'w') as f:
            json.dump(self.config.to_dict(), f, indent=2)
        logger.info(f"Saved scoring config to {self.config_path}")

    def set_weight(self, factor: str, weight: float):
        """Set the composite weight for one factor."""
        if factor not in WEIGHTED_FACTORS:
            raise ValueError(f"Unknown factor: {factor}. Available: {list(WEIGHTED_FACTORS)}")
        if weight < 0:
            raise ValueError(f"Weight for {factor} must not be negative")
        self.config.weights[factor] = weight
        self.config.updated_at = datetime.now()
        self.save_config()

        total = sum(self.config.weights.values())
        if abs(total - 1.0) > 1e-6:
            logger.warning(f"Scoring weights now sum to {total:.2f}")

    def update_priority_thresholds(self, urgent: int, high: int, medium: int):
        """Update priority level thresholds."""
        if not (urgent >= high >= medium):
            raise ValueError("Priority thresholds must be ordered urgent >= high >= medium")
        self.config.urgent_threshold = urgent
        self.config.high_threshold = high
        self.config.medium_threshold = medium
        self.config.updated_at = datetime.now()
        self.save_config()

    def reset(self):
        """Restore the default configuration."""
        self.config = ScoringConfig()
        self.save_config()
