"""Lead record supplied to the scoring engine."""

import math
import re
from dataclasses import dataclass, fields
from datetime import datetime, timezone
from enum import Enum
from typing import Any, Dict, Mapping, Optional, Union


class CompanySize(str, Enum):
    """Size bracket of the lead's company."""

    ENTERPRISE = "enterprise"
    LARGE = "large"
    MEDIUM = "medium"
    SMALL = "small"
    STARTUP = "startup"


class Timeline(str, Enum):
    """When the lead intends to buy."""

    IMMEDIATE = "immediate"
    ONE_MONTH = "1_month"
    THREE_MONTHS = "3_months"
    SIX_MONTHS = "6_months"
    ONE_YEAR = "1_year"
    UNKNOWN = "unknown"


class LeadSource(str, Enum):
    """Channel the lead came in through."""

    REFERRAL = "referral"
    WEBSITE = "website"
    GOOGLE_ADS = "google_ads"
    LINKEDIN = "linkedin"
    FACEBOOK = "facebook"
    CHAT_WIDGET = "chat_widget"
    YELP = "yelp"
    GOOGLE_MAPS = "google_maps"
    COLD_CALL = "cold_call"
    EMAIL = "email"
    OTHER = "other"


class LeadStatus(str, Enum):
    """Status of a lead in the sales process."""

    NEW = "new"
    CONTACTED = "contacted"
    QUALIFIED = "qualified"
    PROPOSAL = "proposal"
    NEGOTIATION = "negotiation"


class PipelineStage(str, Enum):
    """Stage of the deal pipeline."""

    PROSPECT = "prospect"
    QUALIFIED = "qualified"
    DEMO = "demo"
    PROPOSAL = "proposal"
    NEGOTIATION = "negotiation"


_INT_FIELDS = ("id", "budget", "deal_value")
_DATETIME_FIELDS = ("last_contacted_at",)

_CAMEL_RE = re.compile(r"(?<=[a-z0-9])(?=[A-Z])")


def _to_snake(key: str) -> str:
    """Normalize 'leadSource', 'Lead Source' and 'lead-source' to 'lead_source'."""
    key = key.strip().replace("-", "_").replace(" ", "_")
    return _CAMEL_RE.sub("_", key).lower()


def parse_integer(value: Union[str, int, float]) -> int:
    """Parse a whole number, accepting '1500' or '1500.0'. Raises ValueError."""
    if isinstance(value, bool):
        raise ValueError(f"Not a number: {value!r}")
    if isinstance(value, int):
        return value
    if isinstance(value, str):
        try:
            return int(value)
        except ValueError:
            pass
    number = float(value)
    if not math.isfinite(number):
        raise ValueError(f"Not a finite number: {value!r}")
    return int(number)


def parse_timestamp(value: Union[str, int, float, datetime]) -> datetime:
    """Parse an ISO-8601 timestamp (a trailing 'Z' is accepted).

    Numbers are epoch milliseconds, the form JavaScript CRM exports use.
    Raises ValueError for anything else.
    """
    if isinstance(value, datetime):
        return value
    if isinstance(value, (int, float)) and not isinstance(value, bool):
        try:
            return datetime.fromtimestamp(value / 1000, timezone.utc)
        except (OverflowError, OSError, ValueError):
            raise ValueError(f"Epoch milliseconds out of range: {value!r}")
    if not isinstance(value, str):
        raise ValueError(f"Not a timestamp: {value!r}")
    text = value.strip()
    if text.endswith("Z") or text.endswith("z"):
        text = text[:-1] + "+00:00"
    return datetime.fromisoformat(text)


@dataclass(frozen=True)
class Lead:
    """A partial contact record. Every field is optional."""

    id: Optional[int] = None

    # Contact info (display only)
    first_name: Optional[str] = None
    last_name: Optional[str] = None
    company: Optional[str] = None
    position: Optional[str] = None
    phone: Optional[str] = None
    email: Optional[str] = None

    # Scoring inputs
    notes: Optional[str] = None
    company_size: Optional[str] = None
    budget: Optional[int] = None  # cents
    deal_value: Optional[int] = None  # cents
    timeline: Optional[str] = None
    lead_source: Optional[str] = None
    lead_status: Optional[str] = None
    pipeline_stage: Optional[str] = None
    last_contacted_at: Optional[datetime] = None

    @property
    def display_name(self) -> str:
        """Get best available name for display."""
        name = " ".join(filter(None, [self.first_name, self.last_name]))
        return name or self.company or self.email or self.phone or f"Lead #{self.id}"

    @property
    def contact_info(self) -> str:
        """Get primary contact info."""
        return self.phone or self.email or "No contact"

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "Lead":
        """Build a lead from a CRM contact mapping.

        Accepts camelCase (``leadSource``) or snake_case (``lead_source``)
        keys and ignores keys that are not lead fields. Empty strings are
        treated as absent. Raises ValueError when a numeric or timestamp
        field cannot be parsed.
        """
        known = {f.name for f in fields(cls)}
        values: Dict[str, Any] = {}

        for raw_key, raw_value in data.items():
            key = _to_snake(str(raw_key))
            if key not in known or raw_value is None:
                continue
            if isinstance(raw_value, str):
                raw_value = raw_value.strip()
                if not raw_value:
                    continue

            if key in _INT_FIELDS:
                try:
                    values[key] = parse_integer(raw_value)
                except (TypeError, ValueError, OverflowError):
                    raise ValueError(f"Invalid {key}: {raw_value!r}")
            elif key in _DATETIME_FIELDS:
                try:
                    values[key] = parse_timestamp(raw_value)
                except (TypeError, ValueError, OverflowError):
                    raise ValueError(f"Invalid {key}: {raw_value!r}")
            elif isinstance(raw_value, Enum):
                values[key] = raw_value.value
            else:
                values[key] = str(raw_value)

        return cls(**values)

    def to_dict(self) -> Dict[str, Any]:
        """Serialize to a JSON-friendly dict."""
        data: Dict[str, Any] = {}
        for f in fields(self):
            value = getattr(self, f.name)
            if isinstance(value, datetime):
                value = value.isoformat()
            data[f.name] = value
        return data
