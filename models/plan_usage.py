"""Subscription plan usage data model."""

from dataclasses import dataclass, field
from typing import Optional

APPROACHING_LIMIT_PERCENT = 80.0
AT_LIMIT_PERCENT = 100.0

# API field name -> attribute name
_METRIC_FIELDS = {
    "series": "series",
    "aiPrompts": "ai_prompts",
    "collaborators": "collaborators",
    "storage": "storage",
}


@dataclass
class UsageMetric:
    """Usage of one plan-limited resource."""
    used: int = 0
    limit: int = 0
    reset_date: Optional[str] = None

    @property
    def percentage(self) -> float:
        if self.limit <= 0:
            return 0.0
        return self.used / self.limit * 100

    @classmethod
    def from_dict(cls, raw: Optional[dict]) -> "UsageMetric":
        raw = raw or {}
        return cls(
            used=int(raw.get("used", 0) or 0),
            limit=int(raw.get("limit", 0) or 0),
            reset_date=raw.get("resetDate"),
        )


@dataclass
class PlanUsage:
    """Current usage against the user's subscription plan limits."""
    series: UsageMetric = field(default_factory=UsageMetric)
    ai_prompts: UsageMetric = field(default_factory=UsageMetric)
    collaborators: UsageMetric = field(default_factory=UsageMetric)
    storage: UsageMetric = field(default_factory=UsageMetric)

    @classmethod
    def from_dict(cls, raw: dict) -> "PlanUsage":
        """Parse the camelCase JSON returned by /api/user/usage."""
        return cls(**{
            attr: UsageMetric.from_dict(raw.get(api_name))
            for api_name, attr in _METRIC_FIELDS.items()
        })

    def metrics(self) -> dict[str, UsageMetric]:
        return {attr: getattr(self, attr) for attr in _METRIC_FIELDS.values()}

    def percentages(self) -> dict[str, float]:
        return {name: metric.percentage for name, metric in self.metrics().items()}

    def approaching_limits(self) -> dict[str, bool]:
        return {name: pct > APPROACHING_LIMIT_PERCENT for name, pct in self.percentages().items()}

    def at_limits(self) -> dict[str, bool]:
        return {name: pct >= AT_LIMIT_PERCENT for name, pct in self.percentages().items()}
