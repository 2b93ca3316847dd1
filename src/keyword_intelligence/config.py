# -*- coding: utf-8 -*-
"""
Centralized configuration for the Keyword Intelligence Engine.

This module provides a single configuration dataclass holding the
thresholds and category sets used by override propagation, the alert
engine and the recommendation conflict resolver.
"""

from dataclasses import dataclass, field

from .models import Intent


# Intents whose ranking drops are worth alerting on
ACTIONABLE_INTENTS = frozenset({
    Intent.TRANSACTIONAL,
    Intent.PRODUCT,
    Intent.LOCAL,
    Intent.COMPETITOR_TRANSACTIONAL,
})

# Categories where a page can only carry one directive
CONFLICTING_CATEGORIES = frozenset({
    "title-tag",
    "meta-description",
    "heading-structure",
    "schema-markup",
})


@dataclass(frozen=True)
class EngineConfig:
    """
    Configuration for keyword intelligence behavior.

    Attributes:
        propagation_ratio: Share of a learned rule's tokens another keyword
            must contain for the rule to apply to it. The threshold is
            max(1, ceil(len(tokens) * propagation_ratio)).

        fire_threshold: A keyword that once ranked at or above this
            position and now ranks below it raises a "fire" alert.
        smoking_threshold: Same check for the "smoking" alert.

        actionable_intents: Intents that are evaluated for alerts at all.
            Keywords with any other effective intent never alert.

        conflicting_categories: Checklist categories where two keywords
            recommending changes to the same page conflict.
    """

    propagation_ratio: float = 0.5

    fire_threshold: float = 10
    smoking_threshold: float = 5

    actionable_intents: frozenset = field(default=ACTIONABLE_INTENTS)
    conflicting_categories: frozenset = field(default=CONFLICTING_CATEGORIES)

    def is_actionable(self, intent: Intent) -> bool:
        """Check if alerts should be evaluated for the given intent."""
        return intent in self.actionable_intents

    def is_conflicting_category(self, category: str) -> bool:
        """Check if a checklist category admits only one directive per page."""
        return category in self.conflicting_categories

    def __post_init__(self):
        """Validate configuration values."""
        if not 0 < self.propagation_ratio <= 1:
            raise ValueError(
                f"propagation_ratio must be in (0, 1], got {self.propagation_ratio}"
            )
        if self.smoking_threshold <= 0 or self.fire_threshold <= 0:
            raise ValueError(
                f"alert thresholds must be positive, got fire={self.fire_threshold}, "
                f"smoking={self.smoking_threshold}"
            )
        if self.smoking_threshold > self.fire_threshold:
            raise ValueError(
                f"smoking_threshold ({self.smoking_threshold}) must be <= "
                f"fire_threshold ({self.fire_threshold})"
            )
        unknown = [i for i in self.actionable_intents if not isinstance(i, Intent)]
        if unknown:
            raise ValueError(f"actionable_intents must contain Intent members, got {unknown}")

    @classmethod
    def default(cls, **overrides) -> "EngineConfig":
        """Create config with the standard dashboard defaults.

        Args:
            **overrides: Override any config values (e.g., fire_threshold=20)

        Returns:
            EngineConfig with default thresholds and category sets
        """
        if "actionable_intents" in overrides:
            overrides["actionable_intents"] = frozenset(overrides["actionable_intents"])
        if "conflicting_categories" in overrides:
            overrides["conflicting_categories"] = frozenset(overrides["conflicting_categories"])
        return cls(**overrides)


DEFAULT_CONFIG = EngineConfig()
