"""
Data models for the Keyword Intelligence Engine.

This module defines the core data structures shared by the classifier,
the override store, the alert engine and the recommendation ranker.
"""

import logging
from collections import Counter
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Optional

logger = logging.getLogger(__name__)


class Intent(Enum):
    """Classification of a keyword's likely user goal."""
    TRANSACTIONAL = "Transactional"
    PRODUCT = "Product"
    EDUCATIONAL = "Educational"
    NAVIGATIONAL = "Navigational"
    LOCAL = "Local"
    BRANDED = "Branded"
    COMPETITOR_NAVIGATIONAL = "Competitor Navigational"
    COMPETITOR_TRANSACTIONAL = "Competitor Transactional"

    @classmethod
    def parse(cls, value: Any) -> Optional["Intent"]:
        """
        Parse an intent from a display label or enum name.

        Accepts "Competitor Navigational", "CompetitorNavigational",
        "COMPETITOR_NAVIGATIONAL" and any casing of those.

        Returns:
            The matching Intent, or None if the value is not recognised.
        """
        if isinstance(value, cls):
            return value
        if not isinstance(value, str):
            return None

        key = "".join(ch for ch in value.lower() if ch.isalnum())
        if not key:
            return None

        for intent in cls:
            if key == "".join(ch for ch in intent.value.lower() if ch.isalnum()):
                return intent
        return None


class IntentSource(Enum):
    """Which layer produced an effective intent."""
    OVERRIDE = "override"
    LEARNED = "learned"
    AI = "ai"
    AUTO = "auto"


@dataclass(frozen=True)
class ResolvedIntent:
    """Final intent for a keyword plus its provenance."""
    intent: Intent
    source: IntentSource


@dataclass
class KeywordMetric:
    """Search Console metrics for one keyword in one reporting period."""
    keyword: str
    position: Optional[float] = None
    impressions: Optional[int] = None
    clicks: Optional[int] = None
    ctr: Optional[float] = None


@dataclass(frozen=True)
class HistoricalPositions:
    """Three pre-aggregated average positions, oldest to newest."""
    period1: Optional[float] = None
    period2: Optional[float] = None
    period3: Optional[float] = None

    @property
    def best_historical(self) -> Optional[float]:
        """Best (lowest) positive position across the three periods."""
        values = [
            p for p in (self.period1, self.period2, self.period3)
            if p is not None and p > 0
        ]
        return min(values) if values else None


class AlertTag(Enum):
    """Ranking regression flags."""
    FIRE = "fire"          # dropped off page one
    SMOKING = "smoking"    # dropped out of the top five
    HOT = "hot"            # latest window worse than the one before


@dataclass
class AlertReport:
    """Alert sets for a batch of keywords plus per-tag counts."""
    alerts: dict[str, frozenset[AlertTag]] = field(default_factory=dict)

    @property
    def counts(self) -> Counter:
        """Number of keywords carrying each tag."""
        counts: Counter = Counter({tag: 0 for tag in AlertTag})
        for tags in self.alerts.values():
            counts.update(tags)
        return counts

    def keywords_with(self, tag: AlertTag) -> list[str]:
        """Keywords carrying the given tag, in input order."""
        return [kw for kw, tags in self.alerts.items() if tag in tags]


class Priority(Enum):
    """Recommendation priority."""
    HIGH = "high"
    MEDIUM = "medium"
    LOW = "low"

    @property
    def rank(self) -> int:
        """Sort rank, lower comes first."""
        return _PRIORITY_RANK[self]

    @classmethod
    def parse(cls, value: Any) -> "Priority":
        """Parse a priority, defaulting to medium for unknown values."""
        if isinstance(value, cls):
            return value
        if isinstance(value, str):
            try:
                return cls(value.strip().lower())
            except ValueError:
                pass
        return cls.MEDIUM


_PRIORITY_RANK = {Priority.HIGH: 0, Priority.MEDIUM: 1, Priority.LOW: 2}


# Categories a recommendation checklist item can carry
KNOWN_CATEGORIES = (
    "title-tag",
    "meta-description",
    "heading-structure",
    "content",
    "internal-linking",
    "schema-markup",
    "technical-seo",
    "backlinks",
    "images",
    "featured-snippet",
    "topical-authority",
    "eeat",
)


@dataclass(frozen=True)
class ChecklistItem:
    """A single recommendation produced by a keyword scan."""
    id: str
    category: str
    task: str
    page: str = ""
    priority: Priority = Priority.MEDIUM
    impact: Optional[str] = None

    @classmethod
    def from_dict(cls, data: dict) -> "ChecklistItem":
        """
        Build a checklist item from a raw scan result entry.

        Unknown priorities fall back to medium. Unknown categories are
        kept as given but can never take part in a conflict.
        """
        category = str(data.get("category") or "").strip().lower()
        if category not in KNOWN_CATEGORIES:
            logger.warning(f"Unknown checklist category: {category!r}")

        impact = data.get("impact")
        return cls(
            id=str(data.get("id", "")),
            category=category,
            task=str(data.get("task") or ""),
            page=str(data.get("page") or "").strip(),
            priority=Priority.parse(data.get("priority")),
            impact=str(impact) if impact is not None else None,
        )

    def to_dict(self) -> dict:
        """Serialize to the scan result shape."""
        data = {
            "id": self.id,
            "category": self.category,
            "task": self.task,
            "page": self.page,
            "priority": self.priority.value,
        }
        if self.impact is not None:
            data["impact"] = self.impact
        return data


@dataclass(frozen=True)
class LearnedRule:
    """Token pattern generalised from one user override."""
    tokens: tuple[str, ...]
    intent: Intent
    source: str


@dataclass
class OverrideStore:
    """
    Per-site user corrections and the rules learned from them.

    exact_overrides is keyed by the raw keyword string. learned_rules is
    ordered; resolution takes the first rule that matches.
    """
    exact_overrides: dict[str, Intent] = field(default_factory=dict)
    learned_rules: list[LearnedRule] = field(default_factory=list)

    def copy(self) -> "OverrideStore":
        """Return an independent copy."""
        return OverrideStore(
            exact_overrides=dict(self.exact_overrides),
            learned_rules=list(self.learned_rules),
        )

    def to_dict(self) -> dict:
        """Serialize to the persisted JSON shape."""
        return {
            "exactOverrides": {
                keyword: intent.value
                for keyword, intent in self.exact_overrides.items()
            },
            "learnedRules": [
                {
                    "tokens": list(rule.tokens),
                    "intent": rule.intent.value,
                    "source": rule.source,
                }
                for rule in self.learned_rules
            ],
        }

    @classmethod
    def from_dict(cls, data: Optional[dict]) -> "OverrideStore":
        """
        Rebuild a store from its persisted JSON shape.

        Entries with an unrecognised intent or a malformed shape are
        dropped with a warning. When several rules share a source, the
        last one is kept.

        Raises:
            ValueError: If the store or one of its sections has the wrong
                container type.
        """
        store = cls()
        if not data:
            return store
        if not isinstance(data, dict):
            raise ValueError(f"Override store must be an object, got {type(data).__name__}")

        overrides = data.get("exactOverrides") or {}
        if not isinstance(overrides, dict):
            raise ValueError(
                f"exactOverrides must be an object, got {type(overrides).__name__}"
            )
        rules = data.get("learnedRules") or []
        if not isinstance(rules, list):
            raise ValueError(f"learnedRules must be a list, got {type(rules).__name__}")

        for keyword, value in overrides.items():
            intent = Intent.parse(value)
            if intent is None:
                logger.warning(f"Dropping override for {keyword!r}: unknown intent {value!r}")
                continue
            store.exact_overrides[keyword] = intent

        for raw in rules:
            if not isinstance(raw, dict) or not isinstance(raw.get("tokens"), list):
                logger.warning(f"Dropping malformed learned rule: {raw!r}")
                continue
            intent = Intent.parse(raw.get("intent"))
            tokens = tuple(str(t) for t in raw["tokens"])
            if intent is None or not tokens:
                logger.warning(f"Dropping malformed learned rule: {raw!r}")
                continue
            source = str(raw.get("source", ""))
            # One rule per source, the later entry wins
            store.learned_rules = [r for r in store.learned_rules if r.source != source]
            store.learned_rules.append(LearnedRule(tokens=tokens, intent=intent, source=source))

        return store


@dataclass
class RankedItem:
    """A checklist item attributed to its source keyword."""
    keyword: str
    task: ChecklistItem
    keyword_value: int
    is_conflict: bool = False
    is_primary: bool = True
    order: int = 0  # index in the flattened input


@dataclass
class ConflictGroup:
    """Recommendations from different keywords competing for one page slot."""
    page: str
    category: str
    items: list[RankedItem] = field(default_factory=list)

    @property
    def primary(self) -> RankedItem:
        """The winning item."""
        return next(item for item in self.items if item.is_primary)


@dataclass
class RankingResult:
    """Globally ranked recommendations for a keyword group."""
    ranked_items: list[RankedItem] = field(default_factory=list)
    conflicts: list[ConflictGroup] = field(default_factory=list)

    @property
    def primary_items(self) -> list[RankedItem]:
        return [item for item in self.ranked_items if item.is_primary]

    @property
    def deprioritized_items(self) -> list[RankedItem]:
        return [item for item in self.ranked_items if not item.is_primary]

    def by_keyword(self) -> dict[str, list[RankedItem]]:
        """Raw per-keyword view, items in their original checklist order."""
        grouped: dict[str, list[RankedItem]] = {}
        for item in sorted(self.ranked_items, key=lambda i: i.order):
            grouped.setdefault(item.keyword, []).append(item)
        return grouped
