"""
Keyword Intelligence

The decision engine behind a keyword-tracking dashboard:
- Classifies keyword search intent, honoring user overrides and learned rules
- Flags ranking regressions against historical positions
- Ranks recommendations across related keywords, resolving conflicts
"""

__version__ = "1.0.0"
__author__ = "Keyword Intelligence Team"

from .config import EngineConfig, DEFAULT_CONFIG, ACTIONABLE_INTENTS, CONFLICTING_CATEGORIES

from .models import (
    Intent,
    IntentSource,
    ResolvedIntent,
    KeywordMetric,
    HistoricalPositions,
    AlertTag,
    AlertReport,
    Priority,
    ChecklistItem,
    KNOWN_CATEGORIES,
    LearnedRule,
    OverrideStore,
    RankedItem,
    ConflictGroup,
    RankingResult,
)

from .keyword_tokens import tokenize_keyword, token_overlap, overlap_threshold

from .page_archetype import detect_url_page_kind, extract_brand_token

from .intent_classifier import classify_intent, classify_with_stage

from .override_store import (
    OverrideResult,
    record_override,
    find_learned_rule,
    find_learned_intent,
    clear_override,
)

from .resolver import resolve_intent, resolve_intents

from .alerts import compute_alerts, build_alert_report

from .value_scorer import score_keyword_value

from .prioritizer import (
    RecommendationPrioritizer,
    build_ranked_recommendations,
    compute_keyword_values,
    rank_keyword_group,
)

from .engine import KeywordIntelligenceEngine

__all__ = [
    # Configuration
    "EngineConfig",
    "DEFAULT_CONFIG",
    "ACTIONABLE_INTENTS",
    "CONFLICTING_CATEGORIES",
    # Models
    "Intent",
    "IntentSource",
    "ResolvedIntent",
    "KeywordMetric",
    "HistoricalPositions",
    "AlertTag",
    "AlertReport",
    "Priority",
    "ChecklistItem",
    "KNOWN_CATEGORIES",
    "LearnedRule",
    "OverrideStore",
    "RankedItem",
    "ConflictGroup",
    "RankingResult",
    # Tokens
    "tokenize_keyword",
    "token_overlap",
    "overlap_threshold",
    # Page archetype
    "detect_url_page_kind",
    "extract_brand_token",
    # Classification
    "classify_intent",
    "classify_with_stage",
    # Overrides
    "OverrideResult",
    "record_override",
    "find_learned_rule",
    "find_learned_intent",
    "clear_override",
    # Resolution
    "resolve_intent",
    "resolve_intents",
    # Alerts
    "compute_alerts",
    "build_alert_report",
    # Value scoring
    "score_keyword_value",
    # Prioritization
    "RecommendationPrioritizer",
    "build_ranked_recommendations",
    "compute_keyword_values",
    "rank_keyword_group",
    # Engine
    "KeywordIntelligenceEngine",
]
