"""
Keyword Intelligence Engine facade.

Holds the per-site context (site URL, competitor brands, override store,
AI classifications, configuration) and threads it through the resolver,
alert engine and prioritizer. The engine performs no I/O; callers load
inputs and persist the override store themselves.
"""

import logging
from typing import Iterable, Mapping, Optional, Sequence

from .alerts import build_alert_report
from .config import DEFAULT_CONFIG, EngineConfig
from .models import (
    AlertReport,
    ChecklistItem,
    HistoricalPositions,
    Intent,
    KeywordMetric,
    OverrideStore,
    RankingResult,
    ResolvedIntent,
)
from .override_store import OverrideResult, clear_override, record_override
from .prioritizer import rank_keyword_group
from .resolver import resolve_intent, resolve_intents

logger = logging.getLogger(__name__)


class KeywordIntelligenceEngine:
    """
    Intent resolution, regression alerts and recommendation ranking
    for one site.
    """

    def __init__(
        self,
        site_url: Optional[str] = None,
        competitor_brands: Iterable[str] = (),
        override_store: Optional[OverrideStore] = None,
        ai_intents: Optional[Mapping[str, object]] = None,
        config: Optional[EngineConfig] = None,
    ):
        """
        Initialize the engine.

        Args:
            site_url: Site URL or Search Console property.
            competitor_brands: Competitor brand names.
            override_store: Persisted overrides for the site.
            ai_intents: AI classifications keyed by lowercased keyword.
            config: Engine configuration.
        """
        self.site_url = site_url
        self.competitor_brands = tuple(competitor_brands)
        self.override_store = override_store or OverrideStore()
        self.ai_intents = {k.lower(): v for k, v in (ai_intents or {}).items()}
        self.config = config or DEFAULT_CONFIG

    def resolve(self, keyword: str, ranking_url: Optional[str] = None) -> ResolvedIntent:
        """Resolve the effective intent of one keyword."""
        return resolve_intent(
            keyword,
            store=self.override_store,
            ranking_url=ranking_url,
            site_url=self.site_url,
            competitor_brands=self.competitor_brands,
            ai_intents=self.ai_intents,
            config=self.config,
        )

    def resolve_all(
        self,
        keywords: Iterable[str],
        ranking_urls: Optional[Mapping[str, str]] = None,
    ) -> dict[str, ResolvedIntent]:
        """Resolve effective intents for many keywords."""
        return resolve_intents(
            keywords,
            store=self.override_store,
            ranking_urls=ranking_urls,
            site_url=self.site_url,
            competitor_brands=self.competitor_brands,
            ai_intents=self.ai_intents,
            config=self.config,
        )

    def scan_alerts(
        self,
        metrics: Sequence[KeywordMetric],
        historical: Mapping[str, HistoricalPositions],
        ranking_urls: Optional[Mapping[str, str]] = None,
    ) -> AlertReport:
        """Resolve intents for the period's keywords and compute alerts."""
        intents = self.resolve_all([m.keyword for m in metrics], ranking_urls)
        return build_alert_report(metrics, intents, historical, self.config)

    def record_override(
        self,
        keyword: str,
        intent: Intent,
        all_site_keywords: Iterable[str] = (),
    ) -> OverrideResult:
        """
        Record a user correction and adopt the updated store.

        Returns:
            OverrideResult; the caller persists result.store.
        """
        result = record_override(
            self.override_store, keyword, intent, all_site_keywords, self.config
        )
        self.override_store = result.store
        return result

    def clear_override(self, keyword: str) -> OverrideStore:
        """Reset a keyword to automatic classification."""
        self.override_store = clear_override(self.override_store, keyword)
        return self.override_store

    def rank_group(
        self,
        checklists: Mapping[str, Optional[Sequence[ChecklistItem]]],
        metrics: Iterable[KeywordMetric] = (),
        volumes: Optional[Mapping[str, Optional[float]]] = None,
    ) -> RankingResult:
        """Rank a keyword group's recommendations with conflict resolution."""
        positions = {m.keyword: m.position for m in metrics}
        return rank_keyword_group(checklists, positions, volumes or {}, self.config)
