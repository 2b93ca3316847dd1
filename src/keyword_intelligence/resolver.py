"""
Effective intent resolution.

Combines the override store, an externally computed AI classification and
the rule-based classifier into one intent per keyword. Precedence, first
applicable wins:

1. Exact user override
2. First matching learned rule
3. AI classification (keyed by lowercased keyword)
4. Rule-based classification
"""

import logging
from typing import Iterable, Mapping, Optional

from .config import EngineConfig
from .intent_classifier import classify_intent
from .models import Intent, IntentSource, OverrideStore, ResolvedIntent
from .override_store import find_learned_intent

logger = logging.getLogger(__name__)


def resolve_intent(
    keyword: str,
    store: Optional[OverrideStore] = None,
    ranking_url: Optional[str] = None,
    site_url: Optional[str] = None,
    competitor_brands: Optional[Iterable[str]] = None,
    ai_intents: Optional[Mapping[str, object]] = None,
    config: Optional[EngineConfig] = None,
) -> ResolvedIntent:
    """
    Resolve the effective intent of a keyword.

    Args:
        keyword: Keyword text.
        store: Site override store, if any.
        ranking_url: URL of the page the keyword ranks on.
        site_url: Site URL or Search Console property.
        competitor_brands: Competitor brand names.
        ai_intents: AI classifications keyed by lowercased keyword. Values
            may be Intent members or display labels.
        config: Engine configuration.

    Returns:
        ResolvedIntent carrying the intent and the layer it came from.
    """
    if store is not None:
        override = store.exact_overrides.get(keyword)
        if override is not None:
            return ResolvedIntent(override, IntentSource.OVERRIDE)

        learned = find_learned_intent(store, keyword, config)
        if learned is not None:
            return ResolvedIntent(learned, IntentSource.LEARNED)

    if ai_intents:
        raw = ai_intents.get(keyword.lower())
        if raw is not None:
            ai_intent = Intent.parse(raw)
            if ai_intent is not None:
                return ResolvedIntent(ai_intent, IntentSource.AI)
            logger.debug(f"Ignoring unrecognised AI intent {raw!r} for {keyword!r}")

    intent = classify_intent(keyword, ranking_url, site_url, competitor_brands)
    return ResolvedIntent(intent, IntentSource.AUTO)


def resolve_intents(
    keywords: Iterable[str],
    store: Optional[OverrideStore] = None,
    ranking_urls: Optional[Mapping[str, str]] = None,
    site_url: Optional[str] = None,
    competitor_brands: Optional[Iterable[str]] = None,
    ai_intents: Optional[Mapping[str, object]] = None,
    config: Optional[EngineConfig] = None,
) -> dict[str, ResolvedIntent]:
    """
    Resolve effective intents for many keywords.

    Args:
        keywords: Keywords to resolve.
        ranking_urls: Top ranking URL per keyword.
        Other arguments as for resolve_intent.

    Returns:
        Dict of keyword to ResolvedIntent, in input order.
    """
    ranking_urls = ranking_urls or {}
    competitors = tuple(competitor_brands or ())
    return {
        keyword: resolve_intent(
            keyword,
            store=store,
            ranking_url=ranking_urls.get(keyword),
            site_url=site_url,
            competitor_brands=competitors,
            ai_intents=ai_intents,
            config=config,
        )
        for keyword in keywords
    }
