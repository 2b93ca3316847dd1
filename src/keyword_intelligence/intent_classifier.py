"""
Rule-based keyword intent classification.

Classifies a keyword into one of eight intents using an ordered cascade
of heuristics. The first stage that produces an intent wins, so the
order of CLASSIFICATION_STAGES matters: "buy acme shoes" on acme.com is
Branded, not Transactional, because the brand stage runs first.

Stages:
1. Local phrasing ("near me", "hours", "directions")
2. Site's own brand in the keyword
3. Competitor brand in the keyword (transactional or navigational)
4. Generic navigational phrasing (login, dashboard, official site)
5. Explicit transactional phrasing (buy, price, free trial, sign up)
6. Product research phrasing (best, review, vs, alternative)
7. Ranking page type (product page vs blog page)
8. Tool/product nouns without URL context
9. Weak educational phrasing (how to, what is, examples)
10. Geographic phrasing ("in Denver")
11. Default: Educational
"""

import logging
import re
from dataclasses import dataclass
from typing import Callable, Iterable, Optional

from .models import Intent
from .page_archetype import PageKind, detect_url_page_kind, extract_brand_token

logger = logging.getLogger(__name__)


LOCAL_PATTERN = re.compile(
    r'\b(near\s*me|nearby|near\s+by|open\s+now|hours|directions|closest'
    r'|in\s+my\s+area|around\s+me)\b'
)

COMPETITOR_TRANSACTIONAL_PATTERN = re.compile(
    r'\b(buy|purchase|pricing|prices?|cost|plans?|discount|coupon|deals?'
    r'|alternatives?|vs\.?|versus|compare|comparison|cancel|cancellation'
    r'|switch|migrate|refund|free\s+trial|reviews?)\b'
)

NAVIGATIONAL_PATTERN = re.compile(
    r'\b(login|log\s+in|sign\s*in|signin|dashboard|official\s+(site|website)'
    r'|my\s+account|account\s+login|customer\s+portal)\b'
)

TRANSACTIONAL_PATTERN = re.compile(
    r'\b(buy|purchase|shop|price|prices|pricing|cost|costs|cheap|cheapest'
    r'|discount|coupon|promo\s+code|deals?|for\s+sale|subscribe|subscription'
    r'|free\s+trial|sign\s*up|signup|hire|quote|get\s+started|download)\b'
)

PRODUCT_PATTERN = re.compile(
    r'\b(best|top\s+\d+|top\s+rated|review|reviews|vs\.?|versus|alternatives?'
    r'|compare|comparison|pros\s+and\s+cons|rated|ranking|ranked)\b'
)

EXPLICIT_EDUCATIONAL_PATTERN = re.compile(
    r'\b(how\s+to|how\s+do|how\s+does|what\s+is|what\s+are|guide|tutorial'
    r'|definition|meaning|explained|why\s+(is|are|do|does))\b'
)

TOOL_NOUN_PATTERN = re.compile(
    r'\b(calculators?|tools?|trackers?|software|apps?|templates?|generators?'
    r'|checkers?|planners?|platforms?|builders?|estimators?|converters?)\b'
)

TOOL_EDUCATIONAL_QUALIFIER = re.compile(r'\b(how|what|guide|tips)\b')

WEAK_EDUCATIONAL_PATTERN = re.compile(
    r'\b(how\s+to|how|what\s+is|what\s+are|what|why|when|guide|examples?'
    r'|can\s+you|can\s+i|does|is\s+it|ideas|tips|meaning|definition|tutorial'
    r'|learn|benefits\s+of|types\s+of)\b'
)

# Matched against the keyword as typed, not lowercased
GEOGRAPHIC_PATTERN = re.compile(r'\bin\s+[A-Z][a-z]+')


@dataclass(frozen=True)
class KeywordSignals:
    """Everything the classification stages look at for one keyword."""
    keyword: str
    text: str  # lowercased, whitespace-normalized
    page_kind: Optional[PageKind]
    brand: Optional[str]
    competitors: tuple[str, ...]


def _contains_brand(text: str, brand: str) -> bool:
    """Check brand containment, treating hyphens in the brand as spaces too."""
    if brand in text:
        return True
    if "-" in brand:
        return brand.replace("-", " ") in text or brand.replace("-", "") in text
    return False


def _local_stage(signals: KeywordSignals) -> Optional[Intent]:
    if LOCAL_PATTERN.search(signals.text):
        return Intent.LOCAL
    return None


def _branded_stage(signals: KeywordSignals) -> Optional[Intent]:
    if signals.brand and _contains_brand(signals.text, signals.brand):
        return Intent.BRANDED
    return None


def _competitor_stage(signals: KeywordSignals) -> Optional[Intent]:
    if not any(_contains_brand(signals.text, c) for c in signals.competitors):
        return None
    if COMPETITOR_TRANSACTIONAL_PATTERN.search(signals.text):
        return Intent.COMPETITOR_TRANSACTIONAL
    return Intent.COMPETITOR_NAVIGATIONAL


def _navigational_stage(signals: KeywordSignals) -> Optional[Intent]:
    if NAVIGATIONAL_PATTERN.search(signals.text):
        return Intent.NAVIGATIONAL
    return None


def _transactional_stage(signals: KeywordSignals) -> Optional[Intent]:
    if TRANSACTIONAL_PATTERN.search(signals.text):
        return Intent.TRANSACTIONAL
    return None


def _product_stage(signals: KeywordSignals) -> Optional[Intent]:
    if PRODUCT_PATTERN.search(signals.text):
        return Intent.PRODUCT
    return None


def _page_kind_intent(signals: KeywordSignals) -> Optional[Intent]:
    """Intent implied by the ranking page, with keyword text able to override it."""
    if signals.page_kind == "product":
        # Keyword text beats page inference
        if EXPLICIT_EDUCATIONAL_PATTERN.search(signals.text):
            return Intent.EDUCATIONAL
        return Intent.TRANSACTIONAL
    if signals.page_kind == "blog":
        if TOOL_NOUN_PATTERN.search(signals.text):
            return Intent.PRODUCT
        return Intent.EDUCATIONAL
    return None


def _tool_noun_stage(signals: KeywordSignals) -> Optional[Intent]:
    if not TOOL_NOUN_PATTERN.search(signals.text):
        return None
    if TOOL_EDUCATIONAL_QUALIFIER.search(signals.text):
        return Intent.EDUCATIONAL
    return Intent.TRANSACTIONAL


def _weak_educational_stage(signals: KeywordSignals) -> Optional[Intent]:
    if WEAK_EDUCATIONAL_PATTERN.search(signals.text):
        return Intent.EDUCATIONAL
    return None


def _geographic_stage(signals: KeywordSignals) -> Optional[Intent]:
    if GEOGRAPHIC_PATTERN.search(signals.keyword):
        return Intent.LOCAL
    return None


def _default_stage(signals: KeywordSignals) -> Optional[Intent]:
    return _page_kind_intent(signals) or Intent.EDUCATIONAL


# Evaluated in order, first non-None result wins
CLASSIFICATION_STAGES: tuple[tuple[str, Callable[[KeywordSignals], Optional[Intent]]], ...] = (
    ("local", _local_stage),
    ("branded", _branded_stage),
    ("competitor", _competitor_stage),
    ("navigational", _navigational_stage),
    ("transactional", _transactional_stage),
    ("product", _product_stage),
    ("ranking_page", _page_kind_intent),
    ("tool_noun", _tool_noun_stage),
    ("educational", _weak_educational_stage),
    ("geographic", _geographic_stage),
    ("default", _default_stage),
)


def build_signals(
    keyword: str,
    ranking_url: Optional[str] = None,
    site_url: Optional[str] = None,
    competitor_brands: Optional[Iterable[str]] = None,
) -> KeywordSignals:
    """Collect the inputs every classification stage reads."""
    keyword = keyword or ""
    competitors = tuple(
        c.strip().lower()
        for c in (competitor_brands or ())
        if c and len(c.strip()) > 1
    )
    return KeywordSignals(
        keyword=keyword,
        text=" ".join(keyword.lower().split()),
        page_kind=detect_url_page_kind(ranking_url),
        brand=extract_brand_token(site_url),
        competitors=competitors,
    )


def classify_with_stage(
    keyword: str,
    ranking_url: Optional[str] = None,
    site_url: Optional[str] = None,
    competitor_brands: Optional[Iterable[str]] = None,
) -> tuple[Intent, str]:
    """
    Classify a keyword and report which stage decided.

    Returns:
        Tuple of (intent, stage name).
    """
    signals = build_signals(keyword, ranking_url, site_url, competitor_brands)

    for name, stage in CLASSIFICATION_STAGES:
        intent = stage(signals)
        if intent is not None:
            logger.debug(f"Classified {keyword!r} as {intent.value} at stage {name}")
            return intent, name

    return Intent.EDUCATIONAL, "default"


def classify_intent(
    keyword: str,
    ranking_url: Optional[str] = None,
    site_url: Optional[str] = None,
    competitor_brands: Optional[Iterable[str]] = None,
) -> Intent:
    """
    Classify a keyword's search intent from its text and context.

    Args:
        keyword: Keyword text.
        ranking_url: URL of the page the keyword ranks on, if known.
        site_url: The site's URL or Search Console property, if known.
        competitor_brands: Competitor brand names, if known.

    Returns:
        The classified Intent. Never raises; unclassifiable keywords
        default to Educational.
    """
    intent, _ = classify_with_stage(keyword, ranking_url, site_url, competitor_brands)
    return intent
