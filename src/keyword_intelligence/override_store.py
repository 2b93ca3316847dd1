"""
User intent overrides and the rules learned from them.

When a user corrects a keyword's intent, the correction is stored as an
exact override and generalized into a learned rule (the keyword's
tokens). The new intent is then propagated once to every textually
similar keyword on the site that has no override of its own.

Propagation is a one-shot batch at the moment of override. Later
overrides on other keywords do not re-propagate earlier rules.
"""

import logging
from dataclasses import dataclass, field
from typing import Iterable, Optional

from .config import DEFAULT_CONFIG, EngineConfig
from .keyword_tokens import overlap_threshold, token_overlap, tokenize_keyword
from .models import Intent, LearnedRule, OverrideStore

logger = logging.getLogger(__name__)


@dataclass
class OverrideResult:
    """Updated store plus the keywords the override propagated to."""
    store: OverrideStore
    affected: dict[str, Intent] = field(default_factory=dict)
    rule: Optional[LearnedRule] = None


def rule_matches(
    rule: LearnedRule,
    keyword_tokens: Iterable[str],
    config: EngineConfig = DEFAULT_CONFIG,
) -> bool:
    """Check if enough of a rule's tokens appear in a keyword's tokens."""
    threshold = overlap_threshold(len(rule.tokens), config.propagation_ratio)
    return token_overlap(rule.tokens, keyword_tokens) >= threshold


def record_override(
    store: OverrideStore,
    keyword: str,
    intent: Intent,
    all_site_keywords: Iterable[str] = (),
    config: Optional[EngineConfig] = None,
) -> OverrideResult:
    """
    Record a user's intent correction and propagate it to similar keywords.

    Args:
        store: Current override store. Not modified.
        keyword: Keyword the user corrected, as typed.
        intent: Intent the user chose.
        all_site_keywords: Every keyword tracked for the site.
        config: Engine configuration.

    Returns:
        OverrideResult with the updated store (caller persists it) and the
        keywords that picked up the new intent through propagation.
    """
    config = config or DEFAULT_CONFIG
    updated = store.copy()
    updated.exact_overrides[keyword] = intent

    tokens = tokenize_keyword(keyword)
    if not tokens:
        logger.debug(f"Override for {keyword!r} has no learnable tokens")
        return OverrideResult(store=updated)

    rule = LearnedRule(tokens=tokens, intent=intent, source=keyword)
    updated.learned_rules = [r for r in updated.learned_rules if r.source != keyword]
    updated.learned_rules.append(rule)

    affected: dict[str, Intent] = {}
    for candidate in all_site_keywords:
        if candidate == keyword or candidate in updated.exact_overrides:
            continue
        if rule_matches(rule, tokenize_keyword(candidate), config):
            updated.exact_overrides[candidate] = intent
            affected[candidate] = intent

    logger.info(
        f"Recorded {intent.value} override for {keyword!r}; "
        f"propagated to {len(affected)} keyword(s)"
    )
    return OverrideResult(store=updated, affected=affected, rule=rule)


def find_learned_rule(
    store: OverrideStore,
    keyword: str,
    config: Optional[EngineConfig] = None,
) -> Optional[LearnedRule]:
    """
    Find the first learned rule that matches a keyword.

    Rules are checked in the order they were recorded.
    """
    config = config or DEFAULT_CONFIG
    keyword_tokens = tokenize_keyword(keyword)
    for rule in store.learned_rules:
        if rule_matches(rule, keyword_tokens, config):
            return rule
    return None


def find_learned_intent(
    store: OverrideStore,
    keyword: str,
    config: Optional[EngineConfig] = None,
) -> Optional[Intent]:
    """Intent of the first learned rule matching a keyword, if any."""
    rule = find_learned_rule(store, keyword, config)
    return rule.intent if rule else None


def clear_override(store: OverrideStore, keyword: str) -> OverrideStore:
    """
    Reset a keyword to automatic classification.

    Removes the keyword's exact override and the rule learned from it.
    Overrides that were propagated from that rule to other keywords are
    kept; they are exact overrides in their own right.

    Returns:
        Updated copy of the store.
    """
    updated = store.copy()
    updated.exact_overrides.pop(keyword, None)
    updated.learned_rules = [r for r in updated.learned_rules if r.source != keyword]
    return updated
