"""
Tests for effective intent resolution.

Precedence is override, then learned rule, then AI, then rule-based.
Most tests make several layers applicable at once so that only the
precedence order decides the result.
"""

from keyword_intelligence.models import (
    Intent,
    IntentSource,
    LearnedRule,
    OverrideStore,
    ResolvedIntent,
)
from keyword_intelligence.resolver import resolve_intent, resolve_intents


def _store_with_everything() -> OverrideStore:
    return OverrideStore(
        exact_overrides={"buy running shoes": Intent.LOCAL},
        learned_rules=[LearnedRule(("running", "shoes"), Intent.NAVIGATIONAL, "running shoes")],
    )


class TestPrecedence:
    """Tests for layer precedence."""

    def test_override_beats_everything(self):
        resolved = resolve_intent(
            "buy running shoes",
            store=_store_with_everything(),
            ai_intents={"buy running shoes": "Product"},
        )
        assert resolved == ResolvedIntent(Intent.LOCAL, IntentSource.OVERRIDE)

    def test_learned_beats_ai_and_auto(self):
        resolved = resolve_intent(
            "cheap running shoes",
            store=_store_with_everything(),
            ai_intents={"cheap running shoes": "Product"},
        )
        assert resolved == ResolvedIntent(Intent.NAVIGATIONAL, IntentSource.LEARNED)

    def test_ai_beats_auto(self):
        resolved = resolve_intent("buy trail socks", ai_intents={"buy trail socks": "Product"})
        assert resolved == ResolvedIntent(Intent.PRODUCT, IntentSource.AI)

    def test_auto_when_nothing_else_applies(self):
        resolved = resolve_intent("buy trail socks", store=OverrideStore())
        assert resolved == ResolvedIntent(Intent.TRANSACTIONAL, IntentSource.AUTO)

    def test_store_without_match_falls_through(self):
        resolved = resolve_intent("trail socks", store=_store_with_everything())
        assert resolved.source == IntentSource.AUTO


class TestAiIntents:
    """Tests for the AI classification layer."""

    def test_lookup_by_lowercased_keyword(self):
        resolved = resolve_intent("Buy Trail Socks", ai_intents={"buy trail socks": "Local"})
        assert resolved == ResolvedIntent(Intent.LOCAL, IntentSource.AI)

    def test_accepts_intent_members(self):
        resolved = resolve_intent("trail socks", ai_intents={"trail socks": Intent.BRANDED})
        assert resolved.intent == Intent.BRANDED

    def test_accepts_label_variants(self):
        resolved = resolve_intent(
            "nike socks", ai_intents={"nike socks": "competitor_navigational"}
        )
        assert resolved.intent == Intent.COMPETITOR_NAVIGATIONAL

    def test_unrecognised_label_falls_through_to_auto(self):
        resolved = resolve_intent("buy trail socks", ai_intents={"buy trail socks": "Commercial"})
        assert resolved == ResolvedIntent(Intent.TRANSACTIONAL, IntentSource.AUTO)


class TestResolveIntents:
    """Tests for batch resolution."""

    def test_preserves_input_order(self):
        keywords = ["trail socks", "buy running shoes", "best running shoes"]
        resolved = resolve_intents(keywords)
        assert list(resolved) == keywords

    def test_uses_ranking_url_per_keyword(self):
        resolved = resolve_intents(
            ["pace chart", "stride chart"],
            ranking_urls={"pace chart": "/pricing"},
        )
        assert resolved["pace chart"].intent == Intent.TRANSACTIONAL
        assert resolved["stride chart"].intent == Intent.EDUCATIONAL

    def test_site_context_applies_to_all(self):
        resolved = resolve_intents(
            ["acme socks", "nike socks"],
            site_url="https://acme.com",
            competitor_brands=["nike"],
        )
        assert resolved["acme socks"].intent == Intent.BRANDED
        assert resolved["nike socks"].intent == Intent.COMPETITOR_NAVIGATIONAL
