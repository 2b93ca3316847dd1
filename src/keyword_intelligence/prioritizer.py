"""
Recommendation prioritization across a keyword group.

When several related keywords are scanned together, their checklists can
contradict each other: two keywords may each suggest a different <title>
for the same page. This module:
- Flattens every keyword's checklist into attributed items
- Detects conflicts (same page, same single-directive category)
- Lets the higher-value keyword win each conflict
- Produces one globally ranked list, keeping the losing items visible
"""

import logging
from typing import Iterable, Mapping, Optional, Sequence

from .config import DEFAULT_CONFIG, EngineConfig
from .models import ChecklistItem, ConflictGroup, RankedItem, RankingResult
from .value_scorer import score_keyword_value

logger = logging.getLogger(__name__)


class RecommendationPrioritizer:
    """
    Ranks recommendations from a group of keywords.

    Items are ordered by:
    - Primary before deprioritized (conflict losers)
    - Priority (high, medium, low)
    - Source keyword value, highest first
    """

    def __init__(
        self,
        checklists: Mapping[str, Optional[Sequence[ChecklistItem]]],
        keyword_values: Mapping[str, int],
        config: Optional[EngineConfig] = None,
    ):
        """
        Initialize the prioritizer.

        Args:
            checklists: Checklist per keyword. Keywords mapped to None
                (not yet scanned) contribute nothing.
            keyword_values: Value score per keyword.
            config: Engine configuration.
        """
        self.checklists = checklists
        self.keyword_values = keyword_values
        self.config = config or DEFAULT_CONFIG

    def rank(self) -> RankingResult:
        """Build the ranked, conflict-annotated recommendation list."""
        items = self._flatten()
        conflicts = self._resolve_conflicts(items)

        ranked = sorted(
            items,
            key=lambda item: (
                not item.is_primary,
                item.task.priority.rank,
                -item.keyword_value,
            ),
        )

        logger.info(
            f"Ranked {len(ranked)} recommendation(s) from {len(self.checklists)} keyword(s); "
            f"{len(conflicts)} conflict group(s)"
        )
        return RankingResult(ranked_items=ranked, conflicts=conflicts)

    def _flatten(self) -> list[RankedItem]:
        """One RankedItem per checklist item, attributed to its keyword."""
        items: list[RankedItem] = []
        for keyword, checklist in self.checklists.items():
            if not checklist:
                continue
            value = self.keyword_values.get(keyword, 0)
            for task in checklist:
                items.append(
                    RankedItem(
                        keyword=keyword,
                        task=task,
                        keyword_value=value,
                        order=len(items),
                    )
                )
        return items

    def _resolve_conflicts(self, items: list[RankedItem]) -> list[ConflictGroup]:
        """
        Group items by (page, category) and pick a winner per group.

        Only categories where a page can carry one directive are grouped.
        Groups with a single member are not conflicts.
        """
        groups: dict[tuple[str, str], list[RankedItem]] = {}
        for item in items:
            if not item.task.page or not self.config.is_conflicting_category(item.task.category):
                continue
            groups.setdefault((item.task.page, item.task.category), []).append(item)

        conflicts: list[ConflictGroup] = []
        for (page, category), members in groups.items():
            if len(members) <= 1:
                continue

            # Stable: equal values keep input order
            members = sorted(members, key=lambda m: m.keyword_value, reverse=True)
            for index, member in enumerate(members):
                member.is_conflict = True
                member.is_primary = index == 0

            logger.debug(
                f"Conflict on {page} [{category}]: {members[0].keyword!r} wins over "
                f"{[m.keyword for m in members[1:]]}"
            )
            conflicts.append(ConflictGroup(page=page, category=category, items=members))

        return conflicts


def build_ranked_recommendations(
    checklists: Mapping[str, Optional[Sequence[ChecklistItem]]],
    keyword_values: Mapping[str, int],
    config: Optional[EngineConfig] = None,
) -> RankingResult:
    """
    Convenience function to rank a keyword group's recommendations.

    Args:
        checklists: Checklist per keyword (None for unscanned keywords).
        keyword_values: Value score per keyword.
        config: Engine configuration.

    Returns:
        RankingResult with ranked items and conflict groups.
    """
    return RecommendationPrioritizer(checklists, keyword_values, config).rank()


def compute_keyword_values(
    keywords: Iterable[str],
    positions: Mapping[str, Optional[float]],
    volumes: Mapping[str, Optional[float]],
) -> dict[str, int]:
    """Value score per keyword from its own position and search volume."""
    return {
        keyword: score_keyword_value(positions.get(keyword), volumes.get(keyword))
        for keyword in keywords
    }


def rank_keyword_group(
    checklists: Mapping[str, Optional[Sequence[ChecklistItem]]],
    positions: Mapping[str, Optional[float]],
    volumes: Mapping[str, Optional[float]],
    config: Optional[EngineConfig] = None,
) -> RankingResult:
    """
    Score each scanned keyword and rank the group's recommendations.

    Args:
        checklists: Checklist per keyword (None for unscanned keywords).
        positions: Current position per keyword.
        volumes: Monthly search volume per keyword.
        config: Engine configuration.

    Returns:
        RankingResult with ranked items and conflict groups.
    """
    scanned = [kw for kw, checklist in checklists.items() if checklist]
    values = compute_keyword_values(scanned, positions, volumes)
    return build_ranked_recommendations(checklists, values, config)
