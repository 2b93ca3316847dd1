"""
Ranking regression alerts.

Compares a keyword's current position against three historical
snapshot averages (oldest to newest) and raises:

- fire: best historical position was on page one, now it is not
- smoking: best historical position was top five, now it is not
- hot: the most recent window averages worse than the window before

Only keywords with commercially actionable intent are evaluated.
"""

import logging
from typing import Iterable, Mapping, Optional

from .config import DEFAULT_CONFIG, EngineConfig
from .models import (
    AlertReport,
    AlertTag,
    HistoricalPositions,
    Intent,
    KeywordMetric,
    ResolvedIntent,
)

logger = logging.getLogger(__name__)

NO_ALERTS: frozenset[AlertTag] = frozenset()


def compute_alerts(
    keyword: str,
    effective_intent: Intent,
    current_position: Optional[float],
    historical: Optional[HistoricalPositions],
    config: Optional[EngineConfig] = None,
) -> frozenset[AlertTag]:
    """
    Compute the alert tags for one keyword.

    Args:
        keyword: Keyword text, for logging.
        effective_intent: Resolved intent of the keyword.
        current_position: Position in the active reporting period.
        historical: Three-period position averages.
        config: Engine configuration.

    Returns:
        Set of zero to three AlertTags.
    """
    config = config or DEFAULT_CONFIG

    if not config.is_actionable(effective_intent):
        return NO_ALERTS
    if current_position is None or historical is None:
        return NO_ALERTS

    tags = set()
    best = historical.best_historical

    if best is not None:
        if best <= config.fire_threshold and current_position > config.fire_threshold:
            tags.add(AlertTag.FIRE)
        if best <= config.smoking_threshold and current_position > config.smoking_threshold:
            tags.add(AlertTag.SMOKING)

    if (
        historical.period2 is not None
        and historical.period3 is not None
        and historical.period3 > historical.period2
    ):
        tags.add(AlertTag.HOT)

    if tags:
        logger.debug(
            f"Alerts for {keyword!r}: {sorted(t.value for t in tags)} "
            f"(best={best}, current={current_position})"
        )
    return frozenset(tags)


def build_alert_report(
    metrics: Iterable[KeywordMetric],
    intents: Mapping[str, object],
    historical: Mapping[str, HistoricalPositions],
    config: Optional[EngineConfig] = None,
) -> AlertReport:
    """
    Compute alerts for every keyword in a reporting period.

    Args:
        metrics: Current-period metrics, one per keyword.
        intents: Effective intent per keyword, as Intent or ResolvedIntent.
        historical: Historical position averages per keyword.
        config: Engine configuration.

    Returns:
        AlertReport with per-keyword alert sets and per-tag counts.
        Keywords without an intent or history get an empty set.
    """
    report = AlertReport()

    for metric in metrics:
        intent = intents.get(metric.keyword)
        if isinstance(intent, ResolvedIntent):
            intent = intent.intent

        if not isinstance(intent, Intent):
            report.alerts[metric.keyword] = NO_ALERTS
            continue

        report.alerts[metric.keyword] = compute_alerts(
            metric.keyword,
            intent,
            metric.position,
            historical.get(metric.keyword),
            config,
        )

    return report
