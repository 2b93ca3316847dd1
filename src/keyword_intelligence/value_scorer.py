"""Keyword value scoring for ranking competing recommendations."""

from typing import Optional

# (upper position bound, points); closer to #1 is worth more
POSITION_POINTS = ((3, 100), (10, 70), (20, 40), (50, 20))
POSITION_FLOOR_POINTS = 5

# (minimum monthly searches, points)
VOLUME_POINTS = ((10000, 50), (5000, 40), (1000, 30), (500, 20), (100, 10))
VOLUME_FLOOR_POINTS = 5

MAX_KEYWORD_VALUE = 150


def score_position(position: Optional[float]) -> int:
    """Points for a ranking position; absent or non-positive scores 0."""
    if position is None or position <= 0:
        return 0
    for bound, points in POSITION_POINTS:
        if position <= bound:
            return points
    return POSITION_FLOOR_POINTS


def score_volume(volume: Optional[float]) -> int:
    """Points for monthly search volume; absent or zero scores 0."""
    if volume is None or volume <= 0:
        return 0
    for minimum, points in VOLUME_POINTS:
        if volume >= minimum:
            return points
    return VOLUME_FLOOR_POINTS


def score_keyword_value(position: Optional[float], volume: Optional[float]) -> int:
    """
    Score a keyword's value from its position and search volume.

    The score is only meaningful for ordering keywords against each
    other.

    Returns:
        Integer in 0..150.
    """
    return score_position(position) + score_volume(volume)
