"""
Keyword tokenization for override learning.

Learned rules match keywords by token overlap. Both recording an
override and resolving a keyword tokenize the same way:
1. Lowercase and split on whitespace
2. Drop tokens shorter than two characters
3. Drop common stopwords
"""

import math
from typing import Iterable

# Common stopwords to exclude from token matching
STOPWORDS = {
    "a", "an", "the", "and", "or", "but", "in", "on", "at", "to", "for",
    "of", "with", "by", "from", "as", "is", "was", "are", "were", "been",
    "be", "have", "has", "had", "do", "does", "did", "will", "would",
    "could", "should", "may", "might", "must", "shall", "can", "need",
    "it", "its", "this", "that", "these", "those", "i", "you", "he",
    "she", "we", "they", "what", "which", "who", "whom", "how", "when",
    "where", "why", "all", "each", "every", "both", "few", "more", "most",
    "other", "some", "such", "no", "nor", "not", "only", "own", "same",
    "so", "than", "too", "very", "just", "also", "now", "here", "there",
    "your", "our", "their", "my", "his", "her", "about", "into", "through",
    "during", "before", "after", "above", "below", "between", "under",
    "again", "further", "then", "once", "any", "up", "down", "out", "off",
}


def tokenize_keyword(text: str) -> tuple[str, ...]:
    """
    Extract learning tokens from a keyword.

    Args:
        text: Keyword text as typed.

    Returns:
        Unique tokens in order of first occurrence.
    """
    tokens: list[str] = []
    for word in (text or "").lower().split():
        if len(word) < 2 or word in STOPWORDS or word in tokens:
            continue
        tokens.append(word)
    return tuple(tokens)


def token_overlap(tokens: Iterable[str], other: Iterable[str]) -> int:
    """Count tokens shared by two token collections."""
    return len(set(tokens) & set(other))


def overlap_threshold(token_count: int, ratio: float = 0.5) -> int:
    """Minimum shared tokens needed for a rule with token_count tokens to match."""
    return max(1, math.ceil(token_count * ratio))
