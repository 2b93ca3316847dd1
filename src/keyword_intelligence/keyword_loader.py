"""
Loading engine inputs from CSV, Excel and JSON files.

This module handles ingestion of:
- Search Console keyword metrics (CSV/Excel)
- Search volumes, ranking URLs and historical positions (CSV/Excel)
- Per-keyword recommendation checklists and AI intents (JSON)
- The per-site override store (JSON)

The engine itself performs no I/O; everything read from disk passes
through here.
"""

import json
import logging
from pathlib import Path
from typing import Any, Optional, Union

import pandas as pd

from .models import ChecklistItem, HistoricalPositions, KeywordMetric, OverrideStore

logger = logging.getLogger(__name__)


class KeywordLoadError(Exception):
    """Raised when an input file cannot be loaded."""
    pass


# Common column name variations for keyword data
KEYWORD_COLUMN_VARIANTS = ["keyword", "keywords", "query", "queries", "term", "phrase", "top_queries"]
POSITION_COLUMN_VARIANTS = ["position", "avg_position", "average_position", "pos", "rank"]
IMPRESSIONS_COLUMN_VARIANTS = ["impressions", "impr"]
CLICKS_COLUMN_VARIANTS = ["clicks"]
CTR_COLUMN_VARIANTS = ["ctr", "click_through_rate"]
VOLUME_COLUMN_VARIANTS = ["search_volume", "volume", "searchvolume", "sv", "avg_monthly_searches"]
URL_COLUMN_VARIANTS = ["page", "url", "ranking_url", "landing_page", "top_page"]
PERIOD_COLUMN_VARIANTS = {
    "period1": ["period1", "period_1", "p1"],
    "period2": ["period2", "period_2", "p2"],
    "period3": ["period3", "period_3", "p3"],
}


def _normalize_column_name(name: str) -> str:
    """Normalize column name for matching."""
    return str(name).lower().strip().replace(" ", "_").replace("-", "_")


def _find_column(df: pd.DataFrame, variants: list[str]) -> Optional[str]:
    """
    Find a column in the DataFrame matching one of the variant names.

    Args:
        df: The DataFrame to search.
        variants: List of possible column name variants.

    Returns:
        The actual column name if found, None otherwise.
    """
    normalized_columns = {_normalize_column_name(col): col for col in df.columns}

    for variant in variants:
        normalized = _normalize_column_name(variant)
        if normalized in normalized_columns:
            return normalized_columns[normalized]

    return None


def _read_table(file_path: Union[str, Path], sheet_name: Optional[str] = None) -> pd.DataFrame:
    """Read a CSV or Excel file into a non-empty DataFrame."""
    path = Path(file_path)

    if not path.exists():
        raise KeywordLoadError(f"File not found: {file_path}")

    suffix = path.suffix.lower()
    try:
        if suffix == ".csv":
            try:
                df = pd.read_csv(path, encoding="utf-8")
            except UnicodeDecodeError:
                df = pd.read_csv(path, encoding="latin-1")
        elif suffix in (".xlsx", ".xls"):
            df = pd.read_excel(path, sheet_name=sheet_name) if sheet_name else pd.read_excel(path)
        else:
            raise KeywordLoadError(
                f"Unsupported file format: {suffix}. Supported formats: .csv, .xlsx, .xls"
            )
    except KeywordLoadError:
        raise
    except Exception as e:
        raise KeywordLoadError(f"Failed to read {path.name}: {e}")

    if df.empty:
        raise KeywordLoadError(f"File is empty: {path.name}")

    return df


def _require_keyword_column(df: pd.DataFrame) -> str:
    keyword_col = _find_column(df, KEYWORD_COLUMN_VARIANTS)
    if keyword_col is None:
        raise KeywordLoadError(
            f"No keyword column found. Expected one of: {', '.join(KEYWORD_COLUMN_VARIANTS)}. "
            f"Found columns: {', '.join(str(c) for c in df.columns)}"
        )
    return keyword_col


def _cell_keyword(row: pd.Series, column: str) -> Optional[str]:
    value = row[column]
    if pd.isna(value) or not str(value).strip():
        return None
    return str(value).strip()


def _cell_float(row: pd.Series, column: Optional[str]) -> Optional[float]:
    if column is None or pd.isna(row[column]):
        return None
    value = row[column]
    if isinstance(value, str):
        value = value.strip().rstrip("%").replace(",", "")
    try:
        return float(value)
    except (ValueError, TypeError):
        return None


def _cell_int(row: pd.Series, column: Optional[str]) -> Optional[int]:
    value = _cell_float(row, column)
    return int(value) if value is not None else None


def load_keyword_metrics(file_path: Union[str, Path], sheet_name: Optional[str] = None) -> list[KeywordMetric]:
    """
    Load Search Console keyword metrics from a CSV or Excel file.

    Args:
        file_path: Path to the metrics file.
        sheet_name: Optional sheet name for Excel files.

    Returns:
        List of KeywordMetric objects, one per keyword (first row wins).

    Raises:
        KeywordLoadError: If the file cannot be read or has no keyword column.
    """
    df = _read_table(file_path, sheet_name)
    keyword_col = _require_keyword_column(df)

    position_col = _find_column(df, POSITION_COLUMN_VARIANTS)
    impressions_col = _find_column(df, IMPRESSIONS_COLUMN_VARIANTS)
    clicks_col = _find_column(df, CLICKS_COLUMN_VARIANTS)
    ctr_col = _find_column(df, CTR_COLUMN_VARIANTS)

    metrics: list[KeywordMetric] = []
    seen: set[str] = set()

    for _, row in df.iterrows():
        keyword = _cell_keyword(row, keyword_col)
        if keyword is None or keyword in seen:
            continue
        seen.add(keyword)

        metrics.append(
            KeywordMetric(
                keyword=keyword,
                position=_cell_float(row, position_col),
                impressions=_cell_int(row, impressions_col),
                clicks=_cell_int(row, clicks_col),
                ctr=_cell_float(row, ctr_col),
            )
        )

    if not metrics:
        raise KeywordLoadError("No valid keywords found in file")

    logger.info(f"Loaded metrics for {len(metrics)} keywords from {file_path}")
    return metrics


def load_search_volumes(file_path: Union[str, Path], sheet_name: Optional[str] = None) -> dict[str, Optional[int]]:
    """
    Load monthly search volume per keyword.

    Returns:
        Dict of keyword to volume. Missing column yields an empty dict.
    """
    df = _read_table(file_path, sheet_name)
    keyword_col = _require_keyword_column(df)
    volume_col = _find_column(df, VOLUME_COLUMN_VARIANTS)
    if volume_col is None:
        logger.debug(f"No search volume column in {file_path}")
        return {}

    volumes: dict[str, Optional[int]] = {}
    for _, row in df.iterrows():
        keyword = _cell_keyword(row, keyword_col)
        if keyword is not None and keyword not in volumes:
            volumes[keyword] = _cell_int(row, volume_col)
    return volumes


def load_ranking_urls(file_path: Union[str, Path], sheet_name: Optional[str] = None) -> dict[str, str]:
    """
    Load the top ranking URL per keyword.

    The first row for a keyword is taken as its top page.
    """
    df = _read_table(file_path, sheet_name)
    keyword_col = _require_keyword_column(df)
    url_col = _find_column(df, URL_COLUMN_VARIANTS)
    if url_col is None:
        logger.debug(f"No ranking URL column in {file_path}")
        return {}

    urls: dict[str, str] = {}
    for _, row in df.iterrows():
        keyword = _cell_keyword(row, keyword_col)
        url = row[url_col]
        if keyword is None or keyword in urls or pd.isna(url) or not str(url).strip():
            continue
        urls[keyword] = str(url).strip()
    return urls


def load_historical_positions(
    file_path: Union[str, Path], sheet_name: Optional[str] = None
) -> dict[str, HistoricalPositions]:
    """
    Load three-period historical position averages per keyword.

    Expects a keyword column plus period1, period2 and period3 columns
    (oldest to newest). Missing period columns read as absent.
    """
    df = _read_table(file_path, sheet_name)
    keyword_col = _require_keyword_column(df)
    period_cols = {key: _find_column(df, variants) for key, variants in PERIOD_COLUMN_VARIANTS.items()}

    if not any(period_cols.values()):
        raise KeywordLoadError(
            f"No period columns found. Expected period1, period2, period3. "
            f"Found columns: {', '.join(str(c) for c in df.columns)}"
        )

    history: dict[str, HistoricalPositions] = {}
    for _, row in df.iterrows():
        keyword = _cell_keyword(row, keyword_col)
        if keyword is None or keyword in history:
            continue
        history[keyword] = HistoricalPositions(
            **{key: _cell_float(row, col) for key, col in period_cols.items()}
        )
    return history


def _read_json(file_path: Union[str, Path]) -> Any:
    path = Path(file_path)
    if not path.exists():
        raise KeywordLoadError(f"File not found: {file_path}")
    try:
        return json.loads(path.read_text(encoding="utf-8"))
    except (OSError, json.JSONDecodeError) as e:
        raise KeywordLoadError(f"Failed to read JSON file {path.name}: {e}")


def parse_checklists(data: Any) -> dict[str, Optional[list[ChecklistItem]]]:
    """
    Parse per-keyword checklists from decoded JSON.

    Accepts either keyword -> [items] or keyword -> {"checklist": [items]}
    (a full scan result). A null value marks an unscanned keyword.
    """
    if not isinstance(data, dict):
        raise KeywordLoadError("Checklist data must be an object keyed by keyword")

    checklists: dict[str, Optional[list[ChecklistItem]]] = {}
    for keyword, value in data.items():
        if isinstance(value, dict):
            value = value.get("checklist")
        if value is None:
            checklists[keyword] = None
            continue
        if not isinstance(value, list):
            raise KeywordLoadError(f"Checklist for {keyword!r} must be a list")
        checklists[keyword] = [
            ChecklistItem.from_dict(item) for item in value if isinstance(item, dict)
        ]
    return checklists


def load_checklists(file_path: Union[str, Path]) -> dict[str, Optional[list[ChecklistItem]]]:
    """Load per-keyword recommendation checklists from a JSON file."""
    return parse_checklists(_read_json(file_path))


def load_ai_intents(file_path: Union[str, Path]) -> dict[str, str]:
    """
    Load AI intent classifications from a JSON file.

    Accepts {"intents": {...}} (the classifier's response) or a plain
    keyword -> intent object. Keys are lowercased.
    """
    data = _read_json(file_path)
    if isinstance(data, dict) and isinstance(data.get("intents"), dict):
        data = data["intents"]
    if not isinstance(data, dict):
        raise KeywordLoadError("AI intents must be an object keyed by keyword")
    return {str(k).lower(): str(v) for k, v in data.items() if v is not None}


def load_override_store(file_path: Union[str, Path]) -> OverrideStore:
    """
    Load a site's override store.

    A missing file yields an empty store; a store is created on first use.
    """
    path = Path(file_path)
    if not path.exists():
        logger.debug(f"No override store at {path}, starting empty")
        return OverrideStore()

    data = _read_json(path)
    if not isinstance(data, dict):
        raise KeywordLoadError("Override store must be a JSON object")
    try:
        return OverrideStore.from_dict(data)
    except ValueError as e:
        raise KeywordLoadError(f"Malformed override store {path.name}: {e}")


def save_override_store(store: OverrideStore, file_path: Union[str, Path]) -> Path:
    """Write a site's override store as JSON."""
    path = Path(file_path)
    try:
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(json.dumps(store.to_dict(), indent=2), encoding="utf-8")
    except OSError as e:
        raise KeywordLoadError(f"Failed to write override store {path}: {e}")
    return path
