"""
Pytest fixtures and configuration for Keyword Intelligence tests.
"""

import json
from pathlib import Path

import pytest

from keyword_intelligence.models import ChecklistItem, OverrideStore, Priority


@pytest.fixture
def sample_metrics_csv(tmp_path: Path) -> Path:
    """Create a sample Search Console metrics CSV file."""
    csv_path = tmp_path / "metrics.csv"
    csv_content = """keyword,position,impressions,clicks,ctr,search_volume
buy running shoes,12.4,5400,120,0.022,12000
best running shoes,2.1,8000,900,0.1125,6000
best running shoes for men,8.0,3000,150,0.05,1500
how to tie running shoes,4.0,2000,300,0.15,800
running shoes near me,15.0,900,10,0.011,
"""
    csv_path.write_text(csv_content)
    return csv_path


@pytest.fixture
def sample_history_csv(tmp_path: Path) -> Path:
    """Create a sample three-period historical positions CSV file."""
    csv_path = tmp_path / "history.csv"
    csv_content = """keyword,period1,period2,period3
buy running shoes,4.0,6.0,9.5
best running shoes,2.0,2.2,2.1
how to tie running shoes,1.0,3.0,12.0
running shoes near me,8.0,,14.0
"""
    csv_path.write_text(csv_content)
    return csv_path


@pytest.fixture
def sample_checklists() -> dict:
    """Raw scan results for a keyword group, keyed by keyword."""
    return {
        "buy running shoes": {
            "checklist": [
                {"id": "1", "category": "title-tag", "task": "Set title to \"Buy Running Shoes | Acme\"",
                 "page": "/pricing", "priority": "high"},
                {"id": "2", "category": "content", "task": "Add a sizing section", "page": "/pricing",
                 "priority": "medium"},
            ]
        },
        "best running shoes": [
            {"id": "1", "category": "title-tag", "task": "Set title to \"Best Running Shoes 2026\"",
             "page": "/pricing", "priority": "medium"},
            {"id": "2", "category": "content", "task": "Add a comparison table", "page": "/pricing",
             "priority": "low"},
        ],
        "running shoes near me": None,
    }


@pytest.fixture
def sample_checklists_json(tmp_path: Path, sample_checklists: dict) -> Path:
    """Write the sample scan results to a JSON file."""
    json_path = tmp_path / "checklists.json"
    json_path.write_text(json.dumps(sample_checklists))
    return json_path


@pytest.fixture
def make_item():
    """Factory for checklist items."""
    def _make(category: str, page: str = "/pricing", priority: str = "medium", task: str = "",
              item_id: str = "1") -> ChecklistItem:
        return ChecklistItem(
            id=item_id,
            category=category,
            task=task or f"{category} change for {page}",
            page=page,
            priority=Priority(priority),
        )
    return _make


@pytest.fixture
def empty_store() -> OverrideStore:
    """A site with no overrides yet."""
    return OverrideStore()
