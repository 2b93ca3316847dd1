"""
Tests for the keyword-intel command-line interface.
"""

import json
from pathlib import Path

from click.testing import CliRunner

from keyword_intelligence.cli import main


class TestClassifyCommand:
    """Tests for the classify command."""

    def test_classify_keyword(self):
        result = CliRunner().invoke(main, ["classify", "buy running shoes"])

        assert result.exit_code == 0
        assert "Transactional (stage: transactional)" in result.output

    def test_classify_with_url(self):
        result = CliRunner().invoke(
            main, ["classify", "how to tie running shoes", "--url", "/blog/how-to-tie-shoes"]
        )

        assert result.exit_code == 0
        assert "Educational" in result.output

    def test_classify_with_competitor(self):
        result = CliRunner().invoke(main, ["classify", "nike pricing", "--competitor", "nike"])

        assert "Competitor Transactional" in result.output


class TestReportCommand:
    """Tests for the report command."""

    def test_report_alert_counts(self, sample_metrics_csv: Path, sample_history_csv: Path):
        result = CliRunner().invoke(main, [
            "report",
            "-m", str(sample_metrics_csv),
            "--historical", str(sample_history_csv),
            "--site", "https://acme.com",
        ])

        assert result.exit_code == 0, result.output
        assert "Keyword Intelligence" in result.output
        assert "fire: 2" in result.output
        assert "smoking: 1" in result.output
        assert "hot: 1" in result.output

    def test_report_without_history_has_no_alerts(self, sample_metrics_csv: Path):
        result = CliRunner().invoke(main, ["report", "-m", str(sample_metrics_csv)])

        assert result.exit_code == 0
        assert "fire: 0" in result.output

    def test_report_bad_input(self, tmp_path: Path):
        csv_path = tmp_path / "bad.csv"
        csv_path.write_text("position\n3\n")

        result = CliRunner().invoke(main, ["report", "-m", str(csv_path)])

        assert result.exit_code == 1
        assert "Input error" in result.output


class TestRankCommand:
    """Tests for the rank command."""

    def test_rank_shows_conflicts(self, sample_metrics_csv: Path, sample_checklists_json: Path):
        result = CliRunner().invoke(main, [
            "rank",
            "-m", str(sample_metrics_csv),
            "-c", str(sample_checklists_json),
        ])

        assert result.exit_code == 0, result.output
        assert "Ranked Recommendations" in result.output
        assert "1 conflicting recommendation group(s) detected" in result.output
        assert "/pricing [title-tag]" in result.output
        assert "best running shoes (140)" in result.output

    def test_rank_without_conflicts(self, sample_metrics_csv: Path, tmp_path: Path):
        checklists = tmp_path / "checklists.json"
        checklists.write_text(json.dumps({
            "buy running shoes": [{"id": "1", "category": "content", "task": "Add FAQ", "page": "/pricing"}],
        }))

        result = CliRunner().invoke(main, [
            "rank", "-m", str(sample_metrics_csv), "-c", str(checklists), "--conflicts-only",
        ])

        assert result.exit_code == 0
        assert "No conflicting recommendations." in result.output
        assert "Ranked Recommendations" not in result.output


class TestOverrideCommand:
    """Tests for the override command."""

    def test_override_creates_store(self, sample_metrics_csv: Path, tmp_path: Path):
        store_path = tmp_path / "overrides.json"

        result = CliRunner().invoke(main, [
            "override", "best running shoes", "Transactional",
            "--store", str(store_path),
            "-m", str(sample_metrics_csv),
        ])

        assert result.exit_code == 0, result.output
        assert "Propagated Overrides" in result.output
        saved = json.loads(store_path.read_text())
        assert saved["exactOverrides"]["best running shoes"] == "Transactional"
        assert saved["exactOverrides"]["best running shoes for men"] == "Transactional"
        assert saved["learnedRules"][0]["tokens"] == ["best", "running", "shoes"]

    def test_override_without_metrics(self, tmp_path: Path):
        store_path = tmp_path / "overrides.json"

        result = CliRunner().invoke(main, [
            "override", "trail shoes", "product", "--store", str(store_path),
        ])

        assert result.exit_code == 0
        assert "No similar keywords updated." in result.output
        assert json.loads(store_path.read_text())["exactOverrides"] == {"trail shoes": "Product"}

    def test_unknown_intent_rejected(self, tmp_path: Path):
        result = CliRunner().invoke(main, [
            "override", "trail shoes", "Commercial", "--store", str(tmp_path / "o.json"),
        ])

        assert result.exit_code == 2
        assert "is not an intent" in result.output


class TestMarkupInInput:
    """Tests for keywords and pages that look like console markup."""

    def test_report_bracketed_keyword(self, tmp_path: Path):
        csv_path = tmp_path / "metrics.csv"
        csv_path.write_text("keyword,position\n[/b] running shoes,4\n[bold]trail[/bold],6\n")

        result = CliRunner().invoke(main, ["report", "-m", str(csv_path)])

        assert result.exit_code == 0, result.output
        assert "[/b] running shoes" in result.output
        assert "[bold]trail[/bold]" in result.output

    def test_rank_bracketed_keyword_and_page(self, tmp_path: Path):
        metrics = tmp_path / "metrics.csv"
        metrics.write_text("keyword,position\n[/b] shoes,4\n")
        checklists = tmp_path / "checklists.json"
        checklists.write_text(json.dumps({
            "[/b] shoes": [{"id": "1", "category": "content", "task": "Add FAQ", "page": "/[x]"}],
        }))

        result = CliRunner().invoke(main, ["rank", "-m", str(metrics), "-c", str(checklists)])

        assert result.exit_code == 0, result.output
        assert "[/b] shoes" in result.output
        assert "/[x]" in result.output

    def test_override_bracketed_keyword(self, tmp_path: Path):
        store_path = tmp_path / "overrides.json"

        result = CliRunner().invoke(main, [
            "override", "[/red] socks", "Product", "--store", str(store_path),
        ])

        assert result.exit_code == 0, result.output
        assert "[/red] socks -> Product" in result.output


class TestMalformedStore:
    """Tests for override stores with the wrong shape."""

    def test_override_with_malformed_store(self, tmp_path: Path):
        store_path = tmp_path / "overrides.json"
        store_path.write_text(json.dumps({"exactOverrides": ["trail shoes"]}))

        result = CliRunner().invoke(main, [
            "override", "trail shoes", "Product", "--store", str(store_path),
        ])

        assert result.exit_code == 1
        assert "Input error" in result.output
        assert "Malformed override store" in result.output

    def test_report_resolves_each_keyword_once(self, sample_metrics_csv: Path, monkeypatch):
        import keyword_intelligence.engine as engine_module

        calls = []
        original = engine_module.resolve_intents

        def counting_resolve(keywords, *args, **kwargs):
            keywords = list(keywords)
            calls.append(keywords)
            return original(keywords, *args, **kwargs)

        monkeypatch.setattr(engine_module, "resolve_intents", counting_resolve)

        result = CliRunner().invoke(main, ["report", "-m", str(sample_metrics_csv)])

        assert result.exit_code == 0, result.output
        assert len(calls) == 1
