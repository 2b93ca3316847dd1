"""
Command-line interface for the Keyword Intelligence Engine.

Provides commands for classifying keywords, reporting ranking alerts,
ranking a keyword group's recommendations and recording overrides.
"""

import logging
import sys
from pathlib import Path
from typing import Optional

import click
from rich.console import Console
from rich.markup import escape
from rich.panel import Panel
from rich.table import Table

from .alerts import build_alert_report
from .engine import KeywordIntelligenceEngine
from .intent_classifier import classify_with_stage
from .keyword_loader import (
    KeywordLoadError,
    load_ai_intents,
    load_checklists,
    load_historical_positions,
    load_keyword_metrics,
    load_override_store,
    load_ranking_urls,
    load_search_volumes,
    save_override_store,
)
from .models import AlertTag, Intent

console = Console()

ALERT_STYLES = {
    AlertTag.FIRE: "bold red",
    AlertTag.SMOKING: "yellow",
    AlertTag.HOT: "magenta",
}


def _configure_logging(verbose: bool) -> None:
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
    )


def _parse_intent(ctx, param, value: str) -> Intent:
    intent = Intent.parse(value)
    if intent is None:
        choices = ", ".join(i.value for i in Intent)
        raise click.BadParameter(f"'{value}' is not an intent. Choose from: {choices}")
    return intent


@click.group()
@click.option(
    "--verbose",
    "-v",
    is_flag=True,
    default=False,
    help="Enable verbose output.",
)
@click.pass_context
def main(ctx: click.Context, verbose: bool) -> None:
    """
    Keyword Intelligence - intent, alerts and recommendation ranking.

    Examples:

        keyword-intel classify "buy running shoes"

        keyword-intel report -m metrics.csv --historical history.csv --site https://acme.com

        keyword-intel rank -m metrics.csv -c checklists.json
    """
    _configure_logging(verbose)
    ctx.ensure_object(dict)
    ctx.obj["verbose"] = verbose


@main.command()
@click.argument("keyword")
@click.option("--url", "ranking_url", type=str, help="URL of the page the keyword ranks on.")
@click.option("--site", "site_url", type=str, help="Site URL or sc-domain: property.")
@click.option("--competitor", "competitors", multiple=True, help="Competitor brand (repeatable).")
def classify(
    keyword: str,
    ranking_url: Optional[str],
    site_url: Optional[str],
    competitors: tuple[str, ...],
) -> None:
    """Classify a single keyword's intent."""
    intent, stage = classify_with_stage(keyword, ranking_url, site_url, competitors)
    console.print(f"[green]{intent.value}[/green] [dim](stage: {stage})[/dim]")


@main.command()
@click.option(
    "--metrics", "-m",
    type=click.Path(exists=True, path_type=Path),
    required=True,
    help="Keyword metrics file (CSV or Excel).",
)
@click.option(
    "--historical",
    type=click.Path(exists=True, path_type=Path),
    help="Historical positions file with period1-3 columns.",
)
@click.option(
    "--pages",
    type=click.Path(exists=True, path_type=Path),
    help="Keyword to ranking URL file (CSV or Excel).",
)
@click.option(
    "--ai-intents",
    type=click.Path(exists=True, path_type=Path),
    help="AI intent classifications (JSON).",
)
@click.option(
    "--store",
    type=click.Path(path_type=Path),
    help="Override store (JSON).",
)
@click.option("--site", "site_url", type=str, help="Site URL or sc-domain: property.")
@click.option("--competitor", "competitors", multiple=True, help="Competitor brand (repeatable).")
@click.option("--alerts-only", is_flag=True, default=False, help="Only list keywords with alerts.")
@click.pass_context
def report(
    ctx: click.Context,
    metrics: Path,
    historical: Optional[Path],
    pages: Optional[Path],
    ai_intents: Optional[Path],
    store: Optional[Path],
    site_url: Optional[str],
    competitors: tuple[str, ...],
    alerts_only: bool,
) -> None:
    """Show effective intents and ranking alerts for every keyword."""
    try:
        metric_list = load_keyword_metrics(metrics)
        history = load_historical_positions(historical) if historical else {}
        ranking_urls = load_ranking_urls(pages) if pages else {}
        engine = KeywordIntelligenceEngine(
            site_url=site_url,
            competitor_brands=competitors,
            override_store=load_override_store(store) if store else None,
            ai_intents=load_ai_intents(ai_intents) if ai_intents else None,
        )
    except KeywordLoadError as e:
        console.print(f"[red]Input error:[/red] {escape(str(e))}")
        sys.exit(1)

    intents = engine.resolve_all([m.keyword for m in metric_list], ranking_urls)
    alert_report = build_alert_report(metric_list, intents, history, engine.config)

    table = Table(title="Keyword Intelligence", show_header=True)
    table.add_column("Keyword", style="green")
    table.add_column("Position", justify="right")
    table.add_column("Intent", style="cyan")
    table.add_column("Source", style="dim")
    table.add_column("Alerts")

    for metric in metric_list:
        tags = alert_report.alerts.get(metric.keyword, frozenset())
        if alerts_only and not tags:
            continue
        resolved = intents[metric.keyword]
        position = f"{metric.position:.1f}" if metric.position is not None else "-"
        alert_text = " ".join(
            f"[{ALERT_STYLES[tag]}]{tag.value}[/{ALERT_STYLES[tag]}]"
            for tag in AlertTag if tag in tags
        )
        table.add_row(escape(metric.keyword), position, resolved.intent.value, resolved.source.value, alert_text)

    console.print(table)

    counts = alert_report.counts
    console.print(
        "\n[bold]Alerts:[/bold] "
        + "  ".join(f"{tag.value}: {counts[tag]}" for tag in AlertTag)
    )


@main.command()
@click.option(
    "--metrics", "-m",
    type=click.Path(exists=True, path_type=Path),
    required=True,
    help="Keyword metrics file (CSV or Excel).",
)
@click.option(
    "--checklists", "-c",
    type=click.Path(exists=True, path_type=Path),
    required=True,
    help="Per-keyword scan checklists (JSON).",
)
@click.option(
    "--volumes",
    type=click.Path(exists=True, path_type=Path),
    help="Search volume file. Defaults to the metrics file.",
)
@click.option("--conflicts-only", is_flag=True, default=False, help="Only show conflict groups.")
@click.pass_context
def rank(
    ctx: click.Context,
    metrics: Path,
    checklists: Path,
    volumes: Optional[Path],
    conflicts_only: bool,
) -> None:
    """Rank a keyword group's recommendations and flag conflicts."""
    try:
        metric_list = load_keyword_metrics(metrics)
        volume_map = load_search_volumes(volumes or metrics)
        checklist_map = load_checklists(checklists)
    except KeywordLoadError as e:
        console.print(f"[red]Input error:[/red] {escape(str(e))}")
        sys.exit(1)

    engine = KeywordIntelligenceEngine()
    result = engine.rank_group(checklist_map, metric_list, volume_map)

    if not conflicts_only:
        table = Table(title="Ranked Recommendations", show_header=True)
        table.add_column("#", justify="right", style="dim")
        table.add_column("Priority", style="cyan")
        table.add_column("Keyword", style="green")
        table.add_column("Value", justify="right")
        table.add_column("Category")
        table.add_column("Page")
        table.add_column("Task")

        for index, item in enumerate(result.ranked_items, start=1):
            task_text = escape(item.task.task)
            if not item.is_primary:
                task_text = f"[strike dim]{task_text}[/strike dim]"
            table.add_row(
                str(index),
                item.task.priority.value,
                escape(item.keyword),
                str(item.keyword_value),
                escape(item.task.category),
                escape(item.task.page),
                task_text,
            )
        console.print(table)

    if result.conflicts:
        console.print(f"\n[yellow]{len(result.conflicts)} conflicting recommendation group(s) detected[/yellow]")
        for group in result.conflicts:
            lines = [
                f"{'[green]Primary[/green]' if item.is_primary else '[yellow]Conflict[/yellow]'} "
                f"{escape(item.keyword)} ({item.keyword_value}): {escape(item.task.task)}"
                for item in group.items
            ]
            console.print(Panel("\n".join(lines), title=escape(f"{group.page} [{group.category}]"), border_style="yellow"))
    else:
        console.print("\n[green]No conflicting recommendations.[/green]")

    if ctx.obj.get("verbose"):
        console.print(
            f"\n[dim]{len(result.primary_items)} primary, "
            f"{len(result.deprioritized_items)} deprioritized[/dim]"
        )


@main.command()
@click.argument("keyword")
@click.argument("intent", callback=_parse_intent)
@click.option(
    "--store",
    type=click.Path(path_type=Path),
    required=True,
    help="Override store (JSON). Created if missing.",
)
@click.option(
    "--metrics", "-m",
    type=click.Path(exists=True, path_type=Path),
    help="Keyword metrics file listing every site keyword, for propagation.",
)
def override(keyword: str, intent: Intent, store: Path, metrics: Optional[Path]) -> None:
    """Record an intent override and propagate it to similar keywords."""
    try:
        site_keywords = [m.keyword for m in load_keyword_metrics(metrics)] if metrics else []
        engine = KeywordIntelligenceEngine(override_store=load_override_store(store))
        result = engine.record_override(keyword, intent, site_keywords)
        save_override_store(result.store, store)
    except KeywordLoadError as e:
        console.print(f"[red]Input error:[/red] {escape(str(e))}")
        sys.exit(1)

    console.print(f"[green]{escape(keyword)}[/green] -> [cyan]{intent.value}[/cyan]")
    if result.affected:
        table = Table(title="Propagated Overrides", show_header=True)
        table.add_column("Keyword", style="green")
        table.add_column("Intent", style="cyan")
        for affected_keyword, affected_intent in result.affected.items():
            table.add_row(escape(affected_keyword), affected_intent.value)
        console.print(table)
    else:
        console.print("[dim]No similar keywords updated.[/dim]")
    console.print(f"\n[bold green]Saved[/bold green] override store to: {escape(str(store))}")


def run_cli() -> None:
    """Entry point for the CLI."""
    main()


if __name__ == "__main__":
    run_cli()
