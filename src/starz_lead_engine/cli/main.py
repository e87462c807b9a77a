"""Main CLI entry point for the starz command."""

import json
import logging
from collections import Counter
from datetime import datetime, timezone
from pathlib import Path
from typing import List, Optional

import click
from rich.console import Console
from rich.panel import Panel
from rich.table import Table

from ..connectors import ImportResult, load_leads
from ..core.config import ScoringConfigManager, WEIGHTED_FACTORS
from ..core.models import Lead, parse_timestamp
from ..core.scorer import LeadScorer

console = Console()
err_console = Console(stderr=True)

PRIORITY_COLORS = {"urgent": "red", "high": "yellow", "medium": "blue", "low": "dim"}
URGENCY_COLORS = {"critical": "bold red", "high": "yellow", "medium": "blue", "low": "dim"}


def get_manager(ctx: click.Context) -> ScoringConfigManager:
    """Get the config manager for this invocation."""
    config_path = ctx.obj.get("config_path") if ctx.obj else None
    return ScoringConfigManager(Path(config_path) if config_path else None)


def get_scorer(ctx: click.Context) -> LeadScorer:
    """Get a scorer using the saved configuration."""
    manager = get_manager(ctx)
    for problem in manager.config.validate():
        err_console.print(f"[yellow]Config warning: {problem}[/yellow]")
    return LeadScorer(manager.config)


def read_leads(path: str) -> List[Lead]:
    """Load leads from a file, aborting on fatal import errors."""
    try:
        result: ImportResult = load_leads(Path(path))
    except ValueError as e:
        raise click.ClickException(str(e))

    for warning in result.warnings[:5]:
        err_console.print(f"[yellow]⚠ {warning}[/yellow]")
    if len(result.warnings) > 5:
        err_console.print(f"[dim]... and {len(result.warnings) - 5} more warnings[/dim]")

    if not result.success:
        raise click.ClickException("; ".join(result.errors))

    return result.leads


def parse_now(value: Optional[str]) -> datetime:
    """Resolve the --now option to the instant leads are scored at."""
    if not value:
        return datetime.now(timezone.utc)
    try:
        return parse_timestamp(value)
    except ValueError:
        raise click.BadParameter(f"Not an ISO-8601 timestamp: {value}", param_hint="--now")


@click.group()
@click.version_option(version="1.0.0", prog_name="starz")
@click.option("--config", "config_path", type=click.Path(dir_okay=False),
              help="Custom scoring config path")
@click.option("--verbose", "-v", is_flag=True, help="Show debug logging")
@click.pass_context
def cli(ctx: click.Context, config_path: Optional[str], verbose: bool):
    """Starz Lead Engine - prioritize sales leads by value and urgency.

    \b
    Quick Start:
      starz score contacts.csv                 # Rank leads by priority
      starz explain contacts.json 42           # Why lead 42 scored as it did
      starz summary contacts.csv               # Counts by priority/urgency
      starz config show                        # Current weights and thresholds
    """
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
    )
    ctx.ensure_object(dict)
    ctx.obj["config_path"] = config_path


# ============================================================================
# SCORING COMMANDS
# ============================================================================

@cli.command()
@click.argument("path", type=click.Path(exists=True, dir_okay=False))
@click.option("--format", "-f", "output_format", type=click.Choice(["table", "json"]), default="table",
              help="Output format")
@click.option("--limit", "-n", default=20, help="Number of leads to show")
@click.option("--priority", "-p", type=click.Choice(["urgent", "high", "medium", "low"]),
              help="Filter by priority level")
@click.option("--now", "now_value", help="Score as of this ISO-8601 time")
@click.pass_context
def score(ctx: click.Context, path: str, output_format: str, limit: int,
          priority: Optional[str], now_value: Optional[str]):
    """Score leads from a CSV or JSON file and rank them by priority."""
    scorer = get_scorer(ctx)
    now = parse_now(now_value)
    ranked = scorer.rank_leads(read_leads(path), now=now)

    if priority:
        ranked = [s for s in ranked if s.result.priority_level == priority]
    ranked = ranked[:limit]

    if output_format == "json":
        click.echo(json.dumps([s.to_dict() for s in ranked], indent=2, ensure_ascii=False))
        return

    if not ranked:
        console.print("[yellow]No leads found matching criteria.[/yellow]")
        return

    table = Table(title=f"Leads ({len(ranked)})" + (f" - {priority}" if priority else ""))
    table.add_column("ID", justify="right", style="dim")
    table.add_column("Score", justify="right", style="bold")
    table.add_column("Priority", justify="center")
    table.add_column("Urgency", justify="center")
    table.add_column("Name", style="cyan", max_width=25)
    table.add_column("Contact", max_width=25)
    table.add_column("Industry")
    table.add_column("Next Step", max_width=45)

    for scored in ranked:
        lead, result = scored.lead, scored.result
        priority_style = PRIORITY_COLORS.get(result.priority_level, "")
        urgency_style = URGENCY_COLORS.get(result.urgency_level, "")

        table.add_row(
            str(lead.id) if lead.id is not None else "-",
            str(result.ai_score),
            f"[{priority_style}]{result.priority_level}[/{priority_style}]",
            f"[{urgency_style}]{result.urgency_level}[/{urgency_style}]",
            lead.display_name[:25],
            lead.contact_info[:25],
            result.industry,
            result.recommendations[0],
        )

    console.print(table)


@cli.command()
@click.argument("path", type=click.Path(exists=True, dir_okay=False))
@click.argument("lead_id", type=int)
@click.option("--now", "now_value", help="Score as of this ISO-8601 time")
@click.pass_context
def explain(ctx: click.Context, path: str, lead_id: int, now_value: Optional[str]):
    """Show the factor breakdown and recommendations for one lead."""
    scorer = get_scorer(ctx)
    lead = next((l for l in read_leads(path) if l.id == lead_id), None)

    if not lead:
        raise click.ClickException(f"Lead #{lead_id} not found in {path}")

    result = scorer.score_lead(lead, now=parse_now(now_value))

    info_lines = [
        f"[bold]Name:[/bold] {lead.display_name}",
        f"[bold]Company:[/bold] {lead.company or 'N/A'}",
        f"[bold]Position:[/bold] {lead.position or 'N/A'}",
        f"[bold]Contact:[/bold] {lead.contact_info}",
        "",
        scorer.explain_score(result),
    ]

    console.print(Panel("\n".join(info_lines), title=f"Lead #{lead_id}: {lead.display_name}"))


@cli.command()
@click.argument("path", type=click.Path(exists=True, dir_okay=False))
@click.option("--now", "now_value", help="Score as of this ISO-8601 time")
@click.pass_context
def summary(ctx: click.Context, path: str, now_value: Optional[str]):
    """Show lead counts by priority and urgency level."""
    scorer = get_scorer(ctx)
    ranked = scorer.rank_leads(read_leads(path), now=parse_now(now_value))

    if not ranked:
        console.print("[yellow]No leads to summarize.[/yellow]")
        return

    by_priority = Counter(s.result.priority_level for s in ranked)
    by_urgency = Counter(s.result.urgency_level for s in ranked)
    scores = [s.ai_score for s in ranked]

    console.print(Panel.fit(
        f"[bold]Total Leads:[/bold] {len(ranked)}\n\n"
        f"[bold]By Priority:[/bold]\n"
        f"  🔥 Urgent: [red]{by_priority.get('urgent', 0)}[/red]\n"
        f"  📞 High:   [yellow]{by_priority.get('high', 0)}[/yellow]\n"
        f"  📅 Medium: [blue]{by_priority.get('medium', 0)}[/blue]\n"
        f"  📝 Low:    [dim]{by_priority.get('low', 0)}[/dim]\n\n"
        f"[bold]By Urgency:[/bold]\n"
        f"  Critical: {by_urgency.get('critical', 0)}\n"
        f"  High:     {by_urgency.get('high', 0)}\n"
        f"  Medium:   {by_urgency.get('medium', 0)}\n"
        f"  Low:      {by_urgency.get('low', 0)}\n\n"
        f"[bold]Score Stats:[/bold]\n"
        f"  Average: {sum(scores) / len(scores):.1f}\n"
        f"  Max: {max(scores)}\n"
        f"  Min: {min(scores)}",
        title="📊 Lead Summary"
    ))


# ============================================================================
# CONFIGURATION
# ============================================================================

@cli.group()
def config():
    """View and adjust scoring weights and thresholds."""
    pass


@config.command("show")
@click.pass_context
def config_show(ctx: click.Context):
    """Show the current scoring configuration."""
    manager = get_manager(ctx)
    cfg = manager.config

    table = Table(title="Composite Weights")
    table.add_column("Factor")
    table.add_column("Weight", justify="right")
    for factor in WEIGHTED_FACTORS:
        table.add_row(factor, f"{cfg.weight(factor):.2f}")
    console.print(table)

    console.print(Panel.fit(
        f"[bold]Priority:[/bold] urgent ≥ {cfg.urgent_threshold}, "
        f"high ≥ {cfg.high_threshold}, medium ≥ {cfg.medium_threshold}\n"
        f"[bold]Urgency:[/bold] critical ≥ {cfg.critical_score} (timeline ≥ {cfg.critical_timeline}), "
        f"high ≥ {cfg.high_urgency_score} (timeline ≥ {cfg.high_urgency_timeline}), "
        f"medium ≥ {cfg.medium_urgency_score}\n"
        f"[bold]Urgency multiplier cap:[/bold] {cfg.urgency_multiplier_cap}\n\n"
        f"[dim]Config file: {manager.config_path}[/dim]",
        title="Thresholds"
    ))

    for problem in cfg.validate():
        console.print(f"[yellow]⚠ {problem}[/yellow]")


@config.command("set-weight")
@click.argument("factor", type=click.Choice(list(WEIGHTED_FACTORS)))
@click.argument("weight", type=float)
@click.pass_context
def config_set_weight(ctx: click.Context, factor: str, weight: float):
    """Set the composite weight of one factor."""
    manager = get_manager(ctx)
    try:
        manager.set_weight(factor, weight)
    except ValueError as e:
        raise click.ClickException(str(e))

    console.print(f"[green]✓ {factor} weight set to {weight:.2f}[/green]")
    for problem in manager.config.validate():
        console.print(f"[yellow]⚠ {problem}[/yellow]")


@config.command("set-priority")
@click.argument("urgent", type=int)
@click.argument("high", type=int)
@click.argument("medium", type=int)
@click.pass_context
def config_set_priority(ctx: click.Context, urgent: int, high: int, medium: int):
    """Set the priority thresholds (URGENT HIGH MEDIUM)."""
    manager = get_manager(ctx)
    try:
        manager.update_priority_thresholds(urgent, high, medium)
    except ValueError as e:
        raise click.ClickException(str(e))

    console.print(f"[green]✓ Priority thresholds set to {urgent}/{high}/{medium}[/green]")


@config.command("reset")
@click.confirmation_option(prompt="Restore default weights and thresholds?")
@click.pass_context
def config_reset(ctx: click.Context):
    """Restore the default configuration."""
    manager = get_manager(ctx)
    manager.reset()
    console.print("[green]✓ Scoring configuration reset to defaults[/green]")


if __name__ == "__main__":
    cli()
