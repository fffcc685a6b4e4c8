"""
Rendering functions for hashrarity output.

This module handles all pretty-printing and table formatting.
Services return data, this module makes it human-readable.
"""

from rich.table import Table
from rich.console import Console
from rich import box
from typing import List, Dict, Any, Optional

from .domain import RarityThresholds, RarityTier, Summary

console = Console()

TIER_STYLES = {
    RarityTier.COMMON: "white",
    RarityTier.UNCOMMON: "green",
    RarityTier.RARE: "bold magenta",
}


def _tier_style(tier_name: str) -> str:
    try:
        return TIER_STYLES[RarityTier.parse(tier_name)]
    except ValueError:
        return ""


def render_summary_table(
    summary: Summary,
    thresholds: RarityThresholds,
    elapsed: Optional[float] = None,
    enumeration: Optional[Dict[str, int]] = None,
    partial: bool = False,
) -> None:
    """
    Render tier counts next to what a uniform hash distribution predicts.

    Args:
        summary: Finalized (or partial) summary
        thresholds: Tier boundaries used for the scan
        elapsed: Wall-clock seconds the scan took
        enumeration: Loose/packed counters from the enumerator
        partial: Whether the scan stopped early
    """
    title = "Object Hash Rarity" + (" (partial)" if partial else "")
    table = Table(
        title=title,
        box=box.ROUNDED,
        show_header=True,
        header_style="bold magenta"
    )

    table.add_column("Tier", style="cyan")
    table.add_column("Zero bits", style="dim")
    table.add_column("Objects", justify="right")
    table.add_column("Share", justify="right")
    table.add_column("Expected", justify="right", style="dim")

    for tier, count in summary.counts().items():
        share = f"{count / summary.total:.4%}" if summary.total else "-"
        expected = summary.total * thresholds.expected_fraction(tier)
        table.add_row(
            f"[{TIER_STYLES[tier]}]{tier.label}[/]",
            thresholds.bit_range(tier),
            str(count),
            share,
            f"{expected:.2f}",
        )

    caption = [f"{summary.total} objects"]
    if enumeration:
        caption.append(f"{enumeration['loose']} loose, {enumeration['packed']} packed")
    if summary.rarest is not None:
        caption.append(f"rarest {summary.rarest.hex[:16]}... ({summary.rarest_zero_bits} zero bits)")
    if elapsed is not None:
        caption.append(f"{elapsed:.2f}s")
    table.caption = " · ".join(caption)

    console.print(table)


def render_objects_table(rows: List[Dict[str, Any]]) -> None:
    """Render one row per object: hash, zero bits, tier and kind if known."""
    if not rows:
        console.print("[yellow]No objects matched.[/yellow]")
        return

    table = Table(
        title="Objects",
        box=box.ROUNDED,
        show_header=True,
        header_style="bold magenta"
    )
    show_kind = any('kind' in row for row in rows)
    table.add_column("Hash", style="cyan", no_wrap=True)
    if show_kind:
        table.add_column("Kind")
    table.add_column("Zero bits", justify="right")
    table.add_column("Tier")

    for row in rows:
        cells = [row['hash']]
        if show_kind:
            cells.append(row.get('kind', ''))
        cells.append(str(row['zero_bits']))
        cells.append(f"[{_tier_style(row['tier'])}]{row['tier']}[/]")
        table.add_row(*cells)

    console.print(table)


def render_commits_table(rows: List[Dict[str, Any]]) -> None:
    """Render commits with their rarity, as the log view shows them."""
    if not rows:
        console.print("[yellow]No commits found.[/yellow]")
        return

    table = Table(
        title="Commit Hash Rarity",
        box=box.ROUNDED,
        show_header=True,
        header_style="bold magenta"
    )
    table.add_column("Author", style="green")
    table.add_column("Date", style="dim")
    table.add_column("Hash", style="cyan", no_wrap=True)
    table.add_column("Zero bits", justify="right")
    table.add_column("Rarity")

    for row in rows:
        table.add_row(
            row['author'],
            row['date'],
            row['hash'],
            str(row['zero_bits']),
            f"[{_tier_style(row['tier'])}]{row['tier']}[/]",
        )

    console.print(table)
