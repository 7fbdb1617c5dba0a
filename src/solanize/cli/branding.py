"""Solanize console branding and outcome rendering."""

from __future__ import annotations

import os
from collections.abc import Iterable
from typing import TYPE_CHECKING

from rich import box
from rich.console import Console
from rich.panel import Panel
from rich.text import Text
from rich.theme import Theme

if TYPE_CHECKING:  # pragma: no cover
    from solanize.cli.types import Outcome

SOLANIZE_THEME = Theme(
    {
        # Banner & Branding
        "solanize.banner.primary": "bold #9945FF",
        "solanize.banner.secondary": "bold #14F195",
        "solanize.prompt": "bold #A855F7",

        # Semantic States
        "solanize.success.border": "#14F195",
        "solanize.success.text": "#E6FFFA",
        "solanize.success.header": "bold #14F195",

        "solanize.warning.border": "#FBBF24",
        "solanize.warning.text": "#FEF3C7",

        "solanize.error.border": "#FB7185",
        "solanize.error.text": "#FEE2E2",
        "solanize.error.header": "bold #FB7185",

        # Menu
        "solanize.menu.index": "bold #38BDF8",
        "solanize.menu.label": "#E6FFFA",
        "solanize.text.dim": "dim #64748B",
    }
)

BANNER_LINES: tuple[str, ...] = (
    "[#9945FF] ___  ___  _      _   _  _ ___ _______ ",
    "[#6E8CFF]/ __|/ _ \\| |    /_\\ | \\| |_ _|_  / __|",
    "[#3CDCE1]\\__ \\ (_) | |__ / _ \\| .` || | / /| _| ",
    "[#14F195]|___/\\___/|____/_/ \\_\\_|\\_|___/___|___|",
)


def themed_console(**kwargs: object) -> Console:
    """Return a Console configured with the Solanize theme."""
    return Console(theme=SOLANIZE_THEME, **kwargs)


def banner_lines() -> Iterable[Text]:
    for line in BANNER_LINES:
        yield Text.from_markup(line)


def render_banner(console: Console, *, network: str | None = None) -> None:
    """Render the Solanize banner unless SOLANIZE_DISABLE_BANNER is set."""
    if os.environ.get("SOLANIZE_DISABLE_BANNER"):
        return
    for line in banner_lines():
        console.print(line, overflow="ignore", crop=False)
    if network:
        console.print(f"[solanize.text.dim]Network: {network}[/]")
    console.print()


def outcome_panel(outcome: Outcome) -> Panel:
    """Wrap an outcome's messages in a success or error panel."""
    if outcome.ok:
        border_style = "solanize.success.border"
        title = "[solanize.success.header]✓ Done[/]"
        text_style = "solanize.success.text"
    else:
        border_style = "solanize.error.border"
        title = f"[solanize.error.header]✗ {outcome.error.label}[/]"
        text_style = "solanize.error.text"
    return Panel(
        Text("\n".join(outcome.messages), style=text_style),
        title=title,
        title_align="left",
        border_style=border_style,
        box=box.ROUNDED,
        padding=(0, 1),
        expand=False,
    )


def render_outcome(console: Console, outcome: Outcome) -> None:
    if outcome.messages:
        console.print(outcome_panel(outcome))
    if outcome.table is not None:
        console.print(outcome.table)


__all__ = ["SOLANIZE_THEME", "outcome_panel", "render_banner", "render_outcome", "themed_console"]
