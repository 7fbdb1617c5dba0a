"""Configuration and activity log commands."""

from __future__ import annotations

from rich.table import Table

from solanize.cli.types import CommandRouter, Outcome, Services, ShowConfig, ShowLogs
from solanize.core.config import config_summary
from solanize.core.errors import ValidationError
from solanize.core.logs import VALID_CATEGORIES


def register(router: CommandRouter) -> None:
    """Register the settings commands."""
    router.register(ShowConfig, handle_show_config, "Show the active configuration")
    router.register(ShowLogs, handle_show_logs, "Show recent activity")


def handle_show_config(command: ShowConfig, services: Services) -> Outcome:
    rows = config_summary(services.config)
    table = Table(title="Current configuration", show_header=False)
    table.add_column("Setting", style="bold")
    table.add_column("Value")
    for key, value in rows:
        table.add_row(key, value)
    return Outcome.success(["Current configuration:"], payload=dict(rows), table=table)


def handle_show_logs(command: ShowLogs, services: Services) -> Outcome:
    category = command.category_filter
    if category is not None:
        category = category.lower()
        if category not in VALID_CATEGORIES:
            allowed = ", ".join(sorted(VALID_CATEGORIES))
            raise ValidationError(f"Unknown log category '{category}'. Choose from: {allowed}.")
    entries = services.log_buffer.recent(category=category, limit=command.limit)
    if not entries:
        if category:
            return Outcome.success([f"No '{category}' log entries yet."])
        return Outcome.success(["No log entries recorded yet."])

    table = Table(title="Recent activity")
    table.add_column("Timestamp")
    table.add_column("Category")
    table.add_column("Severity")
    table.add_column("Message")
    for entry in entries:
        table.add_row(
            entry.timestamp.strftime("%Y-%m-%d %H:%M:%S"),
            entry.category,
            entry.severity.upper(),
            entry.message,
        )
    return Outcome.success(
        [f"{len(entries)} recent log entr{'y' if len(entries) == 1 else 'ies'}."],
        payload={"entries": [entry.message for entry in entries]},
        table=table,
    )


__all__ = ["register"]
