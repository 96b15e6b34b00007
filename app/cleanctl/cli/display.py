"""Shared Rich display functions for cleanup plans and results."""

from rich.markup import escape
from rich.table import Table

from cleanctl.core.orchestrator import ItemReport, ItemStatus, RunReport
from cleanctl.models.catalog import CleanupItem, WalkMode
from cleanctl.utils.formatting import console, print_success, print_warning

_STATUS_STYLES: dict[ItemStatus, str] = {
    ItemStatus.CLEANED: "success",
    ItemStatus.NOTHING: "muted",
    ItemStatus.SKIPPED: "skipped",
    ItemStatus.REPORTED: "info",
    ItemStatus.FAILED: "error",
}


def describe_target_count(item: CleanupItem) -> str:
    """Describe the targets of an item for plan tables."""
    if not item.targets:
        return item.kind.value.replace("_", " ")
    modes = {t.mode for t in item.targets}
    mode = "empty" if modes == {WalkMode.EMPTY} else "pattern"
    return f"{len(item.targets)} location(s), {mode}"


def create_plan_table(items: list[CleanupItem]) -> Table:
    """Create a table of the items a run will process.

    Args:
        items: Enabled items in processing order.

    Returns:
        Rich Table listing each item and its scope.
    """
    table = Table(
        title="Planned Cleanup",
        show_header=True,
        header_style="bold_header",
        border_style="border",
    )
    table.add_column("Item", no_wrap=True)
    table.add_column("Category", style="muted")
    table.add_column("Scope", style="muted")

    for item in items:
        table.add_row(
            f"[text]{escape(item.label)}[/]",
            item.category.value,
            describe_target_count(item),
        )
    return table


def format_item_row(report: ItemReport) -> tuple[str, str, str, str, str, str]:
    """Format an item report as a result table row.

    Args:
        report: Report of one catalog item.

    Returns:
        Tuple of (item, status, removed, freed, failed, details) with Rich markup.
    """
    result = report.result
    style = _STATUS_STYLES.get(report.status, "text")
    failed = f"[error]{result.items_failed}[/]" if result.items_failed else "0"

    details = list(report.notes)
    if result.failed_names:
        details.append(f"failed: {result.failed_summary()}")
    if report.error:
        details.append(report.error)

    return (
        f"[text]{escape(report.item.label)}[/]",
        f"[{style}]{report.status.value}[/]",
        str(result.items_removed),
        result.size_human if result.bytes_freed else "-",
        failed,
        escape("; ".join(details)),
    )


def create_results_table(report: RunReport) -> Table:
    """Create a table with one row per processed item.

    Args:
        report: Completed run report.

    Returns:
        Rich Table with the per-item results.
    """
    table = Table(
        title="Cleanup Results",
        show_header=True,
        header_style="bold_header",
        border_style="border",
        row_styles=["", "on grey7"],
    )
    table.add_column("Item", no_wrap=True)
    table.add_column("Status", no_wrap=True)
    table.add_column("Removed", style="removed", justify="right")
    table.add_column("Freed", style="info", justify="right")
    table.add_column("Failed", justify="right")
    table.add_column("Details", style="muted", overflow="fold")

    for item_report in report.items:
        table.add_row(*format_item_row(item_report))
    return table


def print_run_summary(report: RunReport) -> None:
    """Print the aggregate of a run.

    "Nothing found" and "everything blocked" are reported differently.
    """
    result = report.result
    if report.error:
        print_warning(f"Run aborted: {report.error}")

    if result.items_failed:
        print_warning(
            f"Removed {result.items_removed} item(s), freed {result.size_human}; "
            f"{result.items_failed} could not be removed"
        )
    elif result.items_removed:
        print_success(f"Removed {result.items_removed} item(s), freed {result.size_human}.")
    else:
        console.print("[muted]Nothing to clean.[/]")

    if result.items_skipped:
        console.print(f"[muted]{result.items_skipped} protected path(s) left untouched.[/]")
