"""
SvcSeek Report Writer

Renders matched services as a table on the console and into the results file,
appends unreachable-host notices to the errors file, and prints the run
summary.
"""

import os
from datetime import timedelta
from typing import List, Optional

from rich import box
from rich.console import Console
from rich.table import Table
from rich.text import Text

from commands.services.models import ServiceRecord, UnreachableNotice
from shared.logging_config import get_logger

logger = get_logger(__name__)

COLUMNS = ("SystemName", "Name", "DisplayName", "StartName")
NO_MATCHES_LINE = "No matching services found"


def format_elapsed(elapsed: timedelta) -> str:
    """Render a duration as days, hours, minutes and seconds.milliseconds."""
    total_ms = max(0, int(round(elapsed.total_seconds() * 1000)))
    days, remainder = divmod(total_ms, 86_400_000)
    hours, remainder = divmod(remainder, 3_600_000)
    minutes, remainder = divmod(remainder, 60_000)
    seconds, milliseconds = divmod(remainder, 1000)
    return f"{days} days, {hours} hours, {minutes} minutes, {seconds}.{milliseconds:03d} seconds"


def build_table(records: List[ServiceRecord], title: Optional[str] = None,
                table_box=box.SIMPLE_HEAD) -> Table:
    table = Table(title=title, box=table_box, show_lines=False, header_style="bold")
    for column in COLUMNS:
        table.add_column(column, overflow="fold")
    for record in records:
        table.add_row(*(Text(value) for value in (
            record.host_name, record.service_name, record.display_name, record.start_name
        )))
    return table


class ReportWriter:
    """
    Owns the two report files in the output folder.

    The errors file is opened in append mode for every notice so it can be
    inspected while a run is in progress and keeps entries from earlier runs.
    """

    def __init__(self, config, output, folder: str, console: Optional[Console] = None):
        self.config = config
        self.output = output
        self.folder = folder
        self.results_path = os.path.join(folder, config.get_results_filename())
        self.errors_path = os.path.join(folder, config.get_errors_filename())
        self.console = console or Console(
            no_color=getattr(output, 'no_colors', False),
            highlight=False
        )

    def append_unreachable(self, notice: UnreachableNotice) -> None:
        with open(self.errors_path, 'a', encoding='utf-8') as f:
            f.write(notice.format_line() + "\n")

    def write_results(self, records: List[ServiceRecord]) -> str:
        """Write the match table to the results file, replacing any earlier copy."""
        width = self.config.get_results_width()
        with open(self.results_path, 'w', encoding='utf-8') as f:
            file_console = Console(
                file=f,
                width=width,
                no_color=True,
                color_system=None,
                force_terminal=False,
                highlight=False,
                emoji=False
            )
            # No matches still leaves the header row
            file_console.print(build_table(records, table_box=box.ASCII2))
        logger.debug("Wrote %d records to %s", len(records), self.results_path)
        return self.results_path

    def print_results(self, records: List[ServiceRecord]) -> None:
        if self.output.quiet:
            return
        if not records:
            self.output.warning(NO_MATCHES_LINE)
            return
        self.console.print(build_table(records, title=f"Matching services ({len(records)})"))

    def print_run_summary(self, summary) -> None:
        """Console-only rollup: counts, file locations and timing."""
        self.output.header("SvcSeek Audit Summary")
        self.output.print_if_not_quiet(f"Account filter:      {summary.filter_description}")
        self.output.print_if_not_quiet(f"Host source:         {summary.host_source}")
        self.output.print_if_not_quiet(f"Hosts resolved:      {summary.hosts_resolved}")
        self.output.print_if_not_quiet(f"Hosts online:        {summary.hosts_reachable}")
        self.output.print_if_not_quiet(f"Hosts not online:    {summary.hosts_unreachable}")
        if summary.hosts_query_failed:
            self.output.print_if_not_quiet(f"Query failures:      {summary.hosts_query_failed}")
        self.output.print_if_not_quiet(f"Hosts with matches:  {summary.hosts_matched}")
        self.output.print_if_not_quiet(f"Matching services:   {summary.matches}")
        self.output.print_if_not_quiet(f"Results file:        {summary.results_path}")
        self.output.print_if_not_quiet(f"Errors file:         {summary.errors_path}")
        self.output.print_if_not_quiet(f"Start time:          {summary.started_at:%Y-%m-%d %H:%M:%S}")
        self.output.print_if_not_quiet(f"End time:            {summary.finished_at:%Y-%m-%d %H:%M:%S}")
        self.output.print_if_not_quiet(
            f"Elapsed:             {format_elapsed(summary.finished_at - summary.started_at)}"
        )
