#!/usr/bin/env python3
"""
Kladeusis — Ancient Greek κλάδευσις (pruning)

Reports how much of a node_modules tree is prunable: tests, docs, CI
config, licenses and other files a package does not need at runtime.
Each top-level package gets one row with the bytes, directories and
files that could be removed, followed by a grand total. Nothing is
deleted.

Usage:
    kladeusis                          # Scan ./node_modules
    kladeusis <path>                   # Scan another dependency directory
    kladeusis <path> --details         # Also list every matched path
    kladeusis --show-history           # Show the last recorded run
"""

import argparse
import os
import signal
import sys
from pathlib import Path
from typing import Optional

from rich.table import Table
from rich.text import Text

from auxiliary import format_bytes, format_path_for_display
from console_ui import ConsoleUI
from kladeusis_config import ConfigManager
from tree_scan import GroupStats, ScanResult, SizeCache, scan_root

DEFAULT_ROOT = os.path.join(".", "node_modules")

SIZE_3_KB = 3000
SIZE_10_KB = 10000

# ---------------------------------------------------------------------------
# Reporting
# ---------------------------------------------------------------------------


def severity_style(size: int) -> str:
    """Colour for a byte total: green, then yellow above 3 kB, red above 10 kB"""
    if size > SIZE_10_KB:
        return "red"
    if size > SIZE_3_KB:
        return "yellow"
    return "green"


def _count_cell(count: int):
    return Text(str(count), style="blue") if count > 0 else ""


def _add_stats_row(table: Table, label: str, stats: GroupStats):
    # Groups with nothing to prune get no row
    if stats.total_bytes <= 0:
        return
    table.add_row(
        label,
        Text(format_bytes(stats.total_bytes), style=severity_style(stats.total_bytes)),
        _count_cell(stats.dir_count),
        _count_cell(stats.file_count),
    )


def render_table(result: ScanResult) -> Table:
    """Build the per-module table with a trailing Total row"""
    table = Table(box=None, show_edge=False, pad_edge=False)
    table.add_column("Module", style="white")
    table.add_column("Bytes pruned", justify="right")
    table.add_column("dirs pruned", justify="right")
    table.add_column("files pruned", justify="right")

    for group in result.groups:
        _add_stats_row(table, group.label, group.stats)

    table.add_row("", "", "", "")
    table.add_row("", "", "", "")
    _add_stats_row(table, "Total", result.total)
    return table


# ---------------------------------------------------------------------------
# Kladeusis
# ---------------------------------------------------------------------------


class Kladeusis:
    """Main application class for the Kladeusis prune report"""

    def __init__(
        self,
        args: argparse.Namespace,
        ui: Optional[ConsoleUI] = None,
        config_manager: Optional[ConfigManager] = None,
    ):
        self.args = args
        self.ui = ui or ConsoleUI(no_color=getattr(args, "no_color", False))
        self.config_manager = config_manager or ConfigManager()
        self._shutdown_requested = False

    # -- signal handling ----------------------------------------------------

    def _signal_handler(self, signum, frame):
        if self._shutdown_requested:
            sys.exit(1)
        self._shutdown_requested = True
        self.ui.print_warning("\nShutdown requested... press Ctrl+C again to force quit.")

    def _install_signal_handlers(self):
        signal.signal(signal.SIGINT, self._signal_handler)
        if hasattr(signal, "SIGTERM"):
            signal.signal(signal.SIGTERM, self._signal_handler)

    # -- history --------------------------------------------------------------

    def show_history(self):
        config = self.config_manager.load()
        if not config.last_run:
            self.ui.print_info("No runs recorded yet.")
            return
        self.ui.print_info(f"Last run:   {config.last_run}")
        self.ui.print_info(f"Last root:  {format_path_for_display(config.last_root or '')}")
        self.ui.print_info(f"Prunable:   {format_bytes(config.last_total_bytes)}")
        self.ui.print_info(f"Total runs: {config.total_runs}")

    def _record_run(self, result: ScanResult):
        config = self.config_manager.load()
        config.record_run(result.root_path, result.total.total_bytes)
        self.config_manager.save(config)

    # -- scanning ------------------------------------------------------------

    def scan(self, root: str) -> ScanResult:
        root = str(Path(root).resolve())
        self.ui.print_header("Kladeusis", f"Scanning {format_path_for_display(root)}")

        progress = self.ui.create_activity_progress()
        with progress:
            task = progress.add_task("Scanning...", total=None)
            result = scan_root(
                root,
                on_group=lambda name: progress.update(task, description=f"Scanning {name}..."),
                stop_requested=lambda: self._shutdown_requested,
            )
        return result

    # -- reporting -----------------------------------------------------------

    def report(self, result: ScanResult):
        self.ui.print_table(render_table(result))
        self.ui.console.print()

        if self._shutdown_requested:
            self.ui.print_warning("Scan interrupted; totals cover the packages scanned so far.")
        if result.total.total_bytes == 0:
            self.ui.print_success("Nothing to prune!")
        self.ui.print_info(f"Scanned {len(result.groups)} modules in {result.scan_duration:.1f}s")

    def show_details(self, result: ScanResult):
        """List every matched path under its module"""
        cache = result.cache or SizeCache()
        for group in result.groups:
            if not group.matches:
                continue
            self.ui.console.print()
            self.ui.console.print(f"[bold]── {group.label} ──[/bold]")
            for entry in group.matches:
                rel = os.path.relpath(entry.path, result.root_path)
                suffix = "/" if entry.is_dir else ""
                size = format_bytes(entry.effective_size(cache))
                self.ui.console.print(f"  {rel}{suffix} [dim]({size})[/dim]")

    # -- main entry point ----------------------------------------------------

    def run(self):
        if getattr(self.args, "show_history", False):
            self.show_history()
            return

        path = getattr(self.args, "path", None) or DEFAULT_ROOT
        if not Path(path).is_dir():
            self.ui.print_error(f"Not a directory: {path}")
            sys.exit(1)

        self._install_signal_handlers()
        try:
            result = self.scan(path)
        except OSError as e:
            where = e.filename or path
            self.ui.print_error(f"Scan failed: {where}: {e.strerror or e}")
            sys.exit(1)

        self.report(result)
        if getattr(self.args, "details", False):
            self.show_details(result)

        if not getattr(self.args, "no_history", False) and not self._shutdown_requested:
            self._record_run(result)


# ---------------------------------------------------------------------------
# CLI
# ---------------------------------------------------------------------------


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="kladeusis",
        description="Kladeusis — report prunable files in a node_modules tree",
    )
    parser.add_argument("path", nargs="?", help=f"Dependency directory to scan (default: {DEFAULT_ROOT})")
    parser.add_argument("--details", action="store_true", help="List every matched path per module")
    parser.add_argument("--no-color", action="store_true", help="Disable colored output")
    parser.add_argument("--no-history", action="store_true", help="Do not record this run in ~/.kladeusis")
    parser.add_argument("--show-history", action="store_true", help="Show the last recorded run")
    return parser


def main():
    parser = build_parser()
    args = parser.parse_args()
    app = Kladeusis(args)
    app.run()


if __name__ == "__main__":
    main()
