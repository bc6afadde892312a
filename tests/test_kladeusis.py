"""Tests for the reporter and the command-line application."""

import io
import signal

import pytest
from rich.console import Console

import kladeusis
from conftest import make_tree
from console_ui import ConsoleUI
from kladeusis import Kladeusis, build_parser, render_table, severity_style
from kladeusis_config import ConfigManager
from tree_scan import GroupReport, GroupStats, ScanResult


@pytest.fixture(autouse=True)
def no_signal_handlers(monkeypatch):
    monkeypatch.setattr(kladeusis.signal, "signal", lambda *args: None)


@pytest.fixture
def ui():
    return ConsoleUI(console=Console(file=io.StringIO(), record=True, width=120, highlight=False))


def _app(ui, tmp_path, *argv):
    args = build_parser().parse_args(list(argv))
    return Kladeusis(args, ui=ui, config_manager=ConfigManager(tmp_path / "cfg"))


def _result(*groups):
    return ScanResult(root_path="/nm", groups=[GroupReport(label, stats) for label, stats in groups])


@pytest.mark.parametrize(
    "size,style",
    [(0, "green"), (2999, "green"), (3000, "green"), (3001, "yellow"), (10000, "yellow"), (10001, "red")],
)
def test_severity_tiers(size, style):
    assert severity_style(size) == style


def test_empty_groups_are_suppressed():
    table = render_table(_result(("alpha", GroupStats(500, 0, 3)), ("beta", GroupStats(0, 0, 0))))
    labels = list(table.columns[0].cells)
    assert labels == ["alpha", "", "", "Total"]


def test_total_row_sums_groups():
    table = render_table(_result(("a", GroupStats(2000, 1, 0)), ("b", GroupStats(2000, 0, 2))))
    assert list(table.columns[0].cells)[-1] == "Total"
    total_bytes = list(table.columns[1].cells)[-1]
    assert total_bytes.plain == "4 kB"
    assert total_bytes.style == "yellow"


def test_zero_counts_are_blank():
    table = render_table(_result(("a", GroupStats(500, 0, 3))))
    assert list(table.columns[2].cells)[0] == ""
    files = list(table.columns[3].cells)[0]
    assert files.plain == "3"
    assert files.style == "blue"


def test_nothing_to_prune_has_no_total_row():
    table = render_table(_result(("a", GroupStats(0, 0, 0))))
    assert "Total" not in list(table.columns[0].cells)


def test_run_reports_and_records_history(ui, tmp_path):
    root = make_tree(
        tmp_path / "node_modules",
        {"left-pad": {"README.md": b"x" * 600, "index.js": "1"}, "noop": {"index.js": "2"}},
    )
    app = _app(ui, tmp_path, str(root))
    app.run()

    out = ui.console.export_text()
    assert "left-pad" in out
    assert "600 B" in out
    assert "Total" in out
    assert "noop" not in out

    config = ConfigManager(tmp_path / "cfg").load()
    assert config.total_runs == 1
    assert config.last_total_bytes == 600
    assert config.last_root == str(root.resolve())


def test_run_no_history(ui, tmp_path):
    root = make_tree(tmp_path / "node_modules", {"a": {"LICENSE": "mit"}})
    _app(ui, tmp_path, str(root), "--no-history").run()
    assert not (tmp_path / "cfg" / "config.json").exists()


def test_run_details_lists_matches(ui, tmp_path):
    root = make_tree(tmp_path / "node_modules", {"a": {"test": {"x.js": "1"}, "LICENSE": "mit"}})
    _app(ui, tmp_path, str(root), "--details", "--no-history").run()

    out = ui.console.export_text()
    assert "── a ──" in out
    assert "a/test/" in out or "a\\test\\" in out
    assert "LICENSE" in out


def test_run_rejects_missing_root(ui, tmp_path):
    app = _app(ui, tmp_path, str(tmp_path / "missing"))
    with pytest.raises(SystemExit) as exc:
        app.run()
    assert exc.value.code == 1
    assert "Not a directory" in ui.console.export_text()


def test_run_exits_on_filesystem_error(ui, tmp_path, monkeypatch):
    root = make_tree(tmp_path / "node_modules", {"a": {"LICENSE": "mit"}})

    def broken_scan(*args, **kwargs):
        raise PermissionError(13, "Permission denied", str(root / "a"))

    monkeypatch.setattr(kladeusis, "scan_root", broken_scan)
    with pytest.raises(SystemExit) as exc:
        _app(ui, tmp_path, str(root)).run()
    assert exc.value.code == 1
    out = ui.console.export_text()
    assert "Scan failed" in out
    assert "Permission denied" in out


def test_show_history(ui, tmp_path):
    app = _app(ui, tmp_path, "--show-history")
    app.run()
    assert "No runs recorded yet." in ui.console.export_text()

    manager = ConfigManager(tmp_path / "cfg")
    config = manager.load()
    config.record_run("/nm", 1500)
    manager.save(config)

    app.run()
    out = ui.console.export_text()
    assert "1.5 kB" in out
    assert "Total runs: 1" in out


def test_second_interrupt_forces_exit(ui, tmp_path):
    app = _app(ui, tmp_path)
    app._signal_handler(signal.SIGINT, None)
    assert app._shutdown_requested
    with pytest.raises(SystemExit):
        app._signal_handler(signal.SIGINT, None)
