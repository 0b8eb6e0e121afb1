"""Tests for the command-line interface."""

from __future__ import annotations

import json

import pytest
from click.testing import CliRunner

from devsweep.cli import main


@pytest.fixture
def runner():
    return CliRunner()


class TestScanCommand:
    def test_lists_projects(self, runner, workspace):
        result = runner.invoke(main, ["scan", str(workspace)])
        assert result.exit_code == 0, result.output
        assert "rust-app" in result.output
        assert "web-ui" in result.output
        assert "800.0 KB" in result.output

    def test_json(self, runner, workspace):
        result = runner.invoke(main, ["scan", str(workspace), "--json", "--sort", "size"])
        assert result.exit_code == 0, result.output
        data = json.loads(result.output)
        assert [p["name"] for p in data["projects"]] == ["rust-app", "web-ui"]
        assert data["summary"]["total_bytes"] == 800_000
        assert data["summary"]["per_type"]["rust"] == {"count": 1, "size_bytes": 500_000}

    def test_keep_size_filter(self, runner, workspace):
        result = runner.invoke(main, ["scan", str(workspace), "--json", "-s", "400KB"])
        data = json.loads(result.output)
        assert [p["type"] for p in data["projects"]] == ["rust"]

    def test_type_filter(self, runner, workspace):
        result = runner.invoke(main, ["scan", str(workspace), "--json", "--type", "node"])
        data = json.loads(result.output)
        assert [p["type"] for p in data["projects"]] == ["node"]

    def test_bad_size_is_fatal(self, runner, workspace):
        result = runner.invoke(main, ["scan", str(workspace), "--keep-size", "huge"])
        assert result.exit_code == 1
        assert "Error:" in result.output

    def test_bad_size_fails_before_scanning(self, runner, workspace, monkeypatch):
        def scan(self, root, on_progress=None):
            raise AssertionError("scan should not start")

        monkeypatch.setattr("devsweep.cli.Scanner.scan", scan)
        result = runner.invoke(main, ["clean", str(workspace), "-y", "--keep-size", "huge"])
        assert result.exit_code == 1
        assert "Invalid size" in result.output
        assert (workspace / "rust-app" / "target").exists()

    def test_missing_dir_is_fatal(self, runner, tmp_path):
        result = runner.invoke(main, ["scan", str(tmp_path / "nowhere")])
        assert result.exit_code == 1
        assert "does not exist" in result.output

    def test_config_file_applies(self, runner, workspace, isolate_xdg):
        config = isolate_xdg[0] / "devsweep" / "config.json"
        config.parent.mkdir(parents=True)
        config.write_text(json.dumps({"dir": str(workspace), "project_type": "rust"}))
        result = runner.invoke(main, ["scan", "--json"])
        assert result.exit_code == 0, result.output
        assert [p["name"] for p in json.loads(result.output)["projects"]] == ["rust-app"]


class TestCleanCommand:
    def test_dry_run_touches_nothing(self, runner, workspace):
        result = runner.invoke(main, ["clean", str(workspace), "--dry-run"])
        assert result.exit_code == 0, result.output
        assert "Would free up" in result.output
        assert (workspace / "rust-app" / "target").exists()
        assert (workspace / "web-ui" / "node_modules").exists()

    def test_abort_on_no(self, runner, workspace):
        result = runner.invoke(main, ["clean", str(workspace)], input="n\n")
        assert "Aborted." in result.output
        assert (workspace / "rust-app" / "target").exists()

    def test_yes_permanent(self, runner, workspace):
        result = runner.invoke(main, ["clean", str(workspace), "-y", "--permanent"])
        assert result.exit_code == 0, result.output
        assert "Successfully cleaned" in result.output
        assert "800.0 KB" in result.output
        assert not (workspace / "rust-app" / "target").exists()
        assert not (workspace / "web-ui" / "node_modules").exists()

    def test_select_subset(self, runner, workspace):
        result = runner.invoke(main, ["clean", str(workspace), "--permanent", "--sort", "size"], input="select\n2\n")
        assert result.exit_code == 0, result.output
        assert (workspace / "rust-app" / "target").exists()
        assert not (workspace / "web-ui" / "node_modules").exists()

    def test_interactive_flag(self, runner, workspace):
        result = runner.invoke(main, ["clean", str(workspace), "-i", "--permanent", "--sort", "size"], input="1\n")
        assert result.exit_code == 0, result.output
        assert not (workspace / "rust-app" / "target").exists()
        assert (workspace / "web-ui" / "node_modules").exists()

    def test_json_report(self, runner, workspace):
        result = runner.invoke(main, ["clean", str(workspace), "-y", "--permanent", "--json"])
        assert result.exit_code == 0, result.output
        data = json.loads(result.output)
        assert data["status"] == "cleaned"
        assert data["succeeded"] == 2
        assert data["failed"] == 0
        assert data["total_bytes_freed"] == 800_000
        assert data["difference_bytes"] == 0

    def test_nothing_to_clean(self, runner, tmp_path):
        result = runner.invoke(main, ["clean", str(tmp_path), "-y"])
        assert result.exit_code == 0
        assert "No directories match" in result.output


def test_config_path(runner, isolate_xdg):
    result = runner.invoke(main, ["config-path"])
    assert result.exit_code == 0
    assert str(isolate_xdg[0] / "devsweep" / "config.json") in result.output
    assert "not found" in result.output
