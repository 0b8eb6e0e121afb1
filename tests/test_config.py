"""Tests for configuration loading and option layering."""

from __future__ import annotations

import json
from pathlib import Path

import pytest

from devsweep.config import (
    Settings,
    default_config_path,
    resolve_dir,
    resolve_execution_options,
    resolve_filter_options,
    resolve_project_type,
    resolve_scan_options,
)
from devsweep.errors import ConfigError, SizeParseError
from devsweep.models.project import ProjectType


def write_config(data) -> Path:
    path = default_config_path()
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(data if isinstance(data, str) else json.dumps(data))
    return path


class TestSettings:
    def test_missing_file_is_empty(self):
        settings = Settings()
        assert settings.get("filtering.keep_size") is None
        assert settings.get("filtering.keep_size", "1MB") == "1MB"

    def test_path_under_xdg_config(self, isolate_xdg):
        assert default_config_path() == isolate_xdg[0] / "devsweep" / "config.json"

    def test_dot_notation(self):
        write_config({"filtering": {"keep_size": "50MB"}, "dir": "~/code"})
        settings = Settings()
        assert settings.get("filtering.keep_size") == "50MB"
        assert settings.get("dir") == "~/code"
        assert settings.get("filtering.keep_size.deeper") is None

    def test_malformed_json(self):
        write_config("{not json")
        with pytest.raises(ConfigError):
            Settings()

    def test_non_object(self):
        write_config([1, 2, 3])
        with pytest.raises(ConfigError):
            Settings()


class TestLayering:
    def test_defaults(self):
        settings = Settings()
        assert resolve_dir(None, settings) == Path(".")
        assert resolve_project_type(None, settings) is None
        scan = resolve_scan_options(settings)
        assert (scan.threads, scan.verbose, scan.skip) == (0, False, [])
        filt = resolve_filter_options(settings)
        assert (filt.keep_size, filt.keep_days, filt.sort, filt.reverse) == ("0", 0, "size", False)
        execution = resolve_execution_options(settings)
        assert execution.use_trash is True
        assert execution.keep_executables is False

    def test_file_overrides_default(self, monkeypatch, tmp_path):
        monkeypatch.setenv("HOME", str(tmp_path / "home"))
        write_config({
            "project_type": "rust",
            "dir": "~/Projects",
            "filtering": {"keep_size": "50MB", "keep_days": 7, "sort": "age", "reverse": True},
            "scanning": {"threads": 4, "skip": ["zz_archived"]},
            "execution": {"keep_executables": True, "use_trash": False},
        })
        settings = Settings()

        assert resolve_dir(None, settings) == tmp_path / "home" / "Projects"
        assert resolve_project_type(None, settings) == [ProjectType.RUST]
        scan = resolve_scan_options(settings)
        assert scan.threads == 4
        assert scan.skip == ["zz_archived"]
        filt = resolve_filter_options(settings)
        assert (filt.keep_size, filt.keep_days, filt.sort, filt.reverse) == ("50MB", 7, "age", True)
        execution = resolve_execution_options(settings)
        assert execution.keep_executables is True
        assert execution.use_trash is False

    def test_cli_overrides_file(self):
        write_config({"project_type": "rust", "filtering": {"keep_size": "50MB", "keep_days": 7}})
        settings = Settings()
        assert resolve_project_type("node", settings) == [ProjectType.NODE]
        assert resolve_project_type("all", settings) is None
        filt = resolve_filter_options(settings, keep_size="1GB", keep_days=0)
        assert filt.keep_size == "1GB"
        assert filt.keep_days == 0

    def test_numeric_keep_size_in_file(self):
        write_config({"filtering": {"keep_size": 1000}})
        assert resolve_filter_options(Settings()).keep_size == "1000"

    def test_bad_keep_size_fails_during_resolution(self):
        with pytest.raises(SizeParseError):
            resolve_filter_options(Settings(), keep_size="huge")
        write_config({"filtering": {"keep_size": "12 parsecs"}})
        with pytest.raises(SizeParseError):
            resolve_filter_options(Settings())

    @pytest.mark.parametrize(
        "data",
        [
            {"project_type": "cobol"},
            {"filtering": {"sort": "colour"}},
            {"filtering": {"keep_days": "seven"}},
            {"filtering": {"keep_days": -1}},
            {"scanning": {"threads": True}},
            {"execution": {"use_trash": "yes"}},
        ],
    )
    def test_bad_values(self, data):
        write_config(data)
        settings = Settings()
        with pytest.raises(ConfigError):
            resolve_project_type(None, settings)
            resolve_scan_options(settings)
            resolve_filter_options(settings)
            resolve_execution_options(settings)
