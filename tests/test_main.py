"""Tests for clarity_consent.main: command-line entry point."""

from __future__ import annotations

import json
import pathlib
from unittest import mock

import pytest

from clarity_consent import config, main
from clarity_consent.storage.options import JsonFileOptionStore


def _settings(options_file: pathlib.Path) -> config.Settings:
    return config.Settings(CLARITY_OPTIONS_FILE=str(options_file))


class TestDetectCommand:
    """Tests for the detect subcommand."""

    def test_prints_result(self, tmp_path: pathlib.Path, capsys: pytest.CaptureFixture[str]) -> None:
        options_file = tmp_path / "options.json"
        JsonFileOptionStore(options_file).set("microsoft_clarity_project_id", "aq9itx5whc")

        with mock.patch.object(config, "get_settings", return_value=_settings(options_file)):
            code = main.main(["detect"])

        assert code == 0
        output = json.loads(capsys.readouterr().out)
        assert output["projectId"] == "aq9itx5whc"
        assert output["provenance"]["label"] == "Detected from: microsoft_clarity_project_id"

    def test_exit_code_when_undetected(self, tmp_path: pathlib.Path) -> None:
        with mock.patch.object(config, "get_settings", return_value=_settings(tmp_path / "options.json")):
            assert main.main(["detect"]) == 1


class TestUninstallCommand:
    """Tests for the uninstall subcommand."""

    def test_prints_removed_count(self, tmp_path: pathlib.Path, capsys: pytest.CaptureFixture[str]) -> None:
        options_file = tmp_path / "options.json"
        JsonFileOptionStore(options_file).set("clarity_ad_storage", "denied")

        with mock.patch.object(config, "get_settings", return_value=_settings(options_file)):
            assert main.main(["uninstall"]) == 0

        assert capsys.readouterr().out.strip() == "1"
        assert JsonFileOptionStore(options_file).keys() == []


class TestParser:
    """Tests for build_parser()."""

    def test_verify_requires_url(self) -> None:
        with pytest.raises(SystemExit):
            main.build_parser().parse_args(["verify"])

    def test_verify_headed_flag(self) -> None:
        args = main.build_parser().parse_args(["verify", "https://example.com", "--headed"])
        assert args.url == "https://example.com"
        assert args.headed is True
