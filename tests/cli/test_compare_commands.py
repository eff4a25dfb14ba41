"""Tests for the compare and smart-bump commands with mocked store lookups."""

from unittest.mock import MagicMock, patch

import pytest
import requests
from click.testing import CliRunner

from flutterdeploy.cli.main import cli
from flutterdeploy.cli.utils.args import resolve_store_ids

PLAY_URL = "https://play.google.com/store/apps/details"


def _play_page(version):
    response = MagicMock(status_code=200)
    response.text = f'<div itemprop="softwareVersion">{version}</div>'
    return response


def _lookup(version):
    response = MagicMock(status_code=200)
    response.json.return_value = {"resultCount": 1, "results": [{"version": version}]}
    return response


def _stores(play=None, app_store=None):
    """A ``requests.get`` replacement answering per store; None means offline."""

    def fake_get(url, **kwargs):
        value = play if url == PLAY_URL else app_store
        if value is None:
            raise requests.ConnectionError("offline")
        return _play_page(value) if url == PLAY_URL else _lookup(value)

    return patch("flutterdeploy.versioning.stores.requests.get", side_effect=fake_get)


def _run(*args, input=None):
    return CliRunner().invoke(cli, list(args), input=input, catch_exceptions=False)


@pytest.fixture(autouse=True)
def no_ci(monkeypatch):
    monkeypatch.delenv("CI", raising=False)
    monkeypatch.delenv("ANDROID_PACKAGE_ID", raising=False)
    monkeypatch.delenv("IOS_BUNDLE_ID", raising=False)


@pytest.mark.short
class TestCompare:
    def test_compare_app_store_lower_reports_only(self, full_project):
        before = full_project.read("pubspec.yaml")
        with _stores(app_store="1.3.0") as mock_get:
            result = _run("compare", "-C", str(full_project.root))

        assert result.exit_code == 0
        assert "Recommended version: 1.3.0+2" in result.output
        assert full_project.read("pubspec.yaml") == before
        assert mock_get.call_count == 1
        assert mock_get.call_args.kwargs["params"] == {"bundleId": "com.acme.sample"}

    def test_compare_android_uses_application_id(self, full_project):
        with _stores(play="1.0.0") as mock_get:
            result = _run("compare-android", "-C", str(full_project.root))

        assert result.exit_code == 0
        assert "ahead of the stores" in result.output
        assert mock_get.call_args.kwargs["params"]["id"] == "com.acme.sample"

    def test_compare_all_offline(self, full_project):
        with _stores():
            result = _run("compare-all", "-C", str(full_project.root))

        assert result.exit_code == 0
        assert "Current version: 1.2.0+3" in result.output
        assert "comparison skipped" in result.output

    def test_compare_all_equal(self, full_project):
        with _stores(play="1.2.0+3", app_store="1.1.0"):
            result = _run("compare-all", "-C", str(full_project.root))
        assert "already published" in result.output
        assert "Recommended version: 1.2.0+4" in result.output

    def test_compare_identifier_options(self, full_project):
        with _stores(app_store="1.0.0") as mock_get:
            _run("compare", "-C", str(full_project.root), "--bundle-id", "com.other")
        assert mock_get.call_args.kwargs["params"] == {"bundleId": "com.other"}

    def test_compare_without_pubspec(self, project):
        with _stores():
            result = _run("compare", "-C", str(project.root))
        assert result.exit_code == 1


@pytest.mark.short
class TestSmartBump:
    def test_lower_applied(self, full_project):
        with _stores(play="1.4.0", app_store="1.3.0"):
            result = _run("smart-bump", "-C", str(full_project.root))

        assert result.exit_code == 0
        assert "version: 1.4.0+2" in full_project.read("pubspec.yaml")
        assert "MARKETING_VERSION = 1.4.0;" in full_project.read(
            "ios/Runner.xcodeproj/project.pbxproj"
        )

    def test_equal_applied(self, full_project):
        with _stores(play="1.2.0+3"):
            result = _run("smart-bump", "-C", str(full_project.root))
        assert result.exit_code == 0
        assert "version: 1.2.0+4" in full_project.read("pubspec.yaml")

    def test_higher_untouched(self, full_project):
        before = full_project.read("pubspec.yaml")
        with _stores(play="1.0.0", app_store="1.1.0"):
            result = _run("smart-bump", "-C", str(full_project.root))
        assert result.exit_code == 0
        assert full_project.read("pubspec.yaml") == before

    def test_offline_bumps_build(self, full_project):
        with _stores():
            result = _run("smart-bump", "-C", str(full_project.root))
        assert result.exit_code == 0
        assert "version: 1.2.0+4" in full_project.read("pubspec.yaml")

    def test_interactive_declined(self, full_project):
        before = full_project.read("pubspec.yaml")
        with _stores(play="1.4.0"):
            result = _run("smart-bump", "--interactive", "-C", str(full_project.root), input="n\n")
        assert result.exit_code == 0
        assert "cancelled" in result.output
        assert full_project.read("pubspec.yaml") == before

    def test_interactive_confirmed(self, full_project):
        with _stores(play="1.4.0"):
            result = _run("smart-bump", "--interactive", "-C", str(full_project.root), input="y\n")
        assert result.exit_code == 0
        assert "version: 1.4.0+2" in full_project.read("pubspec.yaml")

    def test_interactive_yes_skips_prompt(self, full_project):
        with _stores(play="1.4.0"):
            result = _run("smart-bump", "--interactive", "--yes", "-C", str(full_project.root))
        assert result.exit_code == 0
        assert "version: 1.4.0+2" in full_project.read("pubspec.yaml")

    def test_manual_strategy_prompts(self, full_project):
        full_project.config('VERSION_STRATEGY="manual"\n')
        before = full_project.read("pubspec.yaml")
        with _stores(play="1.4.0"):
            result = _run("smart-bump", "-C", str(full_project.root), input="n\n")
        assert result.exit_code == 0
        assert "cancelled" in result.output
        assert full_project.read("pubspec.yaml") == before

    def test_automated_flag_overrides_manual_strategy(self, full_project):
        full_project.config('VERSION_STRATEGY="manual"\n')
        with _stores(play="1.4.0"):
            result = _run("smart-bump", "--automated", "-C", str(full_project.root))
        assert result.exit_code == 0
        assert "version: 1.4.0+2" in full_project.read("pubspec.yaml")

    def test_auto_strategy_applies(self, full_project):
        full_project.config('VERSION_STRATEGY="auto"\n')
        with _stores(play="1.4.0"):
            result = _run("smart-bump", "-C", str(full_project.root))
        assert result.exit_code == 0
        assert "version: 1.4.0+2" in full_project.read("pubspec.yaml")

    def test_manual_strategy_in_ci_applies(self, full_project, monkeypatch):
        monkeypatch.setenv("CI", "true")
        full_project.config('VERSION_STRATEGY="manual"\n')
        with _stores(play="1.4.0"):
            result = _run("smart-bump", "-C", str(full_project.root))
        assert result.exit_code == 0
        assert "version: 1.4.0+2" in full_project.read("pubspec.yaml")


@pytest.mark.short
class TestResolveStoreIds:
    def test_explicit_values_win(self, full_project):
        assert resolve_store_ids(full_project.root, "a.b", "c.d") == ("a.b", "c.d")

    def test_project_config_before_project_files(self, full_project):
        (full_project.root / "project.config").write_text(
            'PACKAGE_NAME="com.cfg.android"\nBUNDLE_ID="com.cfg.ios"\n'
        )
        assert resolve_store_ids(full_project.root) == ("com.cfg.android", "com.cfg.ios")

    def test_project_files(self, full_project):
        assert resolve_store_ids(full_project.root) == ("com.acme.sample", "com.acme.sample")

    def test_default_from_pubspec_name(self, project):
        project.pubspec()
        assert resolve_store_ids(project.root) == (
            "com.example.sample_app",
            "com.example.sample_app",
        )
