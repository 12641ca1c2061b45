#!/usr/bin/env python3
"""Tests for navigator options."""

import json
import logging

import pytest

from includenav.config import CONFIG_FILENAME, ConfigError, NavigatorConfig, load_config


class TestNavigatorConfig:
    """Tests for option parsing."""

    def test_defaults(self):
        config = NavigatorConfig()

        assert config.enable_php and config.enable_js and config.enable_css and config.enable_html
        assert config.hover_preview
        assert config.hover_max_lines == 20
        assert config.prefer_css_modules
        assert not config.enable_asset_urls_in_css
        assert not config.url_validation
        assert config.diagnostics_enabled

    def test_nested_and_dotted_names(self):
        nested = NavigatorConfig.from_mapping({"hover": {"maxLines": 5, "preview": False}})
        dotted = NavigatorConfig.from_mapping({"hover.maxLines": 5, "hover.preview": False})

        assert nested == dotted
        assert nested.hover_max_lines == 5
        assert not nested.hover_preview

    def test_namespaced_names(self):
        config = NavigatorConfig.from_mapping({"includenav": {"enablePHP": False, "url.validation": True}})

        assert not config.enable_php
        assert config.url_validation

    def test_merged_keeps_other_values(self):
        base = NavigatorConfig(hover_max_lines=7)
        merged = base.merged({"enableAssetUrlsInCSS": True})

        assert merged.hover_max_lines == 7
        assert merged.enable_asset_urls_in_css
        assert not base.enable_asset_urls_in_css

    def test_unknown_option_warned(self, caplog):
        with caplog.at_level(logging.WARNING):
            config = NavigatorConfig.from_mapping({"enableRuby": True})

        assert config == NavigatorConfig()
        assert "enableRuby" in caplog.text

    @pytest.mark.parametrize(
        "data",
        [
            {"enablePHP": "yes"},
            {"hover.maxLines": "20"},
            {"hover.maxLines": True},
            {"hover.maxLines": 0},
        ],
    )
    def test_wrong_types_rejected(self, data):
        with pytest.raises(ConfigError):
            NavigatorConfig.from_mapping(data)

    def test_all_languages_off_disables_diagnostics(self):
        config = NavigatorConfig(enable_php=False, enable_js=False, enable_css=False, enable_html=False)
        assert not config.diagnostics_enabled


class TestLoadConfig:
    """Tests for reading options from a project root."""

    def test_no_root(self):
        assert load_config(None) == NavigatorConfig()

    def test_no_files(self, tmp_path):
        assert load_config(tmp_path) == NavigatorConfig()

    def test_json_file(self, tmp_path):
        (tmp_path / CONFIG_FILENAME).write_text(json.dumps({"preferCssModules": False}))
        assert not load_config(tmp_path).prefer_css_modules

    def test_pyproject_section(self, tmp_path):
        (tmp_path / "pyproject.toml").write_text(
            """[project]
name = "site"

[tool.includenav]
enableAssetUrlsInCSS = true

[tool.includenav.hover]
maxLines = 3
"""
        )
        config = load_config(tmp_path)

        assert config.enable_asset_urls_in_css
        assert config.hover_max_lines == 3

    def test_json_wins_over_pyproject(self, tmp_path):
        (tmp_path / CONFIG_FILENAME).write_text(json.dumps({"hover": {"maxLines": 9}}))
        (tmp_path / "pyproject.toml").write_text("[tool.includenav.hover]\nmaxLines = 3\n")

        assert load_config(tmp_path).hover_max_lines == 9

    def test_unparseable_file_falls_back(self, tmp_path, caplog):
        (tmp_path / CONFIG_FILENAME).write_text("{ broken")

        with caplog.at_level(logging.WARNING):
            config = load_config(tmp_path)

        assert config == NavigatorConfig()
        assert CONFIG_FILENAME in caplog.text
