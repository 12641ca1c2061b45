#!/usr/bin/env python3
"""Navigator configuration.

Options use the editor-facing names (``enableJS``, ``hover.maxLines``, ...).
They can be given as dotted keys or as nested tables, with or without an
``includenav.`` prefix, either in ``.includenav.json`` at the project root or
in the ``[tool.includenav]`` table of ``pyproject.toml``:

    [tool.includenav]
    enableCSS = false
    preferCssModules = false
    hover = { maxLines = 40 }
"""

import json
import logging
import tomllib
from dataclasses import dataclass, fields, replace
from pathlib import Path
from typing import Any, Dict, Mapping, Optional

logger = logging.getLogger(__name__)

CONFIG_FILENAME = ".includenav.json"

# option name -> dataclass attribute
OPTION_NAMES = {
    "enablePHP": "enable_php",
    "enableJS": "enable_js",
    "enableCSS": "enable_css",
    "enableHTML": "enable_html",
    "hover.preview": "hover_preview",
    "hover.maxLines": "hover_max_lines",
    "preferCssModules": "prefer_css_modules",
    "enableAssetUrlsInCSS": "enable_asset_urls_in_css",
    "url.validation": "url_validation",
}


class ConfigError(ValueError):
    """Raised when an option has a value of the wrong type."""


@dataclass(frozen=True)
class NavigatorConfig:
    """Options recognised by the navigator.

    Attributes:
        enable_php: Report unresolved includes in PHP documents.
        enable_js: Report unresolved imports in script documents.
        enable_css: Report unresolved imports in stylesheets.
        enable_html: Report unresolved references in markup.
        hover_preview: Produce hover previews.
        hover_max_lines: Lines of each target shown in a preview.
        prefer_css_modules: Try ``.module.css`` before plain style files.
        enable_asset_urls_in_css: Treat ``url(...)`` arguments as references.
        url_validation: Probe HTTP(S) references for reachability.
    """

    enable_php: bool = True
    enable_js: bool = True
    enable_css: bool = True
    enable_html: bool = True
    hover_preview: bool = True
    hover_max_lines: int = 20
    prefer_css_modules: bool = True
    enable_asset_urls_in_css: bool = False
    url_validation: bool = False

    @property
    def diagnostics_enabled(self) -> bool:
        return self.enable_php or self.enable_js or self.enable_css or self.enable_html

    @classmethod
    def from_mapping(cls, data: Mapping[str, Any]) -> "NavigatorConfig":
        """Build a config from user options, defaults filling the gaps."""
        return cls().merged(data)

    def merged(self, data: Mapping[str, Any]) -> "NavigatorConfig":
        """Return a copy with the given options applied.

        Raises:
            ConfigError: If an option value has the wrong type.
        """
        types = {f.name: f.type for f in fields(self)}
        changes: Dict[str, Any] = {}
        for name, value in _flatten(data).items():
            if name.startswith("includenav."):
                name = name[len("includenav."):]
            attr = OPTION_NAMES.get(name)
            if attr is None:
                logger.warning("Ignoring unknown option: %s", name)
                continue
            expected = types[attr]
            if expected in (bool, "bool"):
                if not isinstance(value, bool):
                    raise ConfigError(f"{name} must be a boolean, got {value!r}")
            elif isinstance(value, bool) or not isinstance(value, int) or value < 1:
                raise ConfigError(f"{name} must be a positive integer, got {value!r}")
            changes[attr] = value
        return replace(self, **changes)


def _flatten(data: Mapping[str, Any], prefix: str = "") -> Dict[str, Any]:
    flat: Dict[str, Any] = {}
    for key, value in data.items():
        name = f"{prefix}{key}"
        if isinstance(value, Mapping):
            flat.update(_flatten(value, name + "."))
        else:
            flat[name] = value
    return flat


def load_config(root: Optional[Path]) -> NavigatorConfig:
    """Load the configuration for a project root.

    ``.includenav.json`` wins over ``pyproject.toml``. A file that cannot be
    read or parsed is reported and the defaults are used instead.
    """
    if root is None:
        return NavigatorConfig()

    json_path = Path(root) / CONFIG_FILENAME
    if json_path.is_file():
        try:
            data = json.loads(json_path.read_text(encoding="utf-8"))
        except (OSError, UnicodeDecodeError, json.JSONDecodeError) as e:
            logger.warning("Could not read %s: %s", json_path, e)
            return NavigatorConfig()
        if not isinstance(data, dict):
            logger.warning("Ignoring %s: top level must be an object", json_path)
            return NavigatorConfig()
        return NavigatorConfig.from_mapping(data)

    pyproject = Path(root) / "pyproject.toml"
    if pyproject.is_file():
        try:
            data = tomllib.loads(pyproject.read_text(encoding="utf-8"))
        except (OSError, UnicodeDecodeError, tomllib.TOMLDecodeError) as e:
            logger.warning("Could not read %s: %s", pyproject, e)
            return NavigatorConfig()
        section = data.get("tool", {}).get("includenav", {})
        return NavigatorConfig.from_mapping(section)

    return NavigatorConfig()
