"""
Configuration loading for the crawler and the selector discovery tool.

Two documents:
  - selector configuration (JSON or YAML): {baseUrl, selectors: {...}}.
    A missing file means built-in defaults.
  - run-time settings (YAML): {crawl: {<CrawlSettings field>: value}}.
"""
from __future__ import annotations

import json
from pathlib import Path
from typing import Any, Dict, Optional

import yaml
from pydantic import ValidationError

from .pipeline.extractors import unusable_selectors
from .schemas import CrawlSettings, SelectorConfig


DEFAULT_SELECTOR_CONFIG = Path("scraper_config.json")


class ConfigError(Exception):
    """A configuration file exists but cannot be used."""


def _read_document(path: Path) -> Dict[str, Any]:
    try:
        with path.open("r", encoding="utf-8") as f:
            # YAML is a superset of JSON, so one loader serves both formats
            data = yaml.safe_load(f)
    except (OSError, yaml.YAMLError) as e:
        raise ConfigError(f"cannot read {path}: {e}") from e
    if data is None:
        return {}
    if not isinstance(data, dict):
        raise ConfigError(f"{path}: expected a mapping at top level")
    return data


def load_selector_config(path: Optional[Path | str]) -> SelectorConfig:
    if path is None:
        return SelectorConfig()
    path = Path(path)
    if not path.exists():
        print(f"ℹ️  No selector config at {path}; using built-in defaults")
        return SelectorConfig()
    data = _read_document(path)
    try:
        config = SelectorConfig.model_validate(data)
    except ValidationError as e:
        raise ConfigError(f"invalid selector config {path}: {e}") from e
    bad = unusable_selectors(config.selectors)
    if bad:
        listed = ", ".join(f"{k}={v!r}" for k, v in bad.items())
        raise ConfigError(f"{path}: row/name/column selectors must be plain CSS: {listed}")
    return config


def save_selector_config(config: SelectorConfig, path: Path | str) -> Path:
    """Write JSON for *.json targets, YAML otherwise."""
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    doc = config.to_document()
    if path.suffix.lower() == ".json":
        text = json.dumps(doc, indent=2) + "\n"
    else:
        text = yaml.safe_dump(doc, sort_keys=False, allow_unicode=True)
    path.write_text(text, encoding="utf-8")
    return path


def load_settings(path: Optional[Path | str], overrides: Optional[Dict[str, Any]] = None) -> CrawlSettings:
    """Merge defaults < settings file ``crawl:`` section < explicit overrides.

    ``None`` values in overrides mean "not given" and are ignored.
    """
    values: Dict[str, Any] = {}
    if path is not None:
        path = Path(path)
        if not path.exists():
            raise ConfigError(f"settings file not found: {path}")
        doc = _read_document(path)
        section = doc.get("crawl", {}) or {}
        if not isinstance(section, dict):
            raise ConfigError(f"{path}: 'crawl' must be a mapping")
        values.update(section)
    for key, value in (overrides or {}).items():
        if value is not None:
            values[key] = value
    try:
        return CrawlSettings.model_validate(values)
    except ValidationError as e:
        raise ConfigError(f"invalid settings: {e}") from e
