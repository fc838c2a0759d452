import json

import pytest
import yaml

from dircrawl.config import ConfigError, load_selector_config, load_settings, save_selector_config
from dircrawl.schemas import SelectorConfig, Selectors


def test_missing_selector_config_means_defaults(tmp_path, capsys):
    config = load_selector_config(tmp_path / "nope.json")
    assert config == SelectorConfig()
    assert "built-in defaults" in capsys.readouterr().out


def test_none_path_means_defaults():
    assert load_selector_config(None) == SelectorConfig()


def test_loads_json_selector_config(tmp_path):
    path = tmp_path / "scraper_config.json"
    path.write_text(json.dumps({
        "baseUrl": "https://members.example.org/search",
        "selectors": {"contactRow": "table.results tr", "phone": "td:nth-child(6)"},
    }), encoding="utf-8")

    config = load_selector_config(path)
    assert config.base_url == "https://members.example.org/search"
    assert config.selectors.contact_row == "table.results tr"
    assert config.selectors.phone == "td:nth-child(6)"
    assert config.selectors.email == Selectors().email


def test_loads_yaml_selector_config(tmp_path):
    path = tmp_path / "selectors.yaml"
    path.write_text("baseUrl: https://members.example.org/search\nselectors:\n  nameLink: a.profile\n", encoding="utf-8")
    assert load_selector_config(path).selectors.name_link == "a.profile"


@pytest.mark.parametrize("text", ["[1, 2, 3]", "baseUrl: [unclosed", '{"baseUrl": "ftp://x"}'])
def test_invalid_selector_config_raises(tmp_path, text):
    path = tmp_path / "bad.json"
    path.write_text(text, encoding="utf-8")
    with pytest.raises(ConfigError):
        load_selector_config(path)


def test_playwright_only_row_selector_is_a_config_error(tmp_path):
    path = tmp_path / "config.json"
    path.write_text(json.dumps({"selectors": {"contactRow": "tr:has-text(\"Member\")"}}), encoding="utf-8")
    with pytest.raises(ConfigError, match="contact_row"):
        load_selector_config(path)


def test_save_writes_json_or_yaml_by_suffix(tmp_path):
    config = SelectorConfig(selectors=Selectors(contact_row="div.member"))

    json_path = save_selector_config(config, tmp_path / "out" / "config.json")
    assert json.loads(json_path.read_text(encoding="utf-8"))["selectors"]["contactRow"] == "div.member"

    yaml_path = save_selector_config(config, tmp_path / "config.yaml")
    assert yaml.safe_load(yaml_path.read_text(encoding="utf-8"))["selectors"]["contactRow"] == "div.member"

    assert load_selector_config(json_path) == config
    assert load_selector_config(yaml_path) == config


def test_settings_precedence(tmp_path):
    path = tmp_path / "crawl.yaml"
    path.write_text("crawl:\n  max_pages: 5\n  headless: true\n  output: out/a.csv\n", encoding="utf-8")

    settings = load_settings(path, {"max_pages": 2, "output": None, "timeout_ms": None})
    assert settings.max_pages == 2
    assert settings.headless is True
    assert settings.output == "out/a.csv"
    assert settings.timeout_ms == 30000


def test_settings_without_file_use_defaults_and_overrides():
    settings = load_settings(None, {"base_url": "https://x.example.org/s"})
    assert settings.base_url == "https://x.example.org/s"
    assert settings.max_pages == 30


def test_missing_settings_file_is_an_error(tmp_path):
    with pytest.raises(ConfigError):
        load_settings(tmp_path / "missing.yaml")


@pytest.mark.parametrize("text", ["crawl: [1, 2]", "crawl:\n  max_pages: 0\n", "crawl:\n  bogus: 1\n"])
def test_invalid_settings_raise(tmp_path, text):
    path = tmp_path / "crawl.yaml"
    path.write_text(text, encoding="utf-8")
    with pytest.raises(ConfigError):
        load_settings(path)
