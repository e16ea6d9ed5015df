import json
from pathlib import Path

import pytest
from pydantic import ValidationError

from binran_search.config import CrawlConfig, load_config


def write_file(tmp_path: Path, content: str, suffix: str) -> Path:
    path = tmp_path / f"config{suffix}"
    path.write_text(content, encoding="utf-8")
    return path


def test_defaults_match_the_handbook_site():
    cfg = CrawlConfig()
    assert str(cfg.start_url) == "https://sites.google.com/zen.ac.jp/zen-gakuseibinran/home"
    assert cfg.allowed_hostname == "sites.google.com"
    assert cfg.allowed_path_prefix == "/zen.ac.jp/zen-gakuseibinran/"
    assert cfg.delay == 0.5
    assert cfg.max_concurrency == 5
    assert cfg.max_retries == 3
    assert cfg.backoff_base == 1.0
    assert cfg.timeout is None
    assert cfg.content_selectors == ('[role="main"]', "#main-content", ".main-content")
    assert cfg.max_filename_length == 100


def test_hostname_derived_from_start_url():
    cfg = CrawlConfig(start_url="http://Localhost:8080/site/home", allowed_path_prefix="/site/")
    assert cfg.allowed_hostname == "localhost"


@pytest.mark.parametrize(
    "overrides",
    [
        {"allowed_path_prefix": "/elsewhere/"},
        {"allowed_path_prefix": "no-slash/"},
        {"allowed_hostname": "other.com"},
        {"max_concurrency": 0},
        {"max_retries": 0},
        {"delay": -1},
        {"unknown": 1},
    ],
)
def test_invalid_values_rejected(overrides):
    with pytest.raises(ValidationError):
        CrawlConfig(**overrides)


def test_config_is_frozen():
    cfg = CrawlConfig()
    with pytest.raises(ValidationError):
        cfg.delay = 2.0


@pytest.mark.parametrize(
    "content,suffix,expect_exc",
    [
        ("delay: 0.1\nmax_concurrency: 2\n", ".yaml", None),
        (json.dumps({"delay": 0.1, "max_concurrency": 2}), ".json", None),
        ("max_concurrency: zero", ".yaml", ValidationError),
        ("not: a: mapping", ".yaml", ValueError),
        ("- just\n- a list", ".yaml", TypeError),
        ("{broken", ".json", ValueError),
        ("delay = 1", ".toml", ValueError),
    ],
)
def test_load_config_variants(tmp_path, content, suffix, expect_exc):
    cfg_path = write_file(tmp_path, content, suffix)
    if expect_exc:
        with pytest.raises(expect_exc):
            load_config(cfg_path)
    else:
        cfg = load_config(cfg_path)
        assert isinstance(cfg, CrawlConfig)
        assert cfg.delay == 0.1
        assert cfg.max_concurrency == 2
        assert cfg.allowed_hostname == "sites.google.com"


def test_load_config_explicit_missing(tmp_path):
    with pytest.raises(FileNotFoundError):
        load_config(tmp_path / "nope.yaml")


def test_load_config_without_default_file_uses_builtins(tmp_path, monkeypatch):
    monkeypatch.chdir(tmp_path)
    assert load_config(None) == CrawlConfig()


def test_load_config_reads_default_file(tmp_path, monkeypatch):
    monkeypatch.chdir(tmp_path)
    (tmp_path / "configs").mkdir()
    (tmp_path / "configs" / "default.yaml").write_text("max_retries: 5\n", encoding="utf-8")
    assert load_config(None).max_retries == 5
