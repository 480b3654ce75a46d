# File: tests/test_config.py
import json
from pathlib import Path

import pytest
from pydantic import ValidationError

from pagechain.config import CrawlConfig, load_config
from pagechain.errors import ConfigurationError
from pagechain.engine import build_chain, build_services, build_spider
from pagechain.handlers import (
    CycleRedialHandler,
    RedialWhenContainsContentHandler,
    RetryWhenContainsContentHandler,
    UpdateCookieTimerHandler,
)
from pagechain.redial import CommandRedialExecutor, NullRedialExecutor


def write_file(tmp_path: Path, content: str, suffix: str) -> Path:
    path = tmp_path / f"config{suffix}"
    path.write_text(content, encoding="utf-8")
    return path


@pytest.mark.parametrize(
    "content,expect_exc",
    [
        ("base_url: http://example.com", None),
        (json.dumps({"base_url": "http://example.com"}), None),
        ("{}", ValidationError),
        ("not: a: mapping", ValueError),
        ("- just\n- a list", TypeError),
        ("base_url: http://example.com\nhandlers: [{type: no_such_handler}]", ValidationError),
        ("base_url: http://example.com\nunknown_key: 1", ValidationError),
    ],
)
def test_load_config_variants(tmp_path, content, expect_exc):
    suffix = ".yaml" if not content.strip().startswith("{") else ".json"
    cfg_path = write_file(tmp_path, content, suffix)
    if expect_exc:
        with pytest.raises(expect_exc):
            load_config(cfg_path)
    else:
        cfg = load_config(cfg_path)
        assert isinstance(cfg, CrawlConfig)
        assert str(cfg.base_url).rstrip("/") == "http://example.com"
        assert cfg.handlers == []


def test_load_config_default_missing(tmp_path, monkeypatch):
    monkeypatch.chdir(tmp_path)
    with pytest.raises(FileNotFoundError):
        load_config(None)


def test_load_config_unsupported_suffix(tmp_path):
    with pytest.raises(ValueError):
        load_config(write_file(tmp_path, "base_url = 1", ".toml"))


def test_redial_command_string_is_split():
    cfg = CrawlConfig(base_url="http://example.com", redial={"command": "rasdial adsl user pass"})
    assert cfg.redial.command == ["rasdial", "adsl", "user", "pass"]


def test_build_chain_from_yaml(tmp_path):
    cfg_path = write_file(
        tmp_path,
        """
base_url: http://example.com
cycle_retry_times: 7
handlers:
  - type: trim
  - type: redial_when_contains
    content: Access denied
    name: access-guard
  - type: retry_when_contains
    contents: [busy, later]
  - type: update_cookie_timer
    due_time: 60
  - type: cycle_redial
    limit: 10
  - type: to_lower
""",
        ".yaml",
    )
    cfg = load_config(cfg_path)
    services = build_services(cfg)
    chain = build_chain(cfg.handlers, services)

    handlers = list(chain)
    assert chain.names == [
        "TrimContentHandler",
        "access-guard",
        "RetryWhenContainsContentHandler",
        "UpdateCookieTimerHandler",
        "CycleRedialHandler",
        "ContentToLowerHandler",
    ]
    assert isinstance(handlers[1], RedialWhenContainsContentHandler)
    assert handlers[1].coordinator is services.coordinator
    assert handlers[1].retry_queue is services.retry_queue
    assert isinstance(handlers[2], RetryWhenContainsContentHandler)
    assert handlers[2].contents == ("busy", "later")
    assert isinstance(handlers[3], UpdateCookieTimerHandler)
    assert isinstance(handlers[4], CycleRedialHandler)
    assert handlers[4].limit == 10
    assert handlers[4].coordinator is services.coordinator
    assert isinstance(services.coordinator.executor, NullRedialExecutor)

    spider = build_spider(cfg)
    assert spider.identity == "example.com"
    assert spider.site.cycle_retry_times == 7


def test_build_chain_retry_without_contents_fails():
    cfg = CrawlConfig(base_url="http://example.com", handlers=[{"type": "retry_when_contains"}])
    with pytest.raises(ConfigurationError):
        build_chain(cfg.handlers, build_services(cfg))


def test_build_chain_bad_options_fail():
    cfg = CrawlConfig(base_url="http://example.com", handlers=[{"type": "trim", "bogus": 1}])
    with pytest.raises(ConfigurationError):
        build_chain(cfg.handlers, build_services(cfg))


def test_build_services_from_config(tmp_path):
    cookie_file = tmp_path / "cookies.txt"
    cookie_file.write_text("a=1", encoding="utf-8")
    cfg = CrawlConfig(
        base_url="http://example.com",
        identity="news-spider",
        redial={"command": ["dial", "now"], "timeout": 5},
        cookies={"file": str(cookie_file)},
    )
    services = build_services(cfg)
    assert isinstance(services.coordinator.executor, CommandRedialExecutor)
    assert services.coordinator.executor.command == ["dial", "now"]
    spider = build_spider(cfg)
    services.cookie_injector.inject(spider)
    assert spider.identity == "news-spider"
    assert spider.site.cookies == {"a": "1"}
