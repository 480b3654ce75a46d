# pagechain/cookies.py
"""
Cookie injectors: refresh the cookie jar of ``spider.site``.
"""
from __future__ import annotations

import json
from pathlib import Path
from typing import Dict, Protocol, Union

import yaml

from pagechain.logger import spider_logger
from pagechain.spider import SpiderLike

__all__ = ("CookieInjector", "FileCookieInjector", "parse_cookie_string")


class CookieInjector(Protocol):
    def inject(self, spider: SpiderLike) -> None: ...


def parse_cookie_string(raw: str) -> Dict[str, str]:
    """``"a=1; b=2"`` -> ``{"a": "1", "b": "2"}``. Pairs without ``=`` are ignored."""
    cookies: Dict[str, str] = {}
    for part in raw.split(";"):
        name, sep, value = part.strip().partition("=")
        if sep and name.strip():
            cookies[name.strip()] = value.strip()
    return cookies


class FileCookieInjector:
    """Reloads cookies from a file on every ``inject`` call.

    The file holds either a browser-style cookie string (``a=1; b=2``) or a
    YAML/JSON mapping. Read errors are logged and the current jar is kept.
    """

    def __init__(self, path: Union[str, Path]) -> None:
        self.path = Path(path).expanduser()

    def _load(self) -> Dict[str, str]:
        text = self.path.read_text(encoding="utf-8").strip()
        if self.path.suffix.lower() == ".json":
            data = json.loads(text or "{}")
        elif self.path.suffix.lower() in (".yaml", ".yml"):
            data = yaml.safe_load(text) or {}
        else:
            return parse_cookie_string(text)
        if not isinstance(data, dict):
            raise TypeError(f"cookie file must hold a mapping, got {type(data).__name__}")
        return {str(k): str(v) for k, v in data.items()}

    def inject(self, spider: SpiderLike) -> None:
        log = spider_logger(spider.identity, "cookies")
        try:
            cookies = self._load()
        except (OSError, ValueError, TypeError, yaml.YAMLError) as exc:
            log.warning("Cookie refresh from %s failed: %s", self.path, exc)
            return
        spider.site.set_cookies(cookies)
        log.info("Injected %d cookies from %s", len(cookies), self.path)
