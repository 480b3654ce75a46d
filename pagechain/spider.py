# pagechain/spider.py
"""
Spider: identity, site settings and the one-way crawl shutdown signal.
"""
from __future__ import annotations

import threading
from typing import Optional, Protocol, runtime_checkable

from pagechain.logger import spider_logger
from pagechain.models import Site

__all__ = ("SpiderLike", "Spider")


@runtime_checkable
class SpiderLike(Protocol):
    """What handlers need from a spider."""

    identity: str
    site: Site

    def exit(self) -> None: ...


class Spider:
    """Owns the site configuration and the ability to terminate the crawl.

    ``exit()`` only requests shutdown: running chains finish their current
    handler and the engine stops scheduling new work.
    """

    def __init__(self, identity: str, site: Site) -> None:
        self.identity = identity
        self.site = site
        self.exit_reason: Optional[str] = None
        self._exit_event = threading.Event()
        self._log = spider_logger(identity)

    @property
    def exited(self) -> bool:
        return self._exit_event.is_set()

    def exit(self, reason: str = "exit requested") -> None:
        if self._exit_event.is_set():
            return
        self.exit_reason = reason
        self._exit_event.set()
        self._log.error("Crawl terminated: %s", reason)

    def __repr__(self) -> str:
        return f"Spider(identity={self.identity!r}, domain={self.site.domain!r}, exited={self.exited})"
