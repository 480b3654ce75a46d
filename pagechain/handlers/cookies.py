# pagechain/handlers/cookies.py
"""
Handlers that refresh cookies through a :class:`~pagechain.cookies.CookieInjector`.
"""
from __future__ import annotations

import threading
import time
from typing import Callable, Optional

from pagechain.chain import PageHandler
from pagechain.cookies import CookieInjector
from pagechain.errors import ContentMarkerError
from pagechain.models import Page
from pagechain.spider import SpiderLike

__all__ = ("UpdateCookieWhenContainsContentHandler", "UpdateCookieTimerHandler")


class UpdateCookieWhenContainsContentHandler(PageHandler):
    """Refreshes cookies when the content contains ``content``, then aborts the page.

    The ``ContentMarkerError`` is raised on every call, whether or not the
    marker was found. See DESIGN.md before changing this.
    """

    def __init__(
        self,
        content: str,
        cookie_injector: Optional[CookieInjector] = None,
        name: Optional[str] = None,
    ) -> None:
        super().__init__(name)
        self.content = content
        self.cookie_injector = cookie_injector

    def handle(self, page: Page, spider: SpiderLike) -> Page:
        if page is not None and page.content and self.content in page.content:
            if self.cookie_injector is not None:
                self.cookie_injector.inject(spider)
        raise ContentMarkerError(self.content)


class UpdateCookieTimerHandler(PageHandler):
    """Refreshes cookies at most once per ``due_time`` seconds.

    The timer belongs to this handler instance and restarts after each refresh.
    """

    def __init__(
        self,
        due_time: float,
        cookie_injector: Optional[CookieInjector] = None,
        clock: Callable[[], float] = time.monotonic,
        name: Optional[str] = None,
    ) -> None:
        super().__init__(name)
        self.due_time = due_time
        self.cookie_injector = cookie_injector
        self._clock = clock
        self._lock = threading.Lock()
        self.next_time = clock() + due_time

    def handle(self, page: Page, spider: SpiderLike) -> Page:
        with self._lock:
            now = self._clock()
            if now <= self.next_time:
                return page
            if self.cookie_injector is not None:
                self.cookie_injector.inject(spider)
            self.next_time = self._clock() + self.due_time
        return page
