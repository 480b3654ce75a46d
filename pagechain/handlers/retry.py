# pagechain/handlers/retry.py
"""
Retry and redial handlers.

Redial handlers share one :class:`~pagechain.redial.RedialCoordinator` and one
:class:`~pagechain.cycle_retry.CycleRetryQueue`; both are passed in at
construction. A failed redial ends the whole crawl through ``spider.exit()``:
a broken network session is not something a single page can recover from.
"""
from __future__ import annotations

import threading
from typing import Optional

from pagechain.chain import PageHandler
from pagechain.cookies import CookieInjector
from pagechain.cycle_retry import CycleRetryQueue
from pagechain.errors import ConfigurationError, DownloadError
from pagechain.logger import spider_logger
from pagechain.models import Page
from pagechain.redial import RedialCoordinator, RedialResult
from pagechain.spider import SpiderLike

__all__ = (
    "RetryCounter",
    "RetryWhenContainsContentHandler",
    "RedialWhenContainsContentHandler",
    "RedialWhenExceptionThrowHandler",
    "RedialAndUpdateCookieWhenContainsContentHandler",
    "CycleRedialHandler",
)


def _redial_or_exit(coordinator: RedialCoordinator, spider: SpiderLike) -> RedialResult:
    result = coordinator.redial()
    if result is RedialResult.FAILED:
        spider_logger(spider.identity, "redial").error("Exit program because redial failed.")
        spider.exit()
    return result


class RetryCounter:
    """Pages seen since the last reset, compared against ``limit``.

    ``lock`` is re-entrant so a caller can hold it across :meth:`tick` and
    whatever it does when the counter fires.
    """

    def __init__(self, limit: int) -> None:
        self.limit = limit
        self.requested_count = 0
        self.lock = threading.RLock()

    def tick(self) -> bool:
        """Increment; on reaching a positive limit reset to 0 and return True."""
        with self.lock:
            self.requested_count += 1
            if self.limit > 0 and self.requested_count == self.limit:
                self.requested_count = 0
                return True
            return False


class RetryWhenContainsContentHandler(PageHandler):
    """Schedules the page's own request again when any marker shows up."""

    def __init__(self, *contents: str, name: Optional[str] = None) -> None:
        if not contents:
            raise ConfigurationError("Contents should not be empty/null.")
        super().__init__(name)
        self.contents = tuple(contents)

    def handle(self, page: Page, spider: SpiderLike) -> Page:
        if page is not None and page.content:
            if any(c in page.content for c in self.contents):
                page.add_target_request(page.request.clone())
        return page


class RedialWhenContainsContentHandler(PageHandler):
    def __init__(
        self,
        content: str,
        coordinator: RedialCoordinator,
        retry_queue: CycleRetryQueue,
        name: Optional[str] = None,
    ) -> None:
        super().__init__(name)
        self.content = content
        self.coordinator = coordinator
        self.retry_queue = retry_queue

    def handle(self, page: Page, spider: SpiderLike) -> Page:
        if page is None or not page.content or not self.content or self.content not in page.content:
            return page
        _redial_or_exit(self.coordinator, spider)
        page = self.retry_queue.add_to_cycle_retry(page.request, spider.site)
        page.exception = DownloadError(f"Content downloaded contains string: {self.content}.")
        return page


class RedialWhenExceptionThrowHandler(PageHandler):
    """Redials when the downloader's exception message contains ``exception_message``.

    Only pages that also carry content are considered.
    """

    def __init__(
        self,
        exception_message: str,
        coordinator: RedialCoordinator,
        retry_queue: CycleRetryQueue,
        name: Optional[str] = None,
    ) -> None:
        super().__init__(name)
        self.exception_message = exception_message or ""
        self.coordinator = coordinator
        self.retry_queue = retry_queue

    def handle(self, page: Page, spider: SpiderLike) -> Page:
        if page is None or not page.content or not self.exception_message or page.exception is None:
            return page
        if not self.exception_message:
            # unreachable behind the guard above
            page.exception = ConfigurationError("ExceptionMessage should not be empty/null.")
        if self.exception_message in str(page.exception):
            _redial_or_exit(self.coordinator, spider)
            page = self.retry_queue.add_to_cycle_retry(page.request, spider.site)
            page.exception = DownloadError("Download failed and redial finished already.")
        return page


class RedialAndUpdateCookieWhenContainsContentHandler(PageHandler):
    def __init__(
        self,
        content: str,
        cookie_injector: Optional[CookieInjector],
        coordinator: RedialCoordinator,
        retry_queue: CycleRetryQueue,
        name: Optional[str] = None,
    ) -> None:
        super().__init__(name)
        self.content = content
        self.cookie_injector = cookie_injector
        self.coordinator = coordinator
        self.retry_queue = retry_queue

    def handle(self, page: Page, spider: SpiderLike) -> Page:
        if (
            page is None
            or not page.content
            or not self.content
            or self.cookie_injector is None
            or self.content not in page.content
        ):
            return page
        _redial_or_exit(self.coordinator, spider)
        page = self.retry_queue.add_to_cycle_retry(page.request, spider.site)
        self.cookie_injector.inject(spider)
        page.exception = DownloadError(f"Content downloaded contains string: {self.content}.")
        return page


class CycleRedialHandler(PageHandler):
    """Redials after every ``limit`` pages.

    ``limit == 0`` switches the handler off. Pass the same ``counter`` to
    several instances to make them count together.
    """

    def __init__(
        self,
        limit: int,
        coordinator: RedialCoordinator,
        retry_queue: CycleRetryQueue,
        counter: Optional[RetryCounter] = None,
        name: Optional[str] = None,
    ) -> None:
        super().__init__(name)
        self.counter = counter if counter is not None else RetryCounter(limit)
        self.coordinator = coordinator
        self.retry_queue = retry_queue

    @property
    def limit(self) -> int:
        return self.counter.limit

    def handle(self, page: Page, spider: SpiderLike) -> Page:
        if self.counter.limit == 0:
            return page
        with self.counter.lock:
            if self.counter.tick():
                self.retry_queue.add_to_cycle_retry(page.request, spider.site)
                _redial_or_exit(self.coordinator, spider)
        return page
