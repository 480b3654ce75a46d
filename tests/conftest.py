# File: tests/conftest.py
import logging
import threading
from typing import List

import pytest

from pagechain.cycle_retry import CycleRetryQueue
from pagechain.logger import LOGGER_NAME
from pagechain.models import Page, Request, Site
from pagechain.redial import RedialCoordinator, RedialResult


class FakeSpider:
    """Spider double that counts exit() calls instead of stopping anything."""

    def __init__(self, identity: str = "test-spider", site: Site | None = None) -> None:
        self.identity = identity
        self.site = site or Site(domain="example.com")
        self.exit_calls = 0
        self._lock = threading.Lock()

    def exit(self) -> None:
        with self._lock:
            self.exit_calls += 1


class FakeExecutor:
    """Returns queued results (last one repeats); counts redials."""

    def __init__(self, *results: RedialResult) -> None:
        self.results: List[RedialResult] = list(results) or [RedialResult.SUCCESS]
        self.calls = 0
        self.started = threading.Event()
        self.release = threading.Event()
        self.release.set()

    def redial(self) -> RedialResult:
        self.calls += 1
        self.started.set()
        self.release.wait(timeout=5)
        if len(self.results) > 1:
            return self.results.pop(0)
        return self.results[0]


class FakeInjector:
    def __init__(self) -> None:
        self.calls = 0

    def inject(self, spider) -> None:
        self.calls += 1
        spider.site.set_cookies({"session": f"s{self.calls}"})


@pytest.fixture(autouse=True)
def reset_project_logger():
    """The CLI reconfigures the project logger; give every test a clean one."""
    yield
    lg = logging.getLogger(LOGGER_NAME)
    lg.handlers.clear()
    lg.propagate = True
    lg.setLevel(logging.NOTSET)


@pytest.fixture()
def spider() -> FakeSpider:
    return FakeSpider()


@pytest.fixture()
def executor() -> FakeExecutor:
    return FakeExecutor()


@pytest.fixture()
def coordinator(executor) -> RedialCoordinator:
    return RedialCoordinator(executor)


@pytest.fixture()
def retry_queue() -> CycleRetryQueue:
    return CycleRetryQueue()


@pytest.fixture()
def injector() -> FakeInjector:
    return FakeInjector()


@pytest.fixture()
def make_page():
    """Factory: make_page("content", url=..., exception=...)."""

    def _make(content: str = "", url: str = "http://example.com/", **kwargs) -> Page:
        return Page(request=Request(url=url), content=content, **kwargs)

    return _make
