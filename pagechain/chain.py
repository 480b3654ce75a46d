# pagechain/chain.py
"""
Handler interface and the ordered chain that runs it once per downloaded page.
"""
from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Iterable, Iterator, List, Optional

from pagechain.logger import get_logger
from pagechain.models import Page
from pagechain.spider import SpiderLike

__all__ = ("PageHandler", "HandlerChain")

_log = get_logger("chain")


class PageHandler(ABC):
    """One pluggable unit of post-fetch processing.

    ``handle`` returns the page to pass on. Most handlers return the page they
    received; retry handlers may return a replacement.
    """

    def __init__(self, name: Optional[str] = None) -> None:
        self._name = name

    @property
    def name(self) -> str:
        return self._name or type(self).__name__

    @abstractmethod
    def handle(self, page: Page, spider: SpiderLike) -> Page:
        raise NotImplementedError

    def __repr__(self) -> str:
        return f"<{self.name}>"


class HandlerChain:
    """Statically ordered handlers applied once per page.

    There is no central short-circuit: a handler that wants later stages to
    back off says so through page flags. An exception raised by a handler
    propagates and aborts the rest of the chain for that page only.
    """

    def __init__(self, handlers: Iterable[PageHandler] = ()) -> None:
        self._handlers: List[PageHandler] = list(handlers)

    def append(self, handler: PageHandler) -> HandlerChain:
        self._handlers.append(handler)
        return self

    @property
    def names(self) -> List[str]:
        return [h.name for h in self._handlers]

    def run(self, page: Page, spider: SpiderLike) -> Page:
        for handler in self._handlers:
            replaced = handler.handle(page, spider)
            if replaced is not page:
                _log.debug("%s replaced the page", handler.name)
            page = replaced
        return page

    def __iter__(self) -> Iterator[PageHandler]:
        return iter(self._handlers)

    def __len__(self) -> int:
        return len(self._handlers)
