# pagechain/models.py
"""
Data models shared by the chain and the crawl engine.
"""
from __future__ import annotations

import copy
from dataclasses import dataclass, field
from typing import Any, Dict, List, Mapping, Optional

__all__ = ("Request", "Page", "Site")


@dataclass(slots=True)
class Request:
    """One fetch attempt: URL plus crawl metadata."""

    url: str
    depth: int = 0
    referer: Optional[str] = None
    cycle_tried_times: int = 0
    extras: Dict[str, Any] = field(default_factory=dict)

    def clone(self) -> Request:
        """Deep copy, so a retried attempt never aliases the original."""
        return Request(
            url=self.url,
            depth=self.depth,
            referer=self.referer,
            cycle_tried_times=self.cycle_tried_times,
            extras=copy.deepcopy(self.extras),
        )


@dataclass(slots=True)
class Page:
    """Result of a fetch, threaded through the handler chain."""

    request: Request
    content: str = ""
    status: Optional[int] = None
    exception: Optional[BaseException] = None
    skip: bool = False
    skip_extract_target_urls: bool = False
    skip_target_urls: bool = False
    cycle_retry: bool = False
    target_requests: List[Request] = field(default_factory=list)

    @property
    def url(self) -> str:
        return self.request.url

    def add_target_request(self, request: Request) -> None:
        self.target_requests.append(request)


@dataclass(slots=True)
class Site:
    """Per-crawl site settings addressed by handlers through the spider."""

    domain: str
    user_agent: str = "PageChainBot/1.0"
    timeout: float = 10.0
    cycle_retry_times: int = 5
    headers: Dict[str, str] = field(default_factory=dict)
    cookies: Dict[str, str] = field(default_factory=dict)

    def set_cookies(self, cookies: Mapping[str, str]) -> None:
        # Replace the whole jar so concurrent fetches never see a half-updated dict.
        self.cookies = dict(cookies)

    def cookie_header(self) -> str:
        return "; ".join(f"{name}={value}" for name, value in self.cookies.items())
