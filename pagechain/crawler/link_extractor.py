# pagechain/crawler/link_extractor.py
"""
Link extraction and URL normalization utilities for the reference crawler.
"""
from __future__ import annotations

import posixpath
from typing import List
from urllib.parse import parse_qsl, quote, unquote, urlencode, urljoin, urlparse, urlunparse

from bs4 import BeautifulSoup
from bs4.element import Tag

from pagechain.models import Page


def extract_links(page: Page) -> List[str]:
    """
    Extract internal HTTP(S) links from the page content, normalized.

    Ignores mailto:, javascript:, external domains.
    """
    soup = BeautifulSoup(page.content, "html.parser")
    base_netloc = urlparse(page.url).netloc
    links: List[str] = []
    for tag in soup.find_all("a", href=True):
        if not isinstance(tag, Tag):
            continue
        href_val = tag.get("href")
        if not isinstance(href_val, str):
            continue
        raw = href_val.strip()
        if raw.startswith(("mailto:", "javascript:")):
            continue
        absolute = urljoin(page.url, raw)
        parsed = urlparse(absolute)
        if parsed.scheme in ("http", "https") and parsed.netloc == base_netloc:
            links.append(normalize_url(absolute))
    return links


def normalize_url(url: str) -> str:
    """
    Normalize URL: lowercase scheme and netloc, collapse the path,
    sort query parameters, drop the fragment.
    """
    parsed = urlparse(url)
    scheme = parsed.scheme.lower()
    netloc = parsed.netloc.lower()
    path = unquote(parsed.path or "/")
    norm = posixpath.normpath(path)
    if parsed.path.endswith("/") and not norm.endswith("/"):
        norm += "/"
    if not norm.startswith("/"):
        norm = "/" + norm
    norm = quote(norm, safe="/")
    qs = parse_qsl(parsed.query, keep_blank_values=True)
    qs.sort()
    query = urlencode(qs, doseq=True)
    return urlunparse((scheme, netloc, norm, "", query, ""))
