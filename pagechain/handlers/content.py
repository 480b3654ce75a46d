# pagechain/handlers/content.py
"""
Content-mutation handlers.

Every handler here leaves ``None`` pages and empty content alone. Order in
the chain matters: a handler that matches on original casing has to run
before ``ContentToUpperHandler``/``ContentToLowerHandler``.
"""
from __future__ import annotations

import re
from typing import Optional

from pagechain.chain import PageHandler
from pagechain.errors import ExtractionError
from pagechain.models import Page
from pagechain.parser.html_parser import TextExtractor, extract_visible_text
from pagechain.spider import SpiderLike

__all__ = (
    "ContentToUpperHandler",
    "ContentToLowerHandler",
    "TrimContentHandler",
    "ReplaceContentHandler",
    "UnescapeContentHandler",
    "PatternMatchContentHandler",
    "SubContentHandler",
    "RemoveHtmlTagHandler",
    "SkipWhenContainsContentHandler",
    "SkipTargetUrlsWhenNotContainsContentHandler",
    "unescape_text",
)


def _has_content(page: Optional[Page]) -> bool:
    return page is not None and bool(page.content)


class ContentToUpperHandler(PageHandler):
    def handle(self, page: Page, spider: SpiderLike) -> Page:
        if _has_content(page):
            page.content = page.content.upper()
        return page


class ContentToLowerHandler(PageHandler):
    def handle(self, page: Page, spider: SpiderLike) -> Page:
        if _has_content(page):
            page.content = page.content.lower()
        return page


class TrimContentHandler(PageHandler):
    def handle(self, page: Page, spider: SpiderLike) -> Page:
        if _has_content(page):
            page.content = page.content.strip()
        return page


class ReplaceContentHandler(PageHandler):
    def __init__(self, old_value: str, new_value: str = "", name: Optional[str] = None) -> None:
        super().__init__(name)
        self.old_value = old_value
        self.new_value = new_value

    def handle(self, page: Page, spider: SpiderLike) -> Page:
        if _has_content(page):
            page.content = page.content.replace(self.old_value, self.new_value)
        return page


_ESCAPE_RE = re.compile(
    r"\\(?:x([0-9a-fA-F]{2})|u([0-9a-fA-F]{4})|([0-7]{1,3})|c([A-Za-z])|(.))",
    re.DOTALL,
)
_SIMPLE_ESCAPES = {
    "a": "\a",
    "b": "\b",
    "e": "\x1b",
    "f": "\f",
    "n": "\n",
    "r": "\r",
    "t": "\t",
    "v": "\v",
}


def _unescape_match(match: re.Match[str]) -> str:
    hex2, hex4, octal, control, char = match.groups()
    if hex2 or hex4:
        return chr(int(hex2 or hex4, 16))
    if octal:
        return chr(int(octal, 8) & 0xFF)
    if control:
        return chr(ord(control.upper()) - 64)
    return _SIMPLE_ESCAPES.get(char, char)


def unescape_text(text: str) -> str:
    r"""Resolve regex-style escapes: ``\n``, ``\t``, ``\u0041``, ``\x41``, ``\.`` ..."""
    return _ESCAPE_RE.sub(_unescape_match, text)


class UnescapeContentHandler(PageHandler):
    def handle(self, page: Page, spider: SpiderLike) -> Page:
        if _has_content(page):
            page.content = unescape_text(page.content)
        return page


class PatternMatchContentHandler(PageHandler):
    """Keeps only the matched text: all non-overlapping matches, concatenated.

    No match leaves the page with empty content.
    """

    def __init__(self, pattern: str, name: Optional[str] = None) -> None:
        super().__init__(name)
        self.pattern = re.compile(pattern, re.MULTILINE | re.IGNORECASE)

    def handle(self, page: Page, spider: SpiderLike) -> Page:
        if not _has_content(page):
            return page
        page.content = "".join(m.group(0) for m in self.pattern.finditer(page.content))
        return page


class SubContentHandler(PageHandler):
    """Cuts the content down to the window between two markers.

    The end marker is searched from the start marker's position and is
    included in the window. Offsets shift the window: ``start_offset`` moves
    the beginning right, ``end_offset`` moves the end left.
    """

    def __init__(
        self,
        start_part: str,
        end_part: str,
        start_offset: int = 0,
        end_offset: int = 0,
        name: Optional[str] = None,
    ) -> None:
        super().__init__(name)
        self.start_part = start_part
        self.end_part = end_part
        self.start_offset = start_offset
        self.end_offset = end_offset

    def handle(self, page: Page, spider: SpiderLike) -> Page:
        if not _has_content(page):
            return page

        raw = page.content
        begin = raw.find(self.start_part)
        if begin < 0:
            raise ExtractionError(f"Sub content failed: start part {self.start_part!r} not found.")
        end = raw.find(self.end_part, begin)
        if end < 0:
            raise ExtractionError(f"Sub content failed: end part {self.end_part!r} not found.")
        length = end - begin

        begin += self.start_offset
        length -= self.start_offset
        length -= self.end_offset
        length += len(self.end_part)

        if begin < 0 or length < 0 or begin + length > len(raw):
            raise ExtractionError("Sub content failed. Please check your settings.")
        page.content = raw[begin:begin + length].strip()
        return page


class RemoveHtmlTagHandler(PageHandler):
    def __init__(self, text_extractor: TextExtractor = extract_visible_text, name: Optional[str] = None) -> None:
        super().__init__(name)
        self.text_extractor = text_extractor

    def handle(self, page: Page, spider: SpiderLike) -> Page:
        if _has_content(page):
            page.content = self.text_extractor(page.content)
        return page


class SkipWhenContainsContentHandler(PageHandler):
    """Always assigns ``page.skip``: True iff content contains the marker."""

    def __init__(self, content: str, name: Optional[str] = None) -> None:
        super().__init__(name)
        self.content = content

    def handle(self, page: Page, spider: SpiderLike) -> Page:
        if page is None:
            return page
        page.skip = bool(page.content) and self.content in page.content
        return page


class SkipTargetUrlsWhenNotContainsContentHandler(PageHandler):
    """Stops link discovery on pages that lack the marker. Never clears the flags."""

    def __init__(self, content: str, name: Optional[str] = None) -> None:
        super().__init__(name)
        self.content = content

    def handle(self, page: Page, spider: SpiderLike) -> Page:
        if _has_content(page) and self.content not in page.content:
            page.skip_extract_target_urls = True
            page.skip_target_urls = True
        return page
