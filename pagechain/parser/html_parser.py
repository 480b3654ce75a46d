"""HTML text extraction for PageChain.

``RemoveHtmlTagHandler`` does not parse HTML itself; it delegates to a
text-extraction callable, by default :func:`extract_visible_text`.

* Markup is parsed with BeautifulSoup (``html.parser`` backend).
* Non-visible containers (<script>, <style>, <noscript>, <template>) are
  dropped before the text is collected.
* Text nodes are stripped and joined with single spaces.
"""
from __future__ import annotations

from collections.abc import Sequence
from typing import Callable

from bs4 import BeautifulSoup

__all__: Sequence[str] = ("TextExtractor", "extract_visible_text")

TextExtractor = Callable[[str], str]

_INVISIBLE_TAGS = ("script", "style", "noscript", "template")


def extract_visible_text(html: str) -> str:
    """Return the visible text of *html*."""
    soup = BeautifulSoup(html, "html.parser")
    for element in soup(list(_INVISIBLE_TAGS)):
        element.decompose()
    return " ".join(t.strip() for t in soup.stripped_strings)
