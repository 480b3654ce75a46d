# pagechain/errors.py
"""
Exception taxonomy for the handler chain.
"""
from __future__ import annotations

__all__ = (
    "PageChainError",
    "ConfigurationError",
    "ContentMarkerError",
    "ExtractionError",
    "DownloadError",
)


class PageChainError(Exception):
    """Base class for every error raised or assigned by the chain."""


class ConfigurationError(PageChainError):
    """Invalid handler or chain setup. Not retried."""


class ContentMarkerError(PageChainError):
    """Downloaded content matched a configured abort marker."""

    def __init__(self, marker: str) -> None:
        super().__init__(f"Content downloaded contains string: {marker}.")
        self.marker = marker


class ExtractionError(PageChainError):
    """Sub content boundaries could not be computed."""


class DownloadError(PageChainError):
    """Assigned to ``Page.exception`` to mark a retry-eligible failure."""
