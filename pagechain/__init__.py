# pagechain/__init__.py
"""
PageChain package initializer.
Defines package version and exposes the core chain types.
The CLI lives in :mod:`pagechain.cli` (console script ``pagechain``).
"""
__version__ = "0.1.0"

from pagechain.chain import HandlerChain, PageHandler
from pagechain.models import Page, Request, Site
from pagechain.spider import Spider

__all__ = ["__version__", "HandlerChain", "PageHandler", "Page", "Request", "Site", "Spider"]
