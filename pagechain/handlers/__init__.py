# pagechain/handlers/__init__.py
"""
Built-in page handlers and the registry used to build chains from config.
"""
from typing import Dict, Type

from pagechain.chain import PageHandler
from pagechain.handlers.content import (
    ContentToLowerHandler,
    ContentToUpperHandler,
    PatternMatchContentHandler,
    RemoveHtmlTagHandler,
    ReplaceContentHandler,
    SkipTargetUrlsWhenNotContainsContentHandler,
    SkipWhenContainsContentHandler,
    SubContentHandler,
    TrimContentHandler,
    UnescapeContentHandler,
)
from pagechain.handlers.cookies import UpdateCookieTimerHandler, UpdateCookieWhenContainsContentHandler
from pagechain.handlers.retry import (
    CycleRedialHandler,
    RedialAndUpdateCookieWhenContainsContentHandler,
    RedialWhenContainsContentHandler,
    RedialWhenExceptionThrowHandler,
    RetryCounter,
    RetryWhenContainsContentHandler,
)

HANDLER_TYPES: Dict[str, Type[PageHandler]] = {
    "to_upper": ContentToUpperHandler,
    "to_lower": ContentToLowerHandler,
    "trim": TrimContentHandler,
    "replace": ReplaceContentHandler,
    "unescape": UnescapeContentHandler,
    "pattern_match": PatternMatchContentHandler,
    "sub_content": SubContentHandler,
    "remove_html_tag": RemoveHtmlTagHandler,
    "skip_when_contains": SkipWhenContainsContentHandler,
    "skip_target_urls_when_not_contains": SkipTargetUrlsWhenNotContainsContentHandler,
    "update_cookie_when_contains": UpdateCookieWhenContainsContentHandler,
    "update_cookie_timer": UpdateCookieTimerHandler,
    "retry_when_contains": RetryWhenContainsContentHandler,
    "redial_when_contains": RedialWhenContainsContentHandler,
    "redial_when_exception": RedialWhenExceptionThrowHandler,
    "redial_and_update_cookie_when_contains": RedialAndUpdateCookieWhenContainsContentHandler,
    "cycle_redial": CycleRedialHandler,
}

__all__ = [
    "HANDLER_TYPES",
    "PageHandler",
    "RetryCounter",
    *(cls.__name__ for cls in HANDLER_TYPES.values()),
]
