# File: tests/test_chain.py
import pytest

from pagechain.chain import HandlerChain, PageHandler
from pagechain.errors import ContentMarkerError
from pagechain.handlers import (
    ContentToLowerHandler,
    RedialWhenContainsContentHandler,
    ReplaceContentHandler,
    SkipWhenContainsContentHandler,
    TrimContentHandler,
    UpdateCookieWhenContainsContentHandler,
)
from pagechain.models import Page, Request, Site
from pagechain.spider import Spider


class Recorder(PageHandler):
    def __init__(self, log, tag):
        super().__init__(name=f"rec-{tag}")
        self.log = log
        self.tag = tag

    def handle(self, page, spider):
        self.log.append((self.tag, page))
        return page


def test_handlers_run_in_order(spider, make_page):
    log = []
    chain = HandlerChain([Recorder(log, 1), Recorder(log, 2)]).append(Recorder(log, 3))
    page = make_page("x")

    assert chain.run(page, spider) is page
    assert [tag for tag, _ in log] == [1, 2, 3]
    assert chain.names == ["rec-1", "rec-2", "rec-3"]
    assert len(chain) == 3


def test_default_handler_name():
    assert TrimContentHandler().name == "TrimContentHandler"
    assert TrimContentHandler(name="trim").name == "trim"


def test_order_decides_case_sensitive_match(spider, make_page):
    before = HandlerChain([SkipWhenContainsContentHandler("Banned"), ContentToLowerHandler()])
    after = HandlerChain([ContentToLowerHandler(), SkipWhenContainsContentHandler("Banned")])
    assert before.run(make_page("Banned user"), spider).skip is True
    assert after.run(make_page("Banned user"), spider).skip is False


def test_replacement_page_flows_to_later_handlers(spider, make_page, coordinator, retry_queue):
    log = []
    chain = HandlerChain([
        RedialWhenContainsContentHandler("relogin", coordinator, retry_queue),
        Recorder(log, "after"),
    ])
    original = make_page("relogin")

    result = chain.run(original, spider)

    assert result is not original
    assert result.cycle_retry is True
    assert log[0][1] is result


def test_exception_aborts_rest_of_chain(spider, make_page):
    log = []
    chain = HandlerChain([
        ReplaceContentHandler("a", "b"),
        UpdateCookieWhenContainsContentHandler("captcha"),
        Recorder(log, "never"),
    ])
    with pytest.raises(ContentMarkerError):
        chain.run(make_page("aaa"), spider)
    assert log == []


def test_chain_with_real_spider():
    site = Site(domain="example.com")
    spider = Spider("example", site)
    chain = HandlerChain([TrimContentHandler(), ContentToLowerHandler()])
    page = chain.run(Page(request=Request(url="http://example.com/"), content="  ABC  "), spider)
    assert page.content == "abc"
    assert spider.exited is False


def test_spider_exit_is_one_way_and_idempotent():
    spider = Spider("example", Site(domain="example.com"))
    spider.exit("redial failed")
    spider.exit("second call")
    assert spider.exited is True
    assert spider.exit_reason == "redial failed"
