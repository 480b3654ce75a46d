# File: tests/test_cookies.py
import json

import pytest

from pagechain.cookies import FileCookieInjector, parse_cookie_string
from pagechain.errors import ContentMarkerError
from pagechain.handlers import UpdateCookieTimerHandler, UpdateCookieWhenContainsContentHandler


class FakeClock:
    def __init__(self, now: float = 100.0) -> None:
        self.now = now

    def __call__(self) -> float:
        return self.now


def test_update_cookie_when_contains_injects_then_raises(spider, make_page, injector):
    handler = UpdateCookieWhenContainsContentHandler("captcha", injector)
    with pytest.raises(ContentMarkerError) as exc_info:
        handler.handle(make_page("solve the captcha"), spider)
    assert injector.calls == 1
    assert exc_info.value.marker == "captcha"
    assert "captcha" in str(exc_info.value)


def test_update_cookie_when_contains_raises_even_without_marker(spider, make_page, injector):
    handler = UpdateCookieWhenContainsContentHandler("captcha", injector)
    with pytest.raises(ContentMarkerError):
        handler.handle(make_page("regular page"), spider)
    assert injector.calls == 0


def test_update_cookie_timer(spider, make_page, injector):
    clock = FakeClock()
    handler = UpdateCookieTimerHandler(30, injector, clock=clock)
    assert handler.next_time == 130.0

    handler.handle(make_page("x"), spider)
    assert injector.calls == 0

    clock.now = 130.0
    handler.handle(make_page("x"), spider)
    assert injector.calls == 0

    clock.now = 131.0
    page = make_page("x")
    assert handler.handle(page, spider) is page
    assert injector.calls == 1
    assert handler.next_time == 161.0

    clock.now = 150.0
    handler.handle(make_page("x"), spider)
    assert injector.calls == 1


def test_update_cookie_timer_is_per_instance(spider, make_page, injector):
    clock = FakeClock()
    first = UpdateCookieTimerHandler(10, injector, clock=clock)
    clock.now = 105.0
    second = UpdateCookieTimerHandler(10, injector, clock=clock)
    clock.now = 111.0
    first.handle(make_page("x"), spider)
    second.handle(make_page("x"), spider)
    assert injector.calls == 1


def test_parse_cookie_string():
    assert parse_cookie_string("a=1; b = 2;junk; =x; c=") == {"a": "1", "b": "2", "c": ""}


@pytest.mark.parametrize(
    "name,body",
    [
        ("cookies.txt", "session=abc; token=xyz"),
        ("cookies.json", json.dumps({"session": "abc", "token": "xyz"})),
        ("cookies.yaml", "session: abc\ntoken: xyz\n"),
    ],
)
def test_file_cookie_injector_formats(tmp_path, spider, name, body):
    path = tmp_path / name
    path.write_text(body, encoding="utf-8")
    FileCookieInjector(path).inject(spider)
    assert spider.site.cookies == {"session": "abc", "token": "xyz"}
    assert spider.site.cookie_header() == "session=abc; token=xyz"


def test_file_cookie_injector_missing_file_keeps_jar(tmp_path, spider):
    spider.site.set_cookies({"keep": "1"})
    FileCookieInjector(tmp_path / "missing.txt").inject(spider)
    assert spider.site.cookies == {"keep": "1"}


def test_file_cookie_injector_bad_mapping_keeps_jar(tmp_path, spider):
    path = tmp_path / "cookies.yaml"
    path.write_text("- a\n- b\n", encoding="utf-8")
    spider.site.set_cookies({"keep": "1"})
    FileCookieInjector(path).inject(spider)
    assert spider.site.cookies == {"keep": "1"}
