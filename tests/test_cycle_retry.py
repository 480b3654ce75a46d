# File: tests/test_cycle_retry.py
import threading

from pagechain.cycle_retry import CycleRetryQueue
from pagechain.models import Request, Site


def test_add_to_cycle_retry_wraps_clone():
    queue = CycleRetryQueue()
    request = Request(url="http://example.com/a", depth=2, extras={"k": [1]})

    page = queue.add_to_cycle_retry(request, Site(domain="example.com"))

    assert page.cycle_retry is True
    assert page.request is not request
    assert page.request.url == request.url
    assert page.request.depth == 2
    assert page.request.cycle_tried_times == 1
    assert request.cycle_tried_times == 0
    page.request.extras["k"].append(2)
    assert request.extras["k"] == [1]
    assert page.content == ""
    assert page.target_requests == []
    assert len(queue) == 1


def test_drain_empties_queue():
    queue = CycleRetryQueue()
    site = Site(domain="example.com")
    queue.add_to_cycle_retry(Request(url="http://example.com/1"), site)
    queue.add_to_cycle_retry(Request(url="http://example.com/2"), site)

    drained = queue.drain()

    assert [r.url for r in drained] == ["http://example.com/1", "http://example.com/2"]
    assert queue.drain() == []
    assert len(queue) == 0


def test_cycle_retry_budget():
    queue = CycleRetryQueue()
    site = Site(domain="example.com", cycle_retry_times=3)
    request = Request(url="http://example.com/")

    first = queue.add_to_cycle_retry(request, site)
    second = queue.add_to_cycle_retry(first.request, site)
    third = queue.add_to_cycle_retry(second.request, site)

    assert third.request.cycle_tried_times == 3
    assert third.cycle_retry is True
    assert [r.cycle_tried_times for r in queue.drain()] == [1, 2]


def test_first_retry_always_allowed():
    queue = CycleRetryQueue()
    queue.add_to_cycle_retry(Request(url="http://example.com/"), Site(domain="example.com", cycle_retry_times=1))
    assert len(queue) == 1


def test_concurrent_adds_are_not_lost():
    queue = CycleRetryQueue()
    site = Site(domain="example.com")

    def work(i):
        for j in range(100):
            queue.add_to_cycle_retry(Request(url=f"http://example.com/{i}/{j}"), site)

    threads = [threading.Thread(target=work, args=(i,)) for i in range(8)]
    for t in threads:
        t.start()
    for t in threads:
        t.join()
    assert len(queue.drain()) == 800
