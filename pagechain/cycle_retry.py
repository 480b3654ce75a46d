# pagechain/cycle_retry.py
"""
Очередь циклических повторов (cycle retry).

Хендлер, решивший, что страницу нужно скачать заново, передаёт запрос сюда.
Очередь клонирует запрос, увеличивает счётчик повторов и возвращает новую
страницу-обёртку с флагом ``cycle_retry``. Движок обхода забирает
накопленные запросы через :meth:`CycleRetryQueue.drain` в обход множества
уже посещённых URL.
"""
from __future__ import annotations

import threading
from collections import deque
from typing import Deque, List

from pagechain.logger import get_logger
from pagechain.models import Page, Request, Site

__all__ = ("CycleRetryQueue",)

_log = get_logger("cycle_retry")


class CycleRetryQueue:
    """Потокобезопасная очередь запросов на повторную загрузку."""

    def __init__(self) -> None:
        self._pending: Deque[Request] = deque()
        self._lock = threading.Lock()

    def add_to_cycle_retry(self, request: Request, site: Site) -> Page:
        """Ставит клон *request* в очередь и возвращает страницу-обёртку.

        Первый повтор разрешён всегда; дальнейшие — пока счётчик меньше
        ``site.cycle_retry_times``. При исчерпании лимита запрос не ставится,
        но страница всё равно помечена как повтор.
        """
        retry = request.clone()
        retry.cycle_tried_times += 1
        page = Page(request=retry, cycle_retry=True)

        if retry.cycle_tried_times > 1 and retry.cycle_tried_times >= site.cycle_retry_times:
            _log.warning(
                "Cycle retry limit %d reached for %s", site.cycle_retry_times, retry.url
            )
            return page

        with self._lock:
            self._pending.append(retry)
        _log.debug("Cycle retry #%d queued: %s", retry.cycle_tried_times, retry.url)
        return page

    def drain(self) -> List[Request]:
        """Забирает все накопленные запросы."""
        with self._lock:
            requests = list(self._pending)
            self._pending.clear()
        return requests

    def __len__(self) -> int:
        with self._lock:
            return len(self._pending)
