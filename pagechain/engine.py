# File: pagechain/engine.py
"""pagechain.engine: сборка паука, общих сервисов и цепочки хендлеров из конфигурации."""

from __future__ import annotations

import inspect
from dataclasses import dataclass
from typing import Any, Dict, Iterable, List, Optional
from urllib.parse import urlparse

from pagechain.chain import HandlerChain
from pagechain.config import CrawlConfig, HandlerSpec
from pagechain.cookies import CookieInjector, FileCookieInjector
from pagechain.cycle_retry import CycleRetryQueue
from pagechain.errors import ConfigurationError
from pagechain.handlers import HANDLER_TYPES
from pagechain.logger import logger
from pagechain.models import Site
from pagechain.redial import CommandRedialExecutor, NetworkExecutor, NullRedialExecutor, RedialCoordinator
from pagechain.spider import Spider

__all__ = ["Services", "build_services", "build_chain", "build_spider"]


@dataclass(slots=True)
class Services:
    """Общие объекты, которые получают хендлеры при сборке цепочки."""

    coordinator: RedialCoordinator
    retry_queue: CycleRetryQueue
    cookie_injector: Optional[CookieInjector] = None

    def as_kwargs(self) -> Dict[str, Any]:
        return {
            "coordinator": self.coordinator,
            "retry_queue": self.retry_queue,
            "cookie_injector": self.cookie_injector,
        }


def build_services(
    config: CrawlConfig,
    executor: Optional[NetworkExecutor] = None,
    cookie_injector: Optional[CookieInjector] = None,
) -> Services:
    """Создаёт координатор редиала, очередь повторов и инжектор cookie."""
    if executor is None:
        if config.redial.command:
            executor = CommandRedialExecutor(config.redial.command, timeout=config.redial.timeout)
        else:
            executor = NullRedialExecutor()
    if cookie_injector is None and config.cookies.file is not None:
        cookie_injector = FileCookieInjector(config.cookies.file)
    return Services(
        coordinator=RedialCoordinator(executor),
        retry_queue=CycleRetryQueue(),
        cookie_injector=cookie_injector,
    )


def _build_handler(spec: HandlerSpec, services: Services):
    cls = HANDLER_TYPES[spec.type]
    options = spec.options
    params = inspect.signature(cls).parameters

    args: List[Any] = []
    if any(p.kind is inspect.Parameter.VAR_POSITIONAL for p in params.values()):
        contents = options.pop("contents", [])
        args = [contents] if isinstance(contents, str) else list(contents)

    for key, service in services.as_kwargs().items():
        if key in params and key not in options:
            options[key] = service

    try:
        return cls(*args, **options)
    except TypeError as exc:
        raise ConfigurationError(f"Неверные параметры хендлера '{spec.type}': {exc}") from exc


def build_chain(specs: Iterable[HandlerSpec], services: Services) -> HandlerChain:
    """Собирает HandlerChain в порядке, заданном в конфиге."""
    chain = HandlerChain(_build_handler(spec, services) for spec in specs)
    logger.debug("Handler chain: %s", " -> ".join(chain.names) or "<empty>")
    return chain


def build_spider(config: CrawlConfig) -> Spider:
    """Создаёт паука и его Site из конфигурации."""
    domain = urlparse(str(config.base_url)).netloc
    site = Site(
        domain=domain,
        user_agent=config.user_agent,
        timeout=config.timeout,
        cycle_retry_times=config.cycle_retry_times,
        headers=dict(config.headers),
    )
    return Spider(identity=config.identity or domain, site=site)

