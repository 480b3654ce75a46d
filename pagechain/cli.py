#!/usr/bin/env python3
"""
Точка входа для запуска PageChain через командную строку.

Команды:
  crawl     Запустить обход по конфигу, прогнать страницы через цепочку хендлеров
  config    Показать текущую конфигурацию
  handlers  Показать цепочку хендлеров из конфига и все доступные типы

Общие опции:
  --config PATH       Путь к YAML/JSON-конфигу (default: configs/default.yaml)
  --limit INT         Макс. число страниц (override max_pages)
  --log-level LEVEL   Уровень логирования (DEBUG, INFO, ...)
  --log-file PATH     Файл для логов (stdout, если не указан)
  --log-format FORMAT Формат логирования

Команда crawl опции:
  --json PATH         Сохранить JSON-отчёт в файл
  --pretty            Преформатировать JSON-вывод (отступ 2)
  --crawl-timeout SEC Таймаут всего обхода (секунд)

Коды выхода: 0 — успех, 1 — ошибка, 2 — обход остановлен пауком (редиал не удался).

Пример:
  pagechain --config configs/default.yaml crawl --json report.json --limit 100
"""
import asyncio
import json
import sys
from pathlib import Path

import click

from pagechain import __version__
from pagechain.config import load_config
from pagechain.engine import build_chain, build_services
from pagechain.handlers import HANDLER_TYPES
from pagechain.logger import init_logging
from pagechain.report.json_report import build_report, render_json
from pagechain.scanner import start_crawl

CONTEXT_SETTINGS = dict(help_option_names=["--help"])

EXIT_TERMINATED = 2


def print_error(message: str, code: int = 1):
    click.secho(message, fg='red', err=True)
    sys.exit(code)


@click.group(context_settings=CONTEXT_SETTINGS)
@click.version_option(__version__, '--version', '-v', message='PageChain, version %(version)s')
@click.option(
    '--config', '-c', 'config_path',
    default='configs/default.yaml',
    show_default=True,
    type=click.Path(exists=True, dir_okay=False, path_type=Path),
    help='Путь к файлу конфигурации YAML/JSON.'
)
@click.option(
    '--limit', '-l', 'limit',
    type=int,
    default=None,
    help='Макс. число страниц (override max_pages)'
)
@click.option(
    '--log-level', 'log_level',
    default='INFO', show_default=True,
    type=click.Choice(['DEBUG', 'INFO', 'WARNING', 'ERROR', 'CRITICAL']),
    help='Уровень логирования'
)
@click.option(
    '--log-file', 'log_file',
    default=None,
    type=click.Path(writable=True, dir_okay=False, path_type=Path),
    help='Путь к файлу логов (stdout, если не указан)'
)
@click.option(
    '--log-format', 'log_format',
    default='%(asctime)s %(levelname)s %(name)s %(message)s',
    show_default=True,
    help='Строка формата для логов'
)
@click.pass_context
def cli(ctx, config_path, limit, log_level, log_file, log_format):
    """Группа команд PageChain CLI."""
    init_logging(
        level=log_level,
        log_file=str(log_file) if log_file else None,
        log_format=log_format
    )
    try:
        cfg = load_config(config_path)
    except Exception as e:
        print_error(f'Ошибка загрузки конфигурации: {e}')
    if limit is not None:
        cfg = cfg.model_copy(update={'max_pages': limit})
    ctx.ensure_object(dict)
    ctx.obj['config'] = cfg


@cli.command('crawl', context_settings=CONTEXT_SETTINGS)
@click.option(
    '--json', '-j', 'json_output',
    default=None,
    type=click.Path(writable=True, dir_okay=False, path_type=Path),
    help='Сохранить JSON-отчёт в файл'
)
@click.option(
    '--pretty', is_flag=True,
    help='Преформатировать JSON-вывод (отступ 2)'
)
@click.option(
    '--crawl-timeout', 'crawl_timeout',
    type=float,
    default=None,
    help='Таймаут всего обхода (секунд)'
)
@click.pass_context
def crawl(ctx, json_output, pretty, crawl_timeout):
    """Запустить обход и вывести/сохранить результаты."""
    cfg = ctx.obj['config']
    try:
        if crawl_timeout:
            result = asyncio.run(
                asyncio.wait_for(start_crawl(cfg), timeout=crawl_timeout)
            )
        else:
            result = asyncio.run(start_crawl(cfg))
    except asyncio.TimeoutError:
        print_error(f'Обход не завершён за {crawl_timeout} секунд')
    except Exception as e:
        print_error(f'Ошибка при обходе: {e}')

    if json_output:
        try:
            saved_json = render_json(result, json_output, pretty=pretty)
            click.echo(f'JSON report: {saved_json}')
        except OSError as e:
            print_error(f'Ошибка при сохранении JSON: {e}')
    else:
        indent = 2 if pretty else None
        click.echo(json.dumps(build_report(result), ensure_ascii=False, indent=indent))

    if result.terminated:
        print_error(
            f'Обход остановлен пауком {result.spider.identity}: {result.spider.exit_reason}',
            code=EXIT_TERMINATED,
        )


@cli.command('config', context_settings=CONTEXT_SETTINGS)
@click.pass_context
def show_config(ctx):
    """Показать текущую конфигурацию в JSON."""
    cfg = ctx.obj['config']
    click.echo(cfg.model_dump_json(indent=2))


@cli.command('handlers', context_settings=CONTEXT_SETTINGS)
@click.pass_context
def show_handlers(ctx):
    """Показать цепочку из конфига и доступные типы хендлеров."""
    cfg = ctx.obj['config']
    try:
        chain = build_chain(cfg.handlers, build_services(cfg))
    except Exception as e:
        print_error(f'Ошибка сборки цепочки: {e}')
    click.echo('Chain:')
    for i, name in enumerate(chain.names, 1):
        click.echo(f'  {i}. {name}')
    click.echo('Available:')
    for key, handler_cls in sorted(HANDLER_TYPES.items()):
        click.echo(f'  {key:<40} {handler_cls.__name__}')


if __name__ == "__main__":
    cli()
