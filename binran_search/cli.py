#!/usr/bin/env python3
"""
Точка входа BinranSearch для командной строки.

Команды:
  crawl     Обойти раздел сайта, сохранить тексты и JSON-индекс
  search    Выполнить запрос к готовому индексу
  serve     Запустить веб-интерфейс поиска
  config    Показать текущую конфигурацию

Общие опции:
  --config PATH       Путь к YAML/JSON-конфигу (по умолчанию configs/default.yaml, если есть)
  --log-level LEVEL   Уровень логирования (DEBUG, INFO, ...)
  --log-file PATH     Файл для логов (stdout, если не указан)
  --log-format FORMAT Формат логирования

Дополнительно:
  --version, -v       Показать версию BinranSearch

Пример:
  binran-search crawl
  binran-search search 履修 --index text-20250412/index-20250412.json
"""
import asyncio
import sys
from pathlib import Path

import click

from binran_search import __version__
from binran_search.config import load_config
from binran_search.engine import start_crawl
from binran_search.logger import configure as configure_logging
from binran_search.search.index import SearchIndex
from binran_search.search.webapp import run as run_webapp

CONTEXT_SETTINGS = dict(help_option_names=["--help", "-h"])


def print_error(message: str):
    click.secho(message, fg='red', err=True)
    sys.exit(1)


@click.group(context_settings=CONTEXT_SETTINGS)
@click.version_option(__version__, '--version', '-v', message='BinranSearch, version %(version)s')
@click.option(
    '--config', '-c', 'config_path',
    default=None,
    type=click.Path(exists=True, dir_okay=False, path_type=Path),
    help='Путь к файлу конфигурации YAML или JSON.'
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
    default='%(asctime)s %(levelname)s %(message)s',
    show_default=True,
    help='Строка формата для логов'
)
@click.pass_context
def cli(ctx, config_path, log_level, log_file, log_format):
    """Группа команд BinranSearch CLI."""
    configure_logging(
        level=log_level,
        log_file=str(log_file) if log_file else None,
        log_format=log_format
    )
    ctx.ensure_object(dict)
    ctx.obj['config_path'] = config_path


def _config(ctx):
    try:
        return load_config(ctx.obj['config_path'])
    except Exception as e:
        print_error(f'Ошибка загрузки конфигурации: {e}')


@cli.command('crawl', context_settings=CONTEXT_SETTINGS)
@click.option(
    '--output-root', '-o', 'output_root',
    default=None,
    type=click.Path(file_okay=False, path_type=Path),
    help='Каталог, в котором создаётся text-YYYYMMDD (override output_root)'
)
@click.pass_context
def crawl(ctx, output_root):
    """Обойти сайт, сохранить тексты страниц и JSON-индекс."""
    cfg = _config(ctx)
    if output_root is not None:
        cfg = cfg.model_copy(update={'output_root': output_root})
    click.echo(f'Starting crawl with config: {cfg.start_url}')
    try:
        result = asyncio.run(start_crawl(cfg))
    except OSError as e:
        print_error(f'Не удалось создать каталог вывода: {e}')
    except Exception as e:
        print_error(f'Ошибка при обходе: {e}')

    click.echo(f'Pages visited: {result.visited}, extracted: {len(result.records)}')
    click.echo(f'Text files: {result.output_dir}')
    if result.index_path:
        click.echo(f'JSON index: {result.index_path}')
    else:
        click.echo('JSON index: not written')


def _snippet(result, width=200):
    """Первые width символов содержимого с подсвеченными совпадениями."""
    out, used = [], 0
    for part, match in result.highlighted():
        part = ' '.join(part.split()) if not match else part
        part = part[:width - used]
        out.append(click.style(part, bold=True, fg='yellow') if match else part)
        used += len(part)
        if used >= width:
            break
    return ''.join(out)


@cli.command('search', context_settings=CONTEXT_SETTINGS)
@click.argument('query')
@click.option(
    '--index', '-i', 'index_path',
    required=True,
    type=click.Path(exists=True, dir_okay=False, path_type=Path),
    help='JSON-индекс, созданный командой crawl'
)
@click.option('--limit', '-l', 'limit', type=int, default=10, show_default=True, help='Макс. число результатов')
@click.option('--prefix', is_flag=True, help='Искать также по префиксу слов')
def search(query, index_path, limit, prefix):
    """Найти страницы по запросу QUERY."""
    index = SearchIndex.load(index_path)
    results = index.search(query, prefix=prefix)
    if not results:
        click.echo('No results')
        return
    for result in results[:limit]:
        click.echo(click.style(result.url, fg='blue') + f'  ({result.score:.2f})')
        click.echo('  ' + _snippet(result))


@cli.command('serve', context_settings=CONTEXT_SETTINGS)
@click.option(
    '--index', '-i', 'index_path',
    required=True,
    type=click.Path(dir_okay=False, path_type=Path),
    help='JSON-индекс, который отдаёт веб-интерфейс'
)
@click.option('--host', default='127.0.0.1', show_default=True, help='Адрес для прослушивания')
@click.option('--port', '-p', default=8080, show_default=True, type=int, help='Порт')
def serve(index_path, host, port):
    """Запустить веб-интерфейс поиска."""
    run_webapp(index_path, host=host, port=port)


@cli.command('config', context_settings=CONTEXT_SETTINGS)
@click.pass_context
def show_config(ctx):
    """Показать текущую конфигурацию в JSON."""
    cfg = _config(ctx)
    click.echo(cfg.model_dump_json(indent=2))


if __name__ == "__main__":
    cli()
