# === FILE: edge_esi/cli.py ===
#!/usr/bin/env python3
"""
Точка входа EdgeESI для командной строки.

Команды:
  serve     Раздавать статику с обработкой ESI
  render    Разрешить ESI-маркеры в локальном HTML-файле и вывести результат
  config    Показать текущую конфигурацию

Общие опции:
  --config PATH       Путь к YAML/JSON-конфигу (default: configs/default.yaml, если есть)
  --log-level LEVEL   Уровень логирования (DEBUG, INFO, ...)
  --log-file PATH     Файл для логов (stdout, если не указан)
  --log-format FORMAT Формат логирования

Дополнительно:
  --version, -v       Показать версию EdgeESI

Пример:
  edge-esi serve --root public --port 8080
  edge-esi render public/index.html --base-url http://localhost:8080/
"""
import sys
import asyncio
from pathlib import Path

import click
from aiohttp import web

from edge_esi import __version__
from edge_esi.app import make_app
from edge_esi.config import load_config
from edge_esi.engine import render_document
from edge_esi.logger import init_logging

CONTEXT_SETTINGS = dict(help_option_names=["--help"])

# module-level alias so tests can monkeypatch the server start
run_app = web.run_app


def print_error(message: str):
    click.secho(message, fg='red', err=True)
    sys.exit(1)


@click.group(context_settings=CONTEXT_SETTINGS)
@click.version_option(__version__, '--version', '-v', message='EdgeESI, version %(version)s')
@click.option(
    '--config', '-c', 'config_path',
    default=None,
    type=click.Path(exists=True, dir_okay=False, path_type=Path),
    help='Путь к файлу конфигурации YAML/JSON.'
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
    """Группа команд EdgeESI CLI."""
    init_logging(
        level=log_level,
        log_file=str(log_file) if log_file else None,
        log_format=log_format
    )
    try:
        cfg = load_config(config_path)
    except Exception as e:
        print_error(f'Ошибка загрузки конфигурации: {e}')
    ctx.ensure_object(dict)
    ctx.obj['config'] = cfg


@cli.command('serve', context_settings=CONTEXT_SETTINGS)
@click.option('--host', default=None, help='Адрес (override host)')
@click.option('--port', '-p', type=int, default=None, help='Порт (override port)')
@click.option(
    '--root', '-r', 'root',
    default=None,
    type=click.Path(exists=True, file_okay=False, path_type=Path),
    help='Каталог со статикой (override asset_root)'
)
@click.pass_context
def serve(ctx, host, port, root):
    """Запустить сервер статики с обработкой ESI."""
    cfg = ctx.obj['config']
    overrides = {k: v for k, v in (('host', host), ('port', port), ('asset_root', root)) if v is not None}
    if overrides:
        cfg = cfg.model_copy(update=overrides)
    if not Path(cfg.asset_root).is_dir():
        print_error(f'Каталог статики не найден: {cfg.asset_root}')
    click.echo(f'Serving {cfg.asset_root} on http://{cfg.host}:{cfg.port}')
    run_app(make_app(cfg), host=cfg.host, port=cfg.port)


@cli.command('render', context_settings=CONTEXT_SETTINGS)
@click.argument('source', type=click.Path(exists=True, dir_okay=False, path_type=Path))
@click.option('--base-url', '-b', 'base_url', required=True, help='URL для разрешения относительных src')
@click.option(
    '--output', '-o', 'output',
    default=None,
    type=click.Path(writable=True, dir_okay=False, path_type=Path),
    help='Сохранить результат в файл'
)
@click.pass_context
def render(ctx, source, base_url, output):
    """Разрешить ESI-маркеры в HTML-файле."""
    cfg = ctx.obj['config']
    try:
        document = source.read_text(encoding='utf-8')
    except UnicodeDecodeError as e:
        print_error(f'Файл не в UTF-8: {e}')
    try:
        result = asyncio.run(render_document(document, base_url, cfg))
    except Exception as e:
        print_error(f'Ошибка при обработке: {e}')

    if output is None:
        click.echo(result, nl=False)
        return
    output.parent.mkdir(parents=True, exist_ok=True)
    output.write_text(result, encoding='utf-8')
    click.echo(f'Rendered: {output}')


@cli.command('config', context_settings=CONTEXT_SETTINGS)
@click.pass_context
def show_config(ctx):
    """Показать текущую конфигурацию в JSON."""
    cfg = ctx.obj['config']
    click.echo(cfg.model_dump_json(indent=2))


if __name__ == "__main__":
    cli()
