import asyncio
import functools
import json
from typing import Any, Callable, List, Optional, Sequence, Tuple

import click
import yaml

from apibind._core import collections, connections, loggers, resources


class LogFormatParamType(click.Choice):

    def __init__(self) -> None:
        super().__init__(choices=[v.name.lower() for v in loggers.LogFormat])

    def convert(self, value: Any, param: Any, ctx: Any) -> loggers.LogFormat:
        if isinstance(value, loggers.LogFormat):
            return value
        name: str = super().convert(value, param, ctx)
        return loggers.LogFormat[name.upper()]


def logging_options(fn: Callable[..., Any]) -> Callable[..., Any]:
    """ A decorator to configure logging in all commands the same way."""
    @click.option('-v', '--verbose', is_flag=True)
    @click.option('-d', '--debug', is_flag=True)
    @click.option('-q', '--quiet', is_flag=True)
    @click.option('--log-format', type=LogFormatParamType(), default='full')
    @click.option('--log-refkey', type=str)
    @click.option('--log-prefix/--no-log-prefix', default=None)
    @functools.wraps(fn)  # to preserve other opts/args
    def wrapper(verbose: bool, quiet: bool, debug: bool,
                log_format: loggers.LogFormat = loggers.LogFormat.FULL,
                log_prefix: Optional[bool] = False,
                log_refkey: Optional[str] = None,
                *args: Any, **kwargs: Any) -> Any:
        loggers.configure(debug=debug, verbose=verbose, quiet=quiet,
                          log_format=log_format, log_refkey=log_refkey, log_prefix=log_prefix)
        return fn(*args, **kwargs)

    return wrapper


def connection_options(fn: Callable[..., Any]) -> Callable[..., Any]:
    """ A decorator to make a connection in all commands the same way."""
    @click.option('--host', type=str, required=True)
    @click.option('--token', type=str, default=None)
    @functools.wraps(fn)  # to preserve other opts/args
    def wrapper(host: str, token: Optional[str], *args: Any, **kwargs: Any) -> Any:
        connection = connections.Connection(host=host, auth=token)
        return fn(connection, *args, **kwargs)

    return wrapper


def parse_pairs(pairs: Sequence[str]) -> List[Tuple[str, str]]:
    result: List[Tuple[str, str]] = []
    for pair in pairs:
        key, sep, value = pair.partition('=')
        if not sep or not key:
            raise click.BadParameter(f"Expected KEY=VALUE, got {pair!r}.")
        result.append((key, value))
    return result


def render(documents: Any, output: str) -> str:
    if output == 'json':
        return json.dumps(documents, indent=2)
    else:
        return yaml.safe_dump(documents, sort_keys=False).rstrip('\n')


@click.version_option(prog_name='apibind')
@click.group(name='apibind', context_settings=dict(
    auto_envvar_prefix='APIBIND',
))
def main() -> None:
    pass


@main.command()
@logging_options
@connection_options
@click.option('-i', '--include', 'includes', multiple=True)
@click.option('-o', '--output', type=click.Choice(['yaml', 'json']), default='yaml')
@click.argument('type')
@click.argument('id')
def get(
        connection: connections.Connection,
        type: str,
        id: str,
        includes: List[str],
        output: str,
) -> None:
    """ Fetch a single resource by its type and id. """
    resource = asyncio.run(_get(connection, type, id, includes))
    click.echo(render(resource.as_document(), output))


@main.command(name='list')
@logging_options
@connection_options
@click.option('-f', '--filter', 'filters', multiple=True)
@click.option('-i', '--include', 'includes', multiple=True)
@click.option('-s', '--sort', 'sorts', multiple=True)
@click.option('-p', '--page', 'pages', multiple=True)
@click.option('--all', 'all_pages', is_flag=True)
@click.option('-o', '--output', type=click.Choice(['yaml', 'json']), default='yaml')
@click.argument('type')
def list_(
        connection: connections.Connection,
        type: str,
        filters: List[str],
        includes: List[str],
        sorts: List[str],
        pages: List[str],
        all_pages: bool,
        output: str,
) -> None:
    """ List the resources of a type, optionally filtered. """
    qs = connection[type].list()
    if filters:
        qs = qs.filter(dict(parse_pairs(filters)))
    if includes:
        qs = qs.include(*includes)
    if sorts:
        qs = qs.sort(*sorts)
    if pages:
        qs = qs.page(dict(parse_pairs(pages)))
    items = asyncio.run(_list(connection, qs, all_pages))
    click.echo(render([item.as_document() for item in items], output))


async def _get(
        connection: connections.Connection,
        type: str,
        id: str,
        includes: Sequence[str],
) -> resources.Resource:
    async with connection:
        return await connection[type].get(id, include=list(includes) or None)


async def _list(
        connection: connections.Connection,
        qs: collections.Collection,
        all_pages: bool,
) -> List[resources.Resource]:
    async with connection:
        if all_pages:
            return [item async for item in qs.all()]
        else:
            await qs.fetch()
            return list(qs.data or [])
