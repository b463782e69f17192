# === FILE: html_scout/cli.py ===
#!/usr/bin/env python3
"""
Command-line entry point for HtmlScout.

Commands:
  scan      Fetch a page (or its sub-paths) and look for comments / hidden fields
  config    Show the effective settings

Common options:
  --config PATH       YAML or JSON settings file (html_scout.yaml if present)
  --log-level LEVEL   Logging level (DEBUG, INFO, ...)
  --log-file PATH     Log file (stderr only when omitted)
  --log-format FORMAT Logging format string

scan options:
  --uri URI           Root address (required)
  --sub-uri PATH      Sub-path appended to the root (repeatable)
  --sub-uris FILE     File with one sub-path per line
  --cookie NAME=VALUE Cookie to present to the target
  --header H          name=value(;name=value)* (repeatable)
  --headers FILE      File with one name=value header per line
  --timeout Ns        Per-request timeout, e.g. 40s
  --comments, -C      Print comments found in each response
  --hidden, -H        Print elements with type="hidden"
  --random-agent      Send a random browser User-Agent
  --json PATH         Save the report as JSON
  --html PATH         Save the report as HTML
  --template DIR      Directory with report.html.j2
  --pretty            Print the report as indented JSON

Example:
  html-scout scan --uri http://www.example.com/ --sub-uris paths.txt \\
      --cookie PHPSESSID=abc --header "X-Test=1;X-Other=2" --timeout 40s -C -H
"""
import asyncio
import sys
from pathlib import Path

import click

from html_scout import __version__
from html_scout.aggregator import ScanReport
from html_scout.config import load_config
from html_scout.engine import start_scan
from html_scout.fetch.models import Address, RequestOptions
from html_scout.logger import DEFAULT_FORMAT, init_logging
from html_scout.report.html_report import render_html
from html_scout.report.json_report import render_json
from html_scout.user_agents import random_user_agent
from html_scout.utils import merge_headers, parse_header_string, parse_timeout, read_header_file, read_wordlist

CONTEXT_SETTINGS = dict(help_option_names=["--help"])
NO_SEARCH_MESSAGE = "This URI does not contain any comments or hidden attributes!"


def print_error(message: str):
    click.secho(message, fg='red', err=True)
    sys.exit(1)


def _validate_uri(ctx, param, value):
    address = Address.parse(value)
    if not isinstance(address, Address):
        raise click.BadParameter(f"{value!r} is not a valid URI: {address.reason}")
    return value


def _validate_timeout(ctx, param, value):
    if value is None:
        return None
    try:
        return parse_timeout(value)
    except ValueError as e:
        raise click.BadParameter(str(e))


def _validate_headers(ctx, param, value):
    headers = {}
    for raw in value:
        try:
            headers = merge_headers(headers, parse_header_string(raw))
        except ValueError as e:
            raise click.BadParameter(str(e))
    return headers


def _echo_report(report: ScanReport) -> None:
    for page in report.pages:
        click.echo(f"{page['url']}:")
        if not (report.searched_comments or report.searched_hidden):
            click.echo(NO_SEARCH_MESSAGE)
            continue
        for comment in page["comments"]:
            click.echo(comment)
        for field in page["hidden_fields"]:
            click.echo(field)
    for error in report.errors:
        detail = f" ({error['detail']})" if error["detail"] else ""
        click.secho(f"{error['url']}: {error['cause']}{detail}", fg='yellow', err=True)


@click.group(context_settings=CONTEXT_SETTINGS)
@click.version_option(__version__, '--version', '-v', message='HtmlScout, version %(version)s')
@click.option(
    '--config', '-c', 'config_path',
    default=None,
    type=click.Path(exists=True, dir_okay=False, path_type=Path),
    help='YAML or JSON settings file.'
)
@click.option(
    '--log-level', 'log_level',
    default='WARNING', show_default=True,
    type=click.Choice(['DEBUG', 'INFO', 'WARNING', 'ERROR', 'CRITICAL']),
    help='Logging level'
)
@click.option(
    '--log-file', 'log_file',
    default=None,
    type=click.Path(writable=True, dir_okay=False, path_type=Path),
    help='Log file (stderr only when omitted)'
)
@click.option(
    '--log-format', 'log_format',
    default=DEFAULT_FORMAT,
    show_default=True,
    help='Logging format string'
)
@click.pass_context
def cli(ctx, config_path, log_level, log_file, log_format):
    """HtmlScout command group."""
    init_logging(
        level=log_level,
        log_file=str(log_file) if log_file else None,
        log_format=log_format
    )
    try:
        settings = load_config(config_path)
    except Exception as e:
        print_error(f'Failed to load settings: {e}')
    ctx.ensure_object(dict)
    ctx.obj['settings'] = settings


@cli.command('scan', context_settings=CONTEXT_SETTINGS)
@click.option('--uri', '-u', 'uri', required=True, callback=_validate_uri,
              help='Root URI (the base for sub-paths when they are given)')
@click.option('--sub-uri', 'sub_uris', multiple=True, help='Sub-path appended to the root URI')
@click.option(
    '--sub-uris', 'sub_uris_file',
    default=None,
    type=click.Path(exists=True, dir_okay=False, readable=True, path_type=Path),
    help='File with one sub-path per line'
)
@click.option('--cookie', default='', help='Cookie in the form name=value')
@click.option('--header', 'headers', multiple=True, callback=_validate_headers,
              help='Header(s) in the form name=value(;name=value)*')
@click.option(
    '--headers', 'headers_file',
    default=None,
    type=click.Path(exists=True, dir_okay=False, readable=True, path_type=Path),
    help='File with one name=value header per line'
)
@click.option('--timeout', default=None, callback=_validate_timeout,
              help='Per-request timeout, e.g. 40s')
@click.option('--comments', '-C', 'comments', is_flag=True, help='Search for comments')
@click.option('--hidden', '-H', 'hidden', is_flag=True, help='Search for type="hidden" elements')
@click.option('--random-agent', 'random_agent', is_flag=True, help='Send a random browser User-Agent')
@click.option(
    '--json', '-j', 'json_output',
    default=None,
    type=click.Path(writable=True, dir_okay=False, path_type=Path),
    help='Save the JSON report to a file'
)
@click.option(
    '--html', 'html_output',
    default=None,
    type=click.Path(writable=True, dir_okay=False, path_type=Path),
    help='Save the HTML report to a file'
)
@click.option(
    '--template', '-t', 'template_dir',
    default=None,
    type=click.Path(exists=True, file_okay=False, path_type=Path),
    help='Directory with report.html.j2'
)
@click.option('--pretty', is_flag=True, help='Print the report as indented JSON instead of text')
@click.pass_context
def scan(ctx, uri, sub_uris, sub_uris_file, cookie, headers, headers_file, timeout,
         comments, hidden, random_agent, json_output, html_output, template_dir, pretty):
    """Fetch the target(s) and print the requested findings."""
    settings = ctx.obj['settings']

    sub_paths = list(sub_uris)
    try:
        if sub_uris_file is not None:
            sub_paths.extend(read_wordlist(sub_uris_file))
        if headers_file is not None:
            headers = merge_headers(read_header_file(headers_file), headers)
    except (OSError, UnicodeDecodeError, ValueError) as e:
        print_error(f'Failed to read input file: {e}')

    if random_agent:
        headers = merge_headers(headers, {'User-Agent': random_user_agent()})

    try:
        options = RequestOptions(
            address=uri,
            cookie=cookie,
            headers=headers,
            timeout=timeout if timeout is not None else settings.default_timeout,
        )
    except ValueError as e:
        print_error(f'Invalid request options: {e}')

    try:
        report = asyncio.run(
            start_scan(settings, options, sub_paths, comments=comments, hidden=hidden)
        )
    except Exception as e:
        print_error(f'Scan failed: {e}')

    if json_output:
        try:
            saved_json = render_json(report, json_output)
            click.echo(f'JSON report: {saved_json}', err=True)
        except Exception as e:
            print_error(f'Failed to save JSON: {e}')

    if html_output:
        try:
            saved_html = render_html(report, html_output, template_dir)
            click.echo(f'HTML report: {saved_html}', err=True)
        except Exception as e:
            print_error(f'Failed to save HTML: {e}')

    if pretty:
        click.echo(report.json(pretty=True))
    else:
        _echo_report(report)


@cli.command('config', context_settings=CONTEXT_SETTINGS)
@click.pass_context
def show_config(ctx):
    """Show the effective settings as JSON."""
    settings = ctx.obj['settings']
    click.echo(settings.model_dump_json(indent=2))


if __name__ == "__main__":
    cli()
