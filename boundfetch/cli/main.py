"""CLI commands for probing web resources."""

import json
import logging
import sys
from typing import Any

import click
import httpx
import structlog

from boundfetch.fetch.config import get_registry
from boundfetch.fetch.errors import BoundFetchError
from boundfetch.fetch.metrics import FetchMetrics
from boundfetch.fetch.redact import redact_url_credentials
from boundfetch.observability.logging import (
    bind_fetch_context,
    clear_fetch_context,
    configure_logging,
)
from boundfetch.resource import Resource
from boundfetch.settings import get_settings


logger = structlog.get_logger()


def _build_overrides(
    max_length: int | None,
    total_timeout: float | None,
    ignore_overflows: bool,
    allow_strange_ports: bool,
    insecure: bool,
) -> dict[str, Any]:
    """Collect the options given on the command line."""
    overrides: dict[str, Any] = {}
    if max_length is not None:
        overrides["max_length"] = max_length
    if total_timeout is not None:
        overrides["total_timeout"] = total_timeout
    if ignore_overflows:
        overrides["ignore_content_overflows"] = True
    if allow_strange_ports:
        overrides["allow_strange_ports"] = True
    if insecure:
        overrides["verify_tls"] = False
    return overrides


def probe_url(
    url: str,
    overrides: dict[str, Any],
    transport: httpx.BaseTransport | None = None,
) -> dict[str, Any]:
    """Fetch one URL and describe it.

    Args:
        url: URL to probe.
        overrides: Option overrides applied over the registry defaults.
        transport: Optional httpx transport.

    Returns:
        Description of the resource, or of the error that stopped it.
    """
    try:
        resource = Resource(
            url, overrides, registry=get_registry(), transport=transport
        )
        return {
            "url": url,
            "real_url": resource.real_url,
            "status_code": resource.status_code,
            "language": resource.language,
            "charset": resource.charset,
            "content_type": resource.content_type,
            "bytes": len(resource.body),
            "truncated": resource.truncated,
        }
    except BoundFetchError as e:
        return {"url": url, "error": e.kind.value, "message": e.message}


def format_probe(probe: dict[str, Any]) -> str:
    """Render a probe result as one line of text."""
    if "error" in probe:
        return f"{probe['url']}: {probe['error']} ({probe['message']})"
    return (
        f"{probe['real_url']}: {probe['language']} {probe['charset']} "
        f"{probe['content_type']}"
    )


@click.group()
@click.version_option(version="0.1.0")
@click.pass_context
def cli(ctx: click.Context) -> None:
    """Bounded web resource fetcher CLI."""
    ctx.ensure_object(dict)


@cli.command()
@click.argument("urls", nargs=-1, required=True)
@click.option(
    "--max-length",
    type=click.IntRange(min=0),
    default=None,
    help="Maximum number of body bytes to read.",
)
@click.option(
    "--total-timeout",
    type=click.FloatRange(min=0),
    default=None,
    help="Deadline in seconds for each URL, 0 for none.",
)
@click.option(
    "--ignore-overflows",
    is_flag=True,
    help="Truncate bodies over the limit instead of failing.",
)
@click.option(
    "--allow-strange-ports",
    is_flag=True,
    help="Allow ports other than 80 and 443.",
)
@click.option(
    "--insecure",
    is_flag=True,
    help="Do not verify TLS certificates.",
)
@click.option(
    "--json",
    "json_output",
    is_flag=True,
    help="Output one JSON object per URL.",
)
@click.option(
    "--verbose",
    "-v",
    is_flag=True,
    help="Enable verbose logging.",
)
@click.pass_context
def probe(  # noqa: PLR0913
    ctx: click.Context,
    urls: tuple[str, ...],
    max_length: int | None,
    total_timeout: float | None,
    ignore_overflows: bool,
    allow_strange_ports: bool,
    insecure: bool,
    json_output: bool,
    verbose: bool,
) -> None:
    """Fetch URLs and print their language, charset and content type.

    Exits with status 1 if any URL could not be fetched.
    """
    settings = get_settings()
    configure_logging(
        level=logging.DEBUG if verbose else settings.log_level,
        output=sys.stderr,
        json_format=settings.log_json,
    )

    overrides = _build_overrides(
        max_length, total_timeout, ignore_overflows, allow_strange_ports, insecure
    )
    transport = ctx.obj.get("transport")
    failed = 0

    for url in urls:
        bind_fetch_context(redact_url_credentials(url))
        try:
            result = probe_url(url, overrides, transport=transport)
        finally:
            clear_fetch_context()
        if "error" in result:
            failed += 1
        click.echo(json.dumps(result) if json_output else format_probe(result))

    logger.info(
        "probe_complete",
        urls=len(urls),
        failed=failed,
        metrics=FetchMetrics.get_instance().to_dict(),
    )
    if failed:
        sys.exit(1)


if __name__ == "__main__":
    cli()
