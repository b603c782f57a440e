"""cdp-capture CLI.

Usage:
    cdp-capture                      - Capture the current page
    cdp-capture https://example.com  - Navigate first, then capture

The browser endpoint comes from CDP_CAPTURE_URL (or URL). When unset the
browser pool manager is asked for one.
"""

from __future__ import annotations

import asyncio
import logging
import sys
from typing import Optional

import click

from cdp_capture.capture import NoPagesError, choose_page, format_timings, run_capture
from cdp_capture.cdp.connection import CDPClient, CDPClientError
from cdp_capture.cdp.transport import WebSocketTransport
from cdp_capture.cdp.types import TargetInfo
from cdp_capture.config import ClientOptions, ConfigurationError
from cdp_capture.discovery import DiscoveryError, discover_ws_url

logger = logging.getLogger(__name__)


def prompt_for_page(pages: list[TargetInfo]) -> int:
    """List pages and ask which one to capture."""
    for idx, page in enumerate(pages):
        click.echo(f"{idx}. {page.url}")
    return click.prompt(
        "Which do you want to dump?",
        type=click.IntRange(0, len(pages) - 1),
    )


async def capture(options: ClientOptions, navigate_to: Optional[str]) -> None:
    ws_url = options.ws_url
    if not ws_url:
        ws_url = await discover_ws_url(
            options.pool_url, launch_settings=options.launch_settings
        )

    transport = WebSocketTransport(ws_url, max_size=options.max_message_size)
    async with CDPClient(ws_url, transport=transport, timeout=options.timeout) as client:
        pages = await client.list_pages()
        page = choose_page(pages, prompt=prompt_for_page)
        result = await run_capture(client, page, navigate_to, options.output_dir)

    click.echo(format_timings(result.timer))
    for path in result.paths.values():
        logger.info(f"Wrote {path}")


@click.command()
@click.argument("url", required=False)
@click.option("--output-dir", "-o", default=None, help="Directory for the artifacts")
@click.option("--pool-url", default=None, help="Browser pool manager URL")
@click.option("--timeout", type=float, default=None, help="Per-call timeout in seconds")
@click.option("--verbose", "-v", is_flag=True, help="Enable debug logging")
def main(
    url: Optional[str],
    output_dir: Optional[str],
    pool_url: Optional[str],
    timeout: Optional[float],
    verbose: bool,
) -> None:
    """Capture screenshot, PDF, DOM snapshot and accessibility tree of a page.

    URL is navigated to before capturing when given.
    """
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.INFO,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    try:
        options = ClientOptions.from_env(
            pool_url=pool_url, timeout=timeout, output_dir=output_dir
        )
        asyncio.run(capture(options, url))
    except asyncio.TimeoutError:
        click.echo("Error: timed out waiting for the browser", err=True)
        sys.exit(1)
    except (ConfigurationError, DiscoveryError, NoPagesError, CDPClientError, OSError) as e:
        click.echo(f"Error: {e}", err=True)
        sys.exit(1)
    except KeyboardInterrupt:
        click.echo("\nInterrupted", err=True)
        sys.exit(130)


if __name__ == "__main__":
    main()
