"""Main entry point for the StreamVerse CLI."""

import asyncio
import sys

import click

from .config import Config
from .console_app import ConsoleApp


@click.command()
@click.option("--backend-url", help="Backend server URL (overrides stored config)")
@click.option("--websocket-url", help="Playback WebSocket URL (overrides stored config)")
@click.option("--media-kind", type=click.Choice(["movie", "tv"]), help="Default kind to search")
@click.option("--ai/--no-ai", default=None, help="Use AI query understanding for searches")
def main(backend_url: str | None, websocket_url: str | None, media_kind: str | None, ai: bool | None):
    """StreamVerse CLI - search titles and play them through embed providers.

    Examples:
        streamverse                                   # Start with stored configuration
        streamverse --backend-url http://10.0.0.5:8484
        streamverse --media-kind tv --no-ai
    """
    try:
        cli_config = Config(
            backend_url=backend_url,
            websocket_url=websocket_url,
            default_media_kind=media_kind,
            use_ai=ai,
        )
        app = ConsoleApp(cli_config)
        asyncio.run(app.run())

    except KeyboardInterrupt:
        sys.exit(0)
    except Exception as e:
        click.echo(f"Fatal error: {e}", err=True)
        sys.exit(1)


if __name__ == "__main__":
    main()
