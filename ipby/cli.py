"""Command-line launcher for the standalone server."""

import logging

import click
import uvicorn

from ipby.config import VERSION, config, configure_logging, parse_log_level
from ipby.main import BANNER, create_app

logger = logging.getLogger(__name__)


def _validate_log_level(ctx, param, value):
    try:
        parse_log_level(value)
    except ValueError as exc:
        raise click.BadParameter(str(exc))
    return value


@click.command()
@click.option("-i", "--ip", "host", default=config.HOST, show_default=True,
              help="Address to bind.")
@click.option("-p", "--port", default=config.PORT, show_default=True,
              type=click.IntRange(0, 65535), help="Port to listen on.")
@click.option("--trusted-proxy", "trusted_proxies", multiple=True,
              help="Proxy address to skip in X-Forwarded-For (repeatable). "
                   "Defaults to IPBY_TRUSTED_PROXIES.")
@click.option("--cors-allow-origin", default=config.CORS_ALLOW_ORIGIN,
              help="Send Access-Control-Allow-Origin with this value.")
@click.option("--log-level", default=config.LOG_LEVEL, show_default=True,
              callback=_validate_log_level, help="Logging level.")
@click.version_option(VERSION, prog_name="ipby")
def main(host, port, trusted_proxies, cors_allow_origin, log_level):
    """Run the IPby API server.

    Examples:
        ipby --port 8080 --trusted-proxy 10.0.0.1
    """
    click.echo(BANNER.format(version=VERSION))
    configure_logging(log_level)

    app = create_app(
        trusted_proxies=trusted_proxies or None,
        cors_allow_origin=cors_allow_origin,
    )
    logger.info("Running server on %s:%d", host, port)
    # uvicorn handles SIGINT/SIGTERM and drains connections before exit
    uvicorn.run(app, host=host, port=port, log_level=log_level.lower())


if __name__ == "__main__":
    main()
