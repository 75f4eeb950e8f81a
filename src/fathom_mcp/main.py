"""
Fathom MCP Server — Entry Point

Loads configuration and starts one of two listeners:
  stdio — newline-delimited JSON-RPC for a single embedded client
  http  — streamable HTTP on /mcp plus legacy SSE on /sse and /messages
"""

from __future__ import annotations

import argparse
import asyncio
import logging
import sys
from dataclasses import replace

from .config import ConfigError, Settings, load_settings
from .fathom_client import FathomClient
from .server import create_server
from .transports import StdioTransport

logger = logging.getLogger(__name__)

LOG_FORMAT = "%(asctime)s [%(levelname)s] %(name)s: %(message)s"


def setup_logging(level: str = "INFO") -> None:
    """Log to stderr; stdout is reserved for protocol frames on stdio."""
    logging.basicConfig(
        level=getattr(logging, level.upper(), logging.INFO),
        format=LOG_FORMAT,
        handlers=[logging.StreamHandler(sys.stderr)],
        force=True,
    )


def parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    """Parse command-line arguments."""
    parser = argparse.ArgumentParser(description="MCP server for the Fathom meeting API")
    parser.add_argument(
        "--transport",
        choices=("http", "stdio"),
        default="http",
        help="Listener to start (default: http)",
    )
    parser.add_argument("--host", type=str, default=None, help="Bind address for http (overrides HOST)")
    parser.add_argument("--port", type=int, default=None, help="Port for http (overrides PORT)")
    parser.add_argument("--log-level", type=str, default=None, help="Logging level (overrides LOG_LEVEL)")
    return parser.parse_args(argv)


async def run_stdio(settings: Settings) -> None:
    client = FathomClient(settings.api_key, base_url=settings.base_url, timeout=settings.timeout)
    try:
        await StdioTransport(create_server(client)).run()
    finally:
        await client.aclose()


def run_http(settings: Settings) -> None:
    import uvicorn

    from .http_app import MCPHTTPServer, create_app

    app = create_app(settings)
    logger.info("Fathom MCP Server listening on %s:%d", settings.host, settings.port)
    logger.info("Streamable HTTP endpoint: /mcp; legacy SSE endpoint: /sse")
    # Keep the logging configured above
    config = uvicorn.Config(app, host=settings.host, port=settings.port, log_config=None)
    MCPHTTPServer(config, app.state.sessions).run()


def main(argv: list[str] | None = None) -> None:
    args = parse_args(argv)

    try:
        settings = load_settings()
    except ConfigError as e:
        print(f"Error: {e}", file=sys.stderr)
        sys.exit(1)

    overrides = {
        key: value
        for key, value in (("host", args.host), ("port", args.port), ("log_level", args.log_level))
        if value is not None
    }
    settings = replace(settings, **overrides)
    setup_logging(settings.log_level)

    if args.transport == "stdio":
        try:
            asyncio.run(run_stdio(settings))
        except KeyboardInterrupt:
            logger.info("Interrupted, shutting down")
    else:
        run_http(settings)


if __name__ == "__main__":
    main()
