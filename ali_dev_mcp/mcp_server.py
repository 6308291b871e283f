"""
Main MCP Server for Azure DevOps test cases, automation metadata and pull requests
"""
import asyncio
import logging
import os
import signal
import sys
from typing import Iterable, Optional, Type

import click
import structlog
from dotenv import load_dotenv

from .azure_devops_client import AzureDevOpsClient
from .capabilities import CAPABILITIES, Capability
from .config import Config, get_config
from .registry import CapabilityServer

logger = structlog.get_logger(__name__)


def configure_logging(log_level: str = "INFO", log_format: str = "json") -> None:
    """Configure structured logging; stdout carries JSON-RPC, so everything goes to stderr"""
    logging.basicConfig(
        level=getattr(logging, log_level.upper(), logging.INFO),
        format="%(message)s",
        stream=sys.stderr,
    )

    if log_format == "console":
        renderer = structlog.dev.ConsoleRenderer(colors=False)
    else:
        renderer = structlog.processors.JSONRenderer()

    structlog.configure(
        processors=[
            structlog.stdlib.filter_by_level,
            structlog.stdlib.add_logger_name,
            structlog.stdlib.add_log_level,
            structlog.stdlib.PositionalArgumentsFormatter(),
            structlog.processors.TimeStamper(fmt="iso"),
            structlog.processors.StackInfoRenderer(),
            structlog.processors.format_exc_info,
            structlog.processors.UnicodeDecoder(),
            renderer,
        ],
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        wrapper_class=structlog.stdlib.BoundLogger,
        cache_logger_on_first_use=True,
    )


def build_server(
    settings: Optional[Config] = None,
    capabilities: Optional[Iterable[Type[Capability]]] = None,
    client: Optional[AzureDevOpsClient] = None,
) -> CapabilityServer:
    """Create the server and register every capability module on it"""
    settings = settings or get_config()
    server = CapabilityServer(settings.mcp_server_name, version=settings.mcp_server_version)
    client = client or AzureDevOpsClient(settings)

    for capability_class in capabilities if capabilities is not None else CAPABILITIES:
        capability_class(server, client).register()

    logger.info(
        "Created MCP server",
        tools=len(server.tool_names),
        prompts=len(server.prompt_names),
    )
    return server


def _handle_shutdown(signum, frame):
    logger.info("Shutting down...", signal=signum)
    logging.shutdown()
    # the stdin reader thread would otherwise block interpreter exit
    os._exit(0)


@click.command()
@click.option('--log-level', default=None, help='Log level (DEBUG, INFO, WARNING, ERROR)')
@click.option('--config-file', default='.env', help='Configuration file path')
def main(log_level: Optional[str], config_file: str):
    """Run the ALI Dev MCP server on stdio"""

    if config_file != '.env':
        load_dotenv(dotenv_path=config_file, override=True)
    settings = get_config()

    configure_logging(log_level or settings.log_level, settings.log_format)

    signal.signal(signal.SIGINT, _handle_shutdown)
    signal.signal(signal.SIGTERM, _handle_shutdown)

    try:
        server = build_server(settings)
        logger.info("ALI Dev MCP Server running on stdio")
        asyncio.run(server.run())
    except Exception as e:
        logger.error("Server error", error=str(e))
        sys.exit(1)


if __name__ == "__main__":
    main()
