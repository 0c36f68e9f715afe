import argparse
import logging
import sys
from contextlib import asynccontextmanager
from typing import AsyncIterator, Optional

from dotenv import load_dotenv
from mcp.server.fastmcp import FastMCP

from errors import ConfigurationError
from managers.output_manager import OutputManager
from models.config import StabilityConfig, load_config
from stability_client import StabilityClient
from tools import (
    register_account_tools,
    register_control_tools,
    register_editing_tools,
    register_generation_tools,
    register_three_d_tools,
    register_upscale_tools,
)

# Configure logging (stderr, so the stdio transport stays clean)
logging.basicConfig(level=logging.INFO)
logger = logging.getLogger("MCP_Server")

SERVER_NAME = "Stability_AI_MCP_Server"
TRANSPORTS = ("stdio", "sse", "streamable-http")


class AppContext:
    def __init__(self, stability_client: StabilityClient, output_manager: OutputManager):
        self.stability_client = stability_client
        self.output_manager = output_manager


def create_server(config: StabilityConfig, stability_client: Optional[StabilityClient] = None) -> FastMCP:
    """Build the FastMCP server with every Stability AI tool registered"""
    stability_client = stability_client or StabilityClient(config)
    output_manager = OutputManager(config.output_dir, config.output_3d_dir)

    @asynccontextmanager
    async def app_lifespan(server: FastMCP) -> AsyncIterator[AppContext]:
        """Manage application lifecycle"""
        logger.info("Starting Stability AI MCP server (API: %s, timeout: %sms)", config.base_url, config.timeout_ms)
        try:
            yield AppContext(stability_client=stability_client, output_manager=output_manager)
        finally:
            logger.info("Shutting down Stability AI MCP server")
            stability_client.close()

    mcp = FastMCP(SERVER_NAME, lifespan=app_lifespan)
    register_generation_tools(mcp, stability_client, output_manager)
    register_editing_tools(mcp, stability_client, output_manager)
    register_upscale_tools(mcp, stability_client, output_manager)
    register_control_tools(mcp, stability_client, output_manager)
    register_three_d_tools(mcp, stability_client, output_manager)
    register_account_tools(mcp, stability_client)
    return mcp


def main(argv=None):
    parser = argparse.ArgumentParser(description="Stability AI MCP server")
    parser.add_argument(
        "--transport",
        choices=TRANSPORTS,
        default="stdio",
        help="MCP transport to serve on (default: stdio)",
    )
    args = parser.parse_args(argv)

    load_dotenv()
    try:
        config = load_config()
    except ConfigurationError as exc:
        logger.error("Failed to start Stability AI MCP Server: %s", exc)
        sys.exit(1)

    mcp = create_server(config)
    logger.info("Stability AI MCP Server running on %s", args.transport)
    mcp.run(transport=args.transport)


if __name__ == "__main__":
    main()
