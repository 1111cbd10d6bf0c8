"""Main entry point for the Qwen MCP server."""

import logging
import sys

from pydantic import ValidationError
from rich.console import Console
from rich.logging import RichHandler

from qwen_mcp.config import get_settings
from qwen_mcp.server import create_server
from qwen_mcp.tools.qwen import QwenTaskRunner

# stdout carries the MCP stdio transport, so everything human-readable goes to stderr
console = Console(stderr=True)


def setup_logging(verbose: bool = False):
    """Configure logging with rich output."""
    level = logging.DEBUG if verbose else logging.INFO

    logging.basicConfig(
        level=level,
        format="%(message)s",
        datefmt="[%X]",
        handlers=[RichHandler(rich_tracebacks=True, console=console)],
    )

    # Reduce noise from libraries
    logging.getLogger("mcp").setLevel(logging.WARNING)
    logging.getLogger("fastmcp").setLevel(logging.WARNING)
    logging.getLogger("httpx").setLevel(logging.WARNING)


def run():
    """Run the MCP server over stdio until the client disconnects."""
    logger = logging.getLogger(__name__)

    try:
        settings = get_settings()
    except ValidationError as e:
        console.print(f"[red]Configuration error:[/red] {e}")
        sys.exit(1)

    logger.info(f"{settings.server_name} {settings.server_version}, command: {settings.qwen_command}")

    server = create_server(QwenTaskRunner(settings))
    server.run(transport="stdio")


def main():
    """CLI entry point."""
    import argparse

    parser = argparse.ArgumentParser(description="Qwen MCP server - run Qwen CLI tasks in the background")
    parser.add_argument("-v", "--verbose", action="store_true", help="Enable verbose logging")
    args = parser.parse_args()

    setup_logging(verbose=args.verbose)

    try:
        run()
    except KeyboardInterrupt:
        pass


if __name__ == "__main__":
    main()
