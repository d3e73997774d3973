"""delegate-agent CLI entrypoint: serve delegated tasks over MCP stdio."""

from __future__ import annotations

import argparse
import asyncio
import logging
import signal
import sys
from pathlib import Path
from typing import List, Optional

from delegateAgent import __version__
from delegateAgent.config import get_settings, load_config
from delegateAgent.runtime import build_application
from delegateAgent.server import serve_stdio
from delegateAgent.utils import ConfigError, setup_logging

LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")


def parse_args(argv: Optional[List[str]] = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        prog="delegate-agent",
        description="Expose composite tools backed by a cheaper model and downstream MCP servers.",
    )
    parser.add_argument("-c", "--config", help="Path to JSON/YAML config file (default: $DELEGATE_CONFIG)")
    parser.add_argument("--log-level", help="Log level: debug, info, warning, error (default: info)")
    parser.add_argument("--log-file", help="Also write DEBUG logs to this file")
    parser.add_argument("--version", action="version", version=f"%(prog)s {__version__}")
    return parser.parse_args(argv)


async def async_main(args: argparse.Namespace) -> int:
    """Async entrypoint. Returns the process exit code."""
    settings = get_settings()

    config_path = args.config or settings.config_path
    if not config_path:
        print("Error: --config is required (or set DELEGATE_CONFIG)", file=sys.stderr)
        return 1
    if not Path(config_path).exists():
        print(f"Error: Config file not found: {config_path}", file=sys.stderr)
        return 1

    log_level = (args.log_level or settings.observability.log_level).upper()
    if log_level == "WARN":
        log_level = "WARNING"
    if log_level not in LOG_LEVELS:
        print(f"Error: Invalid log level: {log_level}", file=sys.stderr)
        print(f"Valid levels: {', '.join(level.lower() for level in LOG_LEVELS)}", file=sys.stderr)
        return 1

    logger = setup_logging(log_level, args.log_file or settings.observability.log_file)
    logger.info("=" * 60)
    logger.info(f"delegate-agent {__version__} starting (config: {config_path})")

    try:
        config = load_config(config_path)
        app = await build_application(config, settings)
    except ConfigError as e:
        logger.error(f"✗ {e}")
        return 1
    except Exception as e:
        logger.error(f"✗ Fatal error during startup: {e}", exc_info=True)
        return 1

    loop = asyncio.get_running_loop()
    serve_task = asyncio.create_task(serve_stdio(app.server))

    def request_shutdown(sig: signal.Signals) -> None:
        logger.info(f"Received {sig.name}, shutting down...")
        serve_task.cancel()

    for sig in (signal.SIGINT, signal.SIGTERM):
        try:
            loop.add_signal_handler(sig, request_shutdown, sig)
        except NotImplementedError:
            # add_signal_handler is unavailable on Windows event loops
            pass

    try:
        await serve_task
    except asyncio.CancelledError:
        pass
    finally:
        await app.shutdown()
        logger.info("✓ Shutdown complete")

    return 0


def main(argv: Optional[List[str]] = None) -> None:
    """Synchronous wrapper for async_main."""
    args = parse_args(argv)
    try:
        code = asyncio.run(async_main(args))
    except KeyboardInterrupt:
        logging.getLogger("delegateAgent").info("Interrupted")
        code = 130
    sys.exit(code)


if __name__ == "__main__":
    main()
