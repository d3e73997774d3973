"""Logging utilities for delegateAgent.

stdout carries the MCP protocol when the server runs over stdio, so console
output always goes to stderr.
"""

import json
import logging
import sys
from pathlib import Path
from typing import Any, Dict, Optional, Union

ROOT_LOGGER_NAME = "delegateAgent"

LOG_FORMAT = "%(asctime)s | %(levelname)-8s | %(name)s | %(message)s"
LOG_DATE_FORMAT = "%Y-%m-%d %H:%M:%S"

# Tool results longer than this are truncated in DEBUG output
RESULT_PREVIEW_CHARS = 500


def setup_logging(level: Union[int, str] = logging.INFO, log_file: Optional[Path] = None) -> logging.Logger:
    """Setup logging configuration for delegateAgent.

    Args:
        level: Logging level for the console handler (default: INFO)
        log_file: Optional path for a detailed DEBUG log file

    Returns:
        Configured package logger
    """
    if isinstance(level, str):
        level = logging.getLevelName(level.upper())

    logger = logging.getLogger(ROOT_LOGGER_NAME)
    logger.setLevel(logging.DEBUG)  # handlers decide what gets through
    logger.propagate = False

    logger.handlers = []

    console_handler = logging.StreamHandler(sys.stderr)
    console_handler.setLevel(level)
    console_handler.setFormatter(logging.Formatter(LOG_FORMAT, datefmt=LOG_DATE_FORMAT))
    logger.addHandler(console_handler)

    if log_file:
        log_file = Path(log_file)
        log_file.parent.mkdir(parents=True, exist_ok=True)
        file_handler = logging.FileHandler(log_file, encoding="utf-8")
        file_handler.setLevel(logging.DEBUG)
        file_handler.setFormatter(logging.Formatter(LOG_FORMAT, datefmt=LOG_DATE_FORMAT))
        logger.addHandler(file_handler)

    logger.debug(f"Logging configured (level={logging.getLevelName(level)}, file={log_file})")
    return logger


def log_tool_call(logger: logging.Logger, tool_name: str, args: Dict[str, Any]) -> None:
    """Log tool invocation.

    Args:
        logger: Logger instance
        tool_name: Name of the tool being called
        args: Tool arguments
    """
    logger.debug(f"Tool call: {tool_name}")
    logger.debug(f"  Arguments: {json.dumps(args, ensure_ascii=False, default=str)}")


def log_tool_result(logger: logging.Logger, tool_name: str, result: Any, success: bool = True) -> None:
    """Log tool execution result.

    Args:
        logger: Logger instance
        tool_name: Name of the tool
        result: Tool execution result
        success: Whether the tool executed successfully
    """
    status = "ok" if success else "error"
    logger.debug(f"Tool result: {tool_name} - {status}")

    result_str = str(result)
    if len(result_str) > RESULT_PREVIEW_CHARS:
        result_str = result_str[:RESULT_PREVIEW_CHARS] + "... (truncated)"
    logger.debug(f"  Result: {result_str}")


_global_logger = None


def get_logger() -> logging.Logger:
    """Get or create the package logger with default settings."""
    global _global_logger
    if _global_logger is None:
        _global_logger = setup_logging()
    return _global_logger
