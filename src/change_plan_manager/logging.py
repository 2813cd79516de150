"""Centralized logging configuration for the Change Plan Manager.

This module should be imported once, as early as possible in the application's
lifecycle, typically in the main entrypoint (__main__.py). It sets up the
root logger with handlers and formatting based on the application's
configuration settings.
"""

import logging
import sys
from pathlib import Path

from change_plan_manager import config

logger = logging.getLogger(__name__)


level = getattr(logging, config.LOG_LEVEL, logging.INFO)

# Under the stdio transport stdout carries the MCP protocol, so log lines must
# go to stderr there.
stream = sys.stderr if config.TRANSPORT == "stdio" else sys.stdout
handlers: list[logging.Handler] = [logging.StreamHandler(stream)]
if config.ENABLE_FILE_LOG:
    Path(config.LOG_FILE_PATH).parent.mkdir(parents=True, exist_ok=True)
    handlers.append(logging.FileHandler(config.LOG_FILE_PATH))

logging.basicConfig(
    level=level,
    format="%(asctime)s - %(levelname)s - %(name)s:%(lineno)d - %(message)s",
    handlers=handlers,
)

logger.info(
    "Logging configured. Level: %s, File logging enabled: %s",
    config.LOG_LEVEL,
    config.ENABLE_FILE_LOG,
)
