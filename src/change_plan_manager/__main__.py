"""Entry point for running the Change Plan Manager MCP server."""

import logging
from importlib import import_module

import uvicorn

# --- Configuration Bootstrap ---
# Configuration and logging are set up here exactly once, before anything
# else logs. The order is critical.
from change_plan_manager import config

import_module("change_plan_manager.logging")


logger = logging.getLogger(__name__)


def main() -> None:
    log_destination = config.LOG_FILE_PATH if config.ENABLE_FILE_LOG else "console only"

    if config.TRANSPORT == "stdio":
        from change_plan_manager.server.app import build_mcp

        logger.info("Starting Change Plan MCP Server on stdio. App logs to: %s", log_destination)
        build_mcp().run(transport="stdio")
        return

    if config.TRANSPORT != "http":
        raise SystemExit(
            f"Unknown CHANGE_PLAN_TRANSPORT '{config.TRANSPORT}'. Use 'stdio' or 'http'."
        )

    logger.info(
        "Starting Change Plan MCP Server on %s:%s (reload=%s). App logs to: %s",
        config.HOST,
        config.PORT,
        config.RELOAD,
        log_destination,
    )
    if config.RELOAD:
        logger.info(
            "Reloading enabled. Reload dirs: %s, includes: %s, excludes: %s",
            config.RELOAD_DIRS,
            config.RELOAD_INCLUDES,
            config.RELOAD_EXCLUDES,
        )

    uvicorn.run(
        "change_plan_manager.server.app:starlette_app",
        factory=True,
        # IMPORTANT: keep the logging configuration set up above.
        log_config=None,
        host=config.HOST,
        port=config.PORT,
        reload=config.RELOAD,
        reload_dirs=[d for d in config.RELOAD_DIRS if d],
        reload_includes=[p for p in config.RELOAD_INCLUDES if p],
        reload_excludes=[p for p in config.RELOAD_EXCLUDES if p],
        timeout_graceful_shutdown=config.TIMEOUT_GRACEFUL_SHUTDOWN,
        timeout_keep_alive=config.TIMEOUT_KEEP_ALIVE,
    )


if __name__ == "__main__":
    main()
