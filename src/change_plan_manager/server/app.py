"""MCP server for the change plan manager.

Builds the FastMCP instance around one PlanStore per process and exposes it
over stdio or as a Starlette app speaking Streamable HTTP.
"""

import logging
from typing import TYPE_CHECKING, Optional

from mcp.server.fastmcp import FastMCP
from starlette.applications import Starlette
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.requests import Request
from starlette.responses import Response

if TYPE_CHECKING:
    from collections.abc import Awaitable, Callable

from change_plan_manager import config
from change_plan_manager.io.paths import select_storage_file
from change_plan_manager.logging_context import correlation_scope
from change_plan_manager.prompts.prompt_register import register_prompts
from change_plan_manager.resources.usage_resources import register_usage_resources
from change_plan_manager.services.plan_repository import PlanRepository
from change_plan_manager.services.plan_service import ChangePlanService
from change_plan_manager.services.plan_store import PlanStore
from change_plan_manager.tools.plan_tools import register_plan_tools

logger = logging.getLogger(__name__)

INSTRUCTIONS = (
    "Change Plan Manager stores change plans made of ordered, prioritized steps with "
    "dependencies. Use get_next_step to find the next actionable step and "
    "mark_step_complete when it is done. See resource://change-plan-manager/usage_guide.md."
)


def create_service(storage_file: Optional[str] = None) -> ChangePlanService:
    """Build the store and service, loading the persisted plans once."""
    path = storage_file if storage_file is not None else select_storage_file()
    store = PlanStore(PlanRepository(path))
    store.init()
    return ChangePlanService(store, detect_cycles=config.DETECT_DEPENDENCY_CYCLES)


def build_mcp(service: Optional[ChangePlanService] = None) -> FastMCP:
    """Create the FastMCP instance with all tools, prompts and resources."""

    logger.info("Initializing FastMCP.")

    mcp = FastMCP(
        name="Change Plan Manager",
        instructions=INSTRUCTIONS,
    )

    register_plan_tools(mcp, service or create_service())
    register_prompts(mcp)
    register_usage_resources(mcp)
    return mcp


def starlette_app() -> Starlette:
    """Create a Starlette application for the MCP server."""

    app = build_mcp().streamable_http_app()

    class CorrelationIdMiddleware(BaseHTTPMiddleware):  # type: ignore[misc]
        async def dispatch(
            self,
            request: Request,
            call_next: "Callable[[Request], Awaitable[Response]]",
        ) -> Response:
            incoming = request.headers.get("x-correlation-id")
            with correlation_scope(incoming) as corr_id:
                response = await call_next(request)
            # echoed so clients can match their logs to ours
            response.headers["x-correlation-id"] = corr_id
            return response

    app.add_middleware(CorrelationIdMiddleware)

    return app
