"""Streamable-HTTP transport for the sandboxed filesystem server.

Serves the MCP endpoint at /mcp together with /health and a / metadata
route, with CORS open to every origin.
"""

import logging

import uvicorn
from mcp.server.fastmcp import FastMCP
from starlette.applications import Starlette
from starlette.middleware.cors import CORSMiddleware
from starlette.requests import Request
from starlette.responses import JSONResponse

logger = logging.getLogger(__name__)

SERVER_DISPLAY_NAME = "MCP Filesystem Server"
TRANSPORT_NAME = "streamable-http"
MCP_PATH = "/mcp"
HEALTH_PATH = "/health"


def register_http_routes(mcp: FastMCP, version: str) -> None:
    """Add the /health and / routes to the server's HTTP app."""

    @mcp.custom_route(HEALTH_PATH, methods=["GET"])
    async def health(_request: Request) -> JSONResponse:
        return JSONResponse({"status": "ok", "transport": TRANSPORT_NAME})

    @mcp.custom_route("/", methods=["GET"])
    async def server_info(_request: Request) -> JSONResponse:
        return JSONResponse(
            {
                "name": SERVER_DISPLAY_NAME,
                "version": version,
                "transport": TRANSPORT_NAME,
                "endpoints": {"mcp": MCP_PATH, "health": HEALTH_PATH},
                "description": "MCP server providing filesystem operations with streamable-HTTP transport",
            }
        )


def build_http_app(mcp: FastMCP) -> Starlette:
    """Build the ASGI app: MCP endpoint, custom routes and CORS.

    Args:
        mcp: Server whose tools and custom routes are exposed.

    Returns:
        Starlette application ready for uvicorn.
    """
    mcp.settings.streamable_http_path = MCP_PATH
    app = mcp.streamable_http_app()
    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_methods=["GET", "POST", "PUT", "DELETE", "OPTIONS"],
        allow_headers=["Content-Type", "Authorization", "Mcp-Session-Id"],
        expose_headers=["Mcp-Session-Id"],
    )
    return app


def serve_http(mcp: FastMCP, host: str, port: int) -> None:
    """Run the HTTP transport until interrupted."""
    app = build_http_app(mcp)
    logger.info("Starting MCP filesystem server with HTTP transport on %s:%d", host, port)
    logger.info("MCP endpoint: http://%s:%d%s", host, port, MCP_PATH)
    logger.info("Health check: http://%s:%d%s", host, port, HEALTH_PATH)
    uvicorn.run(app, host=host, port=port, log_level="info")
