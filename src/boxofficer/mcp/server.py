"""MCP server exposing the BoxOfficer aggregations as tools."""

import asyncio
import json
import logging
import sys

from mcp.server import Server
from mcp.server.stdio import stdio_server
from mcp.types import TextContent, Tool

from ..aggregation import UPCOMING_KINDS, Aggregator
from ..config import get_settings
from ..log import configure_logging

logger = logging.getLogger(__name__)

PAGES_PROPERTY = {
    "type": "integer",
    "description": "Number of pages to fetch (1-5, default 1)",
}


def _text(payload) -> list[TextContent]:
    return [TextContent(type="text", text=json.dumps(payload, indent=2))]


def _movies(movies) -> list[TextContent]:
    return _text([m.to_dict() for m in movies])


def list_tool_definitions() -> list[Tool]:
    return [
        Tool(
            name="get_now_playing",
            description="Get movies currently playing in theaters (TMDb)",
            inputSchema={"type": "object", "properties": {}},
        ),
        Tool(
            name="get_trending",
            description="Get this week's trending movies from TMDb",
            inputSchema={"type": "object", "properties": {}},
        ),
        Tool(
            name="get_social_trending",
            description="Get Trakt's trending movies hydrated with TMDb details and watcher counts",
            inputSchema={"type": "object", "properties": {}},
        ),
        Tool(
            name="get_movie_details",
            description="Get full movie details: credits, watch providers, external ids, OMDb ratings and box-office financials",
            inputSchema={
                "type": "object",
                "properties": {
                    "movie_id": {
                        "type": "integer",
                        "description": "TMDb movie ID",
                    },
                },
                "required": ["movie_id"],
            },
        ),
        Tool(
            name="search_movies",
            description="Search TMDb for movies by title",
            inputSchema={
                "type": "object",
                "properties": {
                    "query": {
                        "type": "string",
                        "description": "Title to search for",
                    },
                },
                "required": ["query"],
            },
        ),
        Tool(
            name="get_top_rated",
            description="Get top rated movies, optionally for a region",
            inputSchema={
                "type": "object",
                "properties": {
                    "region": {
                        "type": "string",
                        "description": "ISO 3166-1 region code (e.g., 'US')",
                    },
                    "pages": PAGES_PROPERTY,
                },
            },
        ),
        Tool(
            name="get_top_grossing",
            description="Get the highest grossing movies by worldwide revenue",
            inputSchema={
                "type": "object",
                "properties": {"pages": PAGES_PROPERTY},
            },
        ),
        Tool(
            name="get_in_theaters",
            description="Get US theatrical releases from the last eight weeks",
            inputSchema={"type": "object", "properties": {}},
        ),
        Tool(
            name="get_digital_releases",
            description="Get movies now streaming on the major US subscription services",
            inputSchema={"type": "object", "properties": {}},
        ),
        Tool(
            name="get_upcoming",
            description="Get upcoming theatrical or digital releases",
            inputSchema={
                "type": "object",
                "properties": {
                    "kind": {
                        "type": "string",
                        "enum": list(UPCOMING_KINDS),
                        "description": "Release kind (default theatrical)",
                    },
                },
            },
        ),
    ]


async def dispatch_tool(
    aggregator: Aggregator, name: str, arguments: dict
) -> list[TextContent]:
    """Run one tool call against the aggregator."""
    try:
        if name == "get_now_playing":
            return _movies(await aggregator.get_now_playing())

        elif name == "get_trending":
            return _movies(await aggregator.get_trending())

        elif name == "get_social_trending":
            return _movies(await aggregator.get_social_trending())

        elif name == "get_movie_details":
            detail = await aggregator.get_movie_detail(arguments.get("movie_id"))
            return _text(detail.to_dict())

        elif name == "search_movies":
            return _movies(await aggregator.search(arguments.get("query")))

        elif name == "get_top_rated":
            movies = await aggregator.get_top_rated(
                region=arguments.get("region"),
                page_count=arguments.get("pages", 1),
            )
            return _movies(movies)

        elif name == "get_top_grossing":
            movies = await aggregator.get_top_grossing(
                page_count=arguments.get("pages", 1)
            )
            return _movies(movies)

        elif name == "get_in_theaters":
            return _movies(await aggregator.get_in_theaters())

        elif name == "get_digital_releases":
            return _movies(await aggregator.get_digital_releases())

        elif name == "get_upcoming":
            kind = arguments.get("kind", "theatrical")
            return _movies(await aggregator.get_upcoming(kind))

        else:
            return [TextContent(type="text", text=f"Unknown tool: {name}")]

    except Exception as e:
        logger.exception("Tool %s failed", name)
        return [TextContent(type="text", text=f"Error: {str(e)}")]


def create_mcp_server(aggregator: Aggregator | None = None) -> Server:
    """Create and configure the MCP server."""
    server = Server("boxofficer")
    if aggregator is None:
        aggregator = Aggregator.from_settings(get_settings())

    @server.list_tools()
    async def list_tools() -> list[Tool]:
        return list_tool_definitions()

    @server.call_tool()
    async def call_tool(name: str, arguments: dict) -> list[TextContent]:
        return await dispatch_tool(aggregator, name, arguments or {})

    return server


async def main():
    """Run the MCP server."""
    configure_logging(get_settings().log_level, stream=sys.stderr)
    server = create_mcp_server()
    async with stdio_server() as (read_stream, write_stream):
        await server.run(read_stream, write_stream, server.create_initialization_options())


def run() -> None:
    asyncio.run(main())


if __name__ == "__main__":
    run()
