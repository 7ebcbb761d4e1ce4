"""Pages API endpoint.

Lists the pages created from collection files and returns single pages
with their context.
"""

import json

from aiohttp import web

from pagecreator.app_keys import registry_key


def create_pages_routes() -> list[web.RouteDef]:
    return [
        web.get("/api/pages", list_pages),
        web.get("/api/pages/{path:.*}", get_page),
    ]


async def list_pages(request: web.Request) -> web.Response:
    registry = request.app[registry_key]
    return web.json_response([page.to_dict() for page in registry.pages()], dumps=_dumps)


async def get_page(request: web.Request) -> web.Response:
    path = request.match_info["path"]
    registry = request.app[registry_key]

    page = registry.get_page(path)
    if page is None:
        return web.json_response(
            {"error": "Page not found", "path": f"/{path}"},
            status=404,
        )

    return web.json_response(page.to_dict(), dumps=_dumps)


def _dumps(data: object) -> str:
    # Context values come straight from query data and may not be JSON types
    return json.dumps(data, default=str)
