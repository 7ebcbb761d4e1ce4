"""aiohttp server for pagecreator.

Serves the registered pages while the watch coordinator keeps them in sync
with the collection files and their data.
"""

from aiohttp import web

from pagecreator.api.pages import create_pages_routes
from pagecreator.app_keys import coordinator_key, registry_key
from pagecreator.session import BuildSession


def create_app(session: BuildSession, *, watch: bool = True) -> web.Application:
    """Create aiohttp application.

    Args:
        session: Build session whose pages are served
        watch: Start the watch coordinator with the application

    Returns:
        Configured aiohttp application
    """
    app = web.Application()

    app[registry_key] = session.registry
    app[coordinator_key] = session.coordinator

    app.router.add_routes(create_pages_routes())

    if watch:
        app.on_startup.append(_start_watching)
        app.on_cleanup.append(_stop_watching)

    return app


async def _start_watching(app: web.Application) -> None:
    """Start the watch coordinator on application startup."""
    await app[coordinator_key].start()


async def _stop_watching(app: web.Application) -> None:
    """Stop the watch coordinator on application cleanup."""
    await app[coordinator_key].stop()


def run_server(session: BuildSession) -> None:
    """Run the server.

    Args:
        session: Build session, already built once
    """
    app = create_app(session, watch=session.config.watch.enabled)
    web.run_app(app, host=session.config.server.host, port=session.config.server.port)
