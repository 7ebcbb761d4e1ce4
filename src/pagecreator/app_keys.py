"""Application keys for type-safe app configuration access."""

from aiohttp import web

from pagecreator.core.registry import PageRegistry
from pagecreator.live import WatchCoordinator

registry_key = web.AppKey("registry", PageRegistry)
coordinator_key = web.AppKey("coordinator", WatchCoordinator)
