"""Watch coordination and incremental rebuilds."""

from pagecreator.live.watch import WatchCoordinator, WatchState

__all__ = ["WatchCoordinator", "WatchState"]
