"""Destination Store - Imperative Shell.

Destinations are registered and removed outside this service. The
notifier reads them fresh on every delivery pass through a store's
``records()`` method.
"""

import logging
import threading
from pathlib import Path
from typing import Protocol, runtime_checkable

import yaml

from quake_notifier.core.config import Destination
from quake_notifier.shell.config_loader import parse_destinations, read_config_file


logger = logging.getLogger(__name__)


@runtime_checkable
class DestinationStore(Protocol):
    """Source of the current destinations."""

    def records(self) -> list[Destination]: ...


class StaticDestinationStore:
    """A fixed list of destinations."""

    def __init__(self, destinations: list[Destination] | None = None) -> None:
        self._destinations = list(destinations or [])

    def records(self) -> list[Destination]:
        return list(self._destinations)


class YamlDestinationStore:
    """Destinations read from the ``destinations`` list of a YAML file.

    The file is re-read whenever its modification time changes, so
    edits take effect on the next event without a restart. If a reload
    fails the previous list is kept.
    """

    def __init__(self, path: str | Path) -> None:
        self.path = Path(path)
        self._lock = threading.Lock()
        self._mtime: float | None = None
        self._destinations: list[Destination] = []

    def _reload(self) -> None:
        try:
            mtime = self.path.stat().st_mtime
        except OSError as e:
            logger.warning("Cannot stat destinations file %s: %s", self.path, e)
            return

        if mtime == self._mtime:
            return

        try:
            data = read_config_file(self.path) or {}
            destinations = parse_destinations(data.get("destinations"))
        except (yaml.YAMLError, KeyError, TypeError, ValueError) as e:
            logger.error("Failed to load destinations from %s: %s", self.path, e)
            return

        self._mtime = mtime
        self._destinations = destinations
        logger.info("Loaded %d destinations from %s", len(destinations), self.path)

    def records(self) -> list[Destination]:
        """Get the current destinations."""
        with self._lock:
            self._reload()
            return list(self._destinations)
