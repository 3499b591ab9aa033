"""
Writer registry — central lookup for all service writers.

The registry maps a writer's short type name to a factory. Built-in
writers are registered statically at startup; third-party writers are
discovered through the ``protostub.writers`` entry-point group. The
generator never instantiates writers itself — always through
``resolve``.
"""

from __future__ import annotations

import logging
from collections.abc import Callable
from importlib.metadata import entry_points
from typing import Any

from protostub.adapters.base import ServiceWriter

logger = logging.getLogger(__name__)

ENTRY_POINT_GROUP = "protostub.writers"

WriterFactory = Callable[[], ServiceWriter]


class WriterRegistry:
    """Registry of writer factories keyed by short type name.

    Features:
        - Register/unregister factories by name
        - Discover plugins from package entry points
        - Resolve a writer by exact name, or the first registered one
        - Report registered writers
    """

    def __init__(self) -> None:
        self._factories: dict[str, WriterFactory] = {}

    def register(self, factory: WriterFactory, name: str | None = None) -> None:
        """Register a writer factory.

        Args:
            factory: Zero-argument callable returning a ServiceWriter,
                usually the writer class itself.
            name: Lookup name. Defaults to the factory's ``__name__``.
        """
        name = name or getattr(factory, "__name__", "")
        if not name:
            raise ValueError(f"Cannot derive a writer name from {factory!r}")
        if name in self._factories:
            logger.warning("Overwriting existing writer: %s", name)
        self._factories[name] = factory
        logger.debug("Registered writer: %s", name)

    def unregister(self, name: str) -> None:
        """Remove a writer from the registry."""
        self._factories.pop(name, None)

    def get(self, name: str) -> WriterFactory | None:
        """Look up a writer factory by name."""
        return self._factories.get(name)

    def list_writers(self) -> list[str]:
        """All registered writer names, in registration order."""
        return list(self._factories.keys())

    def writer_status(self) -> dict[str, dict[str, Any]]:
        """Name, type and description of every registered writer."""
        status = {}
        for name, factory in self._factories.items():
            doc = (getattr(factory, "__doc__", None) or "").strip()
            status[name] = {
                "name": name,
                "type": getattr(factory, "__qualname__", type(factory).__name__),
                "module": getattr(factory, "__module__", ""),
                "description": doc.splitlines()[0] if doc else "",
            }
        return status

    def load_entry_points(self, group: str = ENTRY_POINT_GROUP) -> int:
        """Register writers advertised by installed packages.

        Entry points are loaded in name order. A plugin that fails to
        import is logged and skipped; names already registered keep
        their existing factory.

        Returns:
            Number of writers added.
        """
        added = 0
        for ep in sorted(entry_points(group=group), key=lambda e: e.name):
            try:
                factory = ep.load()
            except Exception as e:
                logger.error("Can not load writer plugin %s (%s): %s", ep.name, ep.value, e)
                continue

            name = getattr(factory, "__name__", "") or ep.name
            if name in self._factories:
                logger.debug("Writer %s already registered, ignoring plugin %s", name, ep.value)
                continue

            self.register(factory, name)
            added += 1

        return added

    def resolve(self, name: str | None = None) -> ServiceWriter | None:
        """Instantiate the writer to use for a run.

        Args:
            name: Short type name. When empty, the first registered
                writer is used.

        Returns:
            A writer instance, or None if nothing matches.
        """
        if name:
            factory = self._factories.get(name)
            if factory is None:
                logger.debug("No writer named %s (known: %s)", name, self.list_writers())
                return None
            return factory()

        if not self._factories:
            return None

        names = self.list_writers()
        if len(names) > 1:
            logger.warning(
                "No writer selected; %d registered (%s), using %s",
                len(names), ", ".join(names), names[0],
            )
        return self._factories[names[0]]()


def default_registry(load_plugins: bool = True) -> WriterRegistry:
    """Registry with the bundled writers first, then installed plugins."""
    from protostub.adapters.writers.python import PythonServiceWriter

    registry = WriterRegistry()
    registry.register(PythonServiceWriter)
    if load_plugins:
        registry.load_entry_points()
    return registry
