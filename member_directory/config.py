from __future__ import annotations

import os
from collections.abc import Callable
from typing import Any, Generic, TypeVar

from pydantic import BaseModel, Field

from member_directory.core.exceptions import UnsupportedProviderError
from member_directory.messaging.base import Messenger
from member_directory.store.base import ALL_BRANCHES, DirectoryStore

PAGE_SIZE_ENV = "MEMBER_DIRECTORY_PAGE_SIZE"
CHUNK_SIZE_ENV = "MEMBER_DIRECTORY_CHUNK_SIZE"


class EngineSettings(BaseModel):
    """Tunables for the directory view and the importer."""

    page_size: int = Field(default=20, gt=0)
    chunk_size: int = Field(default=50, gt=0)
    default_branch: str = ALL_BRANCHES

    @classmethod
    def from_config(cls, config: dict[str, Any] | None = None) -> EngineSettings:
        """Build from a config dict; environment variables take precedence."""
        values = dict(config or {})
        if page_size := os.environ.get(PAGE_SIZE_ENV):
            values["page_size"] = int(page_size)
        if chunk_size := os.environ.get(CHUNK_SIZE_ENV):
            values["chunk_size"] = int(chunk_size)
        return cls.model_validate(values)


T = TypeVar("T")


class _Registry(Generic[T]):
    """Provider name to backend class.

    Built-in backends are registered by *load_builtins* the first time the
    registry is used.  :meth:`build` calls ``factory.from_config(config)``
    if available, otherwise ``factory(**config)``.
    """

    def __init__(
        self,
        label: str,
        load_builtins: Callable[[_Registry[T]], None],
    ) -> None:
        self._label = label
        self._load_builtins: Callable[[_Registry[T]], None] | None = load_builtins
        self._factories: dict[str, type[T]] = {}

    def register(self, name: str, cls: type[T]) -> None:
        self._factories[name] = cls

    @property
    def providers(self) -> list[str]:
        return sorted(self._loaded())

    def build(self, provider: str, config: dict[str, Any]) -> T:
        factory = self._loaded().get(provider)
        if factory is None:
            raise UnsupportedProviderError(
                f"Unknown {self._label} provider '{provider}'. "
                f"Available: {self.providers}"
            )
        if hasattr(factory, "from_config"):
            return factory.from_config(config)  # type: ignore[return-value]
        return factory(**config)  # type: ignore[return-value]

    def _loaded(self) -> dict[str, type[T]]:
        if self._load_builtins is not None:
            load, self._load_builtins = self._load_builtins, None
            load(self)
        return self._factories


def _builtin_stores(registry: _Registry[DirectoryStore]) -> None:
    from member_directory.store.memory import InMemoryStore

    registry.register("memory", InMemoryStore)

    try:
        from member_directory.store.sql import SqlStore

        registry.register("sql", SqlStore)
    except ImportError:
        pass


def _builtin_messengers(registry: _Registry[Messenger]) -> None:
    from member_directory.messaging.outbox import OutboxMessenger

    registry.register("outbox", OutboxMessenger)


store_registry: _Registry[DirectoryStore] = _Registry("store", _builtin_stores)
messenger_registry: _Registry[Messenger] = _Registry("messenger", _builtin_messengers)


def parse_config(
    config: dict[str, Any],
) -> tuple[DirectoryStore, Messenger, EngineSettings]:
    """Parse a user config dict and return (store, messenger, settings).

    Expected shape::

        {
            "store": {"provider": "sql", "config": {"url": "sqlite+aiosqlite://"}},
            "messenger": {"provider": "outbox", "config": {}},
            "settings": {"page_size": 20, "chunk_size": 50},
        }

    Every section is optional: the store defaults to in-memory and the
    messenger to the outbox.
    """
    store_cfg = config.get("store") or {}
    messenger_cfg = config.get("messenger") or {}

    store = store_registry.build(
        store_cfg.get("provider", "memory"),
        store_cfg.get("config", {}),
    )
    messenger = messenger_registry.build(
        messenger_cfg.get("provider", "outbox"),
        messenger_cfg.get("config", {}),
    )
    settings = EngineSettings.from_config(config.get("settings"))

    return store, messenger, settings
