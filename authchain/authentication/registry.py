import logging
from collections.abc import Callable, Mapping
from types import MappingProxyType

from authchain.authentication.base import BaseCredentialsPlugin
from authchain.authentication.cache import ProfileCache
from authchain.authentication.exceptions import DuplicatePluginError

logger = logging.getLogger("authchain.registry")

PLUGIN_CATALOGUE: dict[str, type[BaseCredentialsPlugin]] = {}


def register_credentials_plugin(name: str):
    """Decorator to register a plugin class with a unique key."""

    def decorator(cls: type[BaseCredentialsPlugin]):
        if not cls.name:
            cls.name = name
        PLUGIN_CATALOGUE[name] = cls
        return cls

    return decorator


def get_credentials_plugin(name: str) -> type[BaseCredentialsPlugin] | None:
    return PLUGIN_CATALOGUE.get(name)


class PluginRegistry:
    """
    Registered plugin instances.

    Non-redirecting plugins are kept in registration order, which is the
    order they are tried in. Redirecting plugins are keyed by name.
    The registry is filled at startup and only read while serving.
    """

    def __init__(self, cache_factory: Callable[[], ProfileCache] = ProfileCache):
        self.cache_factory = cache_factory
        self._non_redirecting: list[BaseCredentialsPlugin] = []
        self._redirecting: dict[str, BaseCredentialsPlugin] = {}

    def register(self, plugin: BaseCredentialsPlugin) -> None:
        if plugin.redirecting:
            if plugin.name in self._redirecting:
                raise DuplicatePluginError(plugin.name)
            self._redirecting[plugin.name] = plugin
        else:
            if plugin.users_cache is None:
                plugin.users_cache = self.cache_factory()
            self._non_redirecting.append(plugin)
        logger.debug(f"Registered credentials plugin {plugin!r}")

    @property
    def non_redirecting(self) -> tuple[BaseCredentialsPlugin, ...]:
        return tuple(self._non_redirecting)

    @property
    def redirecting(self) -> Mapping[str, BaseCredentialsPlugin]:
        return MappingProxyType(self._redirecting)

    def get_redirecting(self, name: str) -> BaseCredentialsPlugin | None:
        return self._redirecting.get(name)

    def is_empty(self) -> bool:
        return not self._non_redirecting and not self._redirecting

    def __len__(self) -> int:
        return len(self._non_redirecting) + len(self._redirecting)
