"""Append-only plugin registry ordered by priority, then registration order"""

from dataclasses import dataclass

from loguru import logger

from mdenrich.config import Settings
from mdenrich.errors import PluginError, RegistryFrozenError
from mdenrich.plugins.base import MetadataEnhancer, Plugin, QualityValidator
from mdenrich.plugins.builtin import ContentAnalyzerEnhancer, FrontmatterEnhancer, FrontmatterValidator
from mdenrich.plugins.mdx import MDXEnhancer
from mdenrich.plugins.quality import ContentQualityValidator


@dataclass(frozen=True)
class _Registered:
    plugin: Plugin
    index: int


class PluginRegistry:
    """Holds enhancer and validator plugins for a batch.

    Registration is append-only and closes once `freeze()` is called (the pipeline
    freezes the registry when a run starts).
    """

    def __init__(self):
        self._entries: list[_Registered] = []
        self._frozen = False

    @property
    def frozen(self) -> bool:
        return self._frozen

    def freeze(self) -> None:
        self._frozen = True

    def register(self, plugin: Plugin) -> Plugin:
        """Validate and append a plugin; returns it so registration can be chained."""
        if self._frozen:
            raise RegistryFrozenError(f"Cannot register {self._describe(plugin)}: registry is frozen")
        info = getattr(plugin, 'info', None)
        if info is None or not info.name:
            raise PluginError("Plugin must have a name in its info")
        if not info.version:
            raise PluginError(f"Plugin {info.name} must have a version in its info")
        if not isinstance(plugin, (MetadataEnhancer, QualityValidator)):
            raise PluginError(f"Plugin {info.key} implements neither enhance nor validate")
        if any(e.plugin.info.key == info.key for e in self._entries):
            raise PluginError(f"Plugin {info.key} is already registered")

        self._entries.append(_Registered(plugin=plugin, index=len(self._entries)))
        logger.debug("Registered plugin {} (priority {})", info.key, plugin.priority)
        return plugin

    def plugins(self) -> list[Plugin]:
        return [e.plugin for e in self._entries]

    def enhancers(self) -> list[MetadataEnhancer]:
        """Enhancers by priority descending; equal priorities keep registration order."""
        entries = [e for e in self._entries if isinstance(e.plugin, MetadataEnhancer)]
        entries.sort(key=lambda e: (-e.plugin.priority, e.index))
        return [e.plugin for e in entries]

    def validators(self) -> list[QualityValidator]:
        return [e.plugin for e in self._entries if isinstance(e.plugin, QualityValidator)]

    def stats(self) -> dict[str, int]:
        return {
            "plugins": len(self._entries),
            "enhancers": len(self.enhancers()),
            "validators": len(self.validators()),
        }

    @staticmethod
    def _describe(plugin: Plugin) -> str:
        info = getattr(plugin, 'info', None)
        return info.key if info else type(plugin).__name__


def default_registry(settings: Settings = None, *extra: Plugin) -> PluginRegistry:
    """Registry with the built-in plugins, followed by any extra plugins given."""
    settings = settings or Settings()
    registry = PluginRegistry()
    for plugin in (
        FrontmatterEnhancer.from_settings(settings),
        ContentAnalyzerEnhancer.from_settings(settings),
        MDXEnhancer(),
        FrontmatterValidator.from_settings(settings),
        ContentQualityValidator.from_settings(settings),
        *extra,
    ):
        registry.register(plugin)
    return registry
