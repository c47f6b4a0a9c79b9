"""Unit tests for plugins/registry.py"""

import pytest

from mdenrich.errors import PluginError, RegistryFrozenError
from mdenrich.plugins.base import MetadataEnhancer, Plugin, PluginInfo, QualityValidator
from mdenrich.plugins.registry import PluginRegistry, default_registry


class Both(MetadataEnhancer, QualityValidator):
    info = PluginInfo(name="both", version="1.0.0")

    def enhance(self, metadata, context):
        return metadata

    def validate(self, content, metadata, context):
        raise NotImplementedError


def test_default_registry_order():
    registry = default_registry()
    assert [p.info.name for p in registry.enhancers()] == [
        "frontmatter-enhancer", "markdown-enhancer", "mdx-enhancer",
    ]
    assert [p.info.name for p in registry.validators()] == [
        "frontmatter-validator", "content-quality-validator",
    ]


def test_default_registry_appends_extra(tag_enhancer):
    registry = default_registry(None, tag_enhancer("custom", priority=75))
    assert [p.info.name for p in registry.enhancers()][:3] == [
        "frontmatter-enhancer", "custom", "markdown-enhancer",
    ]


def test_enhancers_sorted_by_priority_then_registration(tag_enhancer):
    registry = PluginRegistry()
    for plugin in (tag_enhancer("a", 5), tag_enhancer("b", 5), tag_enhancer("c", 9)):
        registry.register(plugin)
    assert [p.info.name for p in registry.enhancers()] == ["c", "a", "b"]


def test_register_duplicate_key_rejected(tag_enhancer):
    registry = PluginRegistry()
    registry.register(tag_enhancer("dup"))
    with pytest.raises(PluginError, match="already registered"):
        registry.register(tag_enhancer("dup"))


def test_register_same_name_new_version_allowed(tag_enhancer):
    registry = PluginRegistry()
    registry.register(tag_enhancer("dup"))
    registry.register(tag_enhancer("dup", version="2.0.0"))
    assert len(registry.plugins()) == 2


@pytest.mark.parametrize("name,version,match", [
    ("", "1.0.0", "must have a name"),
    ("named", "", "must have a version"),
])
def test_register_requires_identity(tag_enhancer, name, version, match):
    with pytest.raises(PluginError, match=match):
        PluginRegistry().register(tag_enhancer(name, version=version))


def test_register_requires_a_capability():
    class Plain(Plugin):
        info = PluginInfo(name="plain", version="1.0.0")

    with pytest.raises(PluginError, match="neither enhance nor validate"):
        PluginRegistry().register(Plain())


def test_frozen_registry_rejects_registration(tag_enhancer):
    registry = PluginRegistry()
    registry.freeze()
    assert registry.frozen
    with pytest.raises(RegistryFrozenError):
        registry.register(tag_enhancer("late"))
    assert issubclass(RegistryFrozenError, PluginError)


def test_plugin_with_both_capabilities_counted_twice():
    registry = PluginRegistry()
    registry.register(Both())
    assert registry.stats() == {"plugins": 1, "enhancers": 1, "validators": 1}
