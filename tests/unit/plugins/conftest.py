"""Shared fixtures and stub plugins for plugin unit tests"""

import pytest

from mdenrich.core.models import ProcessingContext
from mdenrich.plugins.base import MetadataEnhancer, PluginInfo


class TagEnhancer(MetadataEnhancer):
    """Appends a fixed tag and records the call order in `calls`."""

    def __init__(self, name: str, priority: int = 0, calls: list = None, version: str = "1.0.0"):
        self.info = PluginInfo(name=name, version=version)
        self.priority = priority
        self.calls = calls if calls is not None else []

    def enhance(self, metadata, context):
        self.calls.append(self.info.name)
        metadata.add_tags(self.info.name)
        return metadata


@pytest.fixture(name="make_context")
def make_context_fixture():
    def _make(path: str, content: str) -> ProcessingContext:
        return ProcessingContext.for_path(path, content=content)
    return _make


@pytest.fixture(name="tag_enhancer")
def tag_enhancer_fixture():
    return TagEnhancer
