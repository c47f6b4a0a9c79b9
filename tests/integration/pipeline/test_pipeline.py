"""Integration tests for the plugin pipeline.

Default-registry tests run the canonical document below through every built-in
plugin and assert stable expected values. The remaining tests use small local
plugins to pin down ordering, failure isolation and batch behavior.

Canonical document (docs/guide/pipeline-test.md)
------------------------------------------------
    # Introduction

    An introductory paragraph about the pipeline.

    ## Details

    More detailed content.

Enhancer chain with default settings:
    frontmatter-enhancer (100)  repairs in memory -> title, description, category "Guide"
    markdown-enhancer    (50)   reading statistics in extra; keeps earlier values
    mdx-enhancer         (10)   skipped for .md
Content passes: frontmatter repair prepends a block; TOC off by default.
Validators: frontmatter-validator, content-quality-validator.
"""

import threading

import pytest

from mdenrich.config import Settings
from mdenrich.core.models import DocumentMetadata, ProcessingContext, QualityReport
from mdenrich.core.pipeline import Pipeline
from mdenrich.errors import RegistryFrozenError
from mdenrich.plugins.base import MetadataEnhancer, PluginInfo, QualityValidator
from mdenrich.plugins.quality import ContentQualityValidator
from mdenrich.plugins.registry import PluginRegistry


CANONICAL_PATH = "docs/guide/pipeline-test.md"
CANONICAL_MD = """\
# Introduction

An introductory paragraph about the pipeline.

## Details

More detailed content.
"""

PLAIN = Settings(repair_frontmatter=False, validate_content=False)


class Recorder(MetadataEnhancer):
    def __init__(self, name: str, priority: int = 0, calls: list = None):
        self.info = PluginInfo(name=name, version="1.0.0")
        self.priority = priority
        self.calls = calls if calls is not None else []

    def enhance(self, metadata, context):
        self.calls.append(self.info.name)
        metadata.add_tags(self.info.name)
        return metadata


class Boom(MetadataEnhancer):
    info = PluginInfo(name="boom", version="1.0.0")
    priority = 10

    def enhance(self, metadata, context):
        metadata.add_tags("leaked")
        raise RuntimeError("kaboom")


class ReturnsNothing(MetadataEnhancer):
    info = PluginInfo(name="returns-nothing", version="1.0.0")
    priority = 20

    def enhance(self, metadata, context):
        metadata.add_tags("lost")


class FailsOn(MetadataEnhancer):
    """Raises for one file name only."""
    info = PluginInfo(name="fails-on", version="1.0.0")

    def __init__(self, filename: str):
        self.filename = filename

    def enhance(self, metadata, context):
        if context.filename == self.filename:
            raise RuntimeError(f"cannot handle {self.filename}")
        metadata.add_tags("seen")
        return metadata


class BrokenValidator(QualityValidator):
    info = PluginInfo(name="broken-validator", version="1.0.0")

    def validate(self, content, metadata, context):
        raise ValueError("bad input")


class SilentValidator(QualityValidator):
    info = PluginInfo(name="silent-validator", version="1.0.0")

    def validate(self, content, metadata, context):
        return None


class Blocking(MetadataEnhancer):
    """Blocks on `slow.md` until released."""
    info = PluginInfo(name="blocking", version="1.0.0")

    def __init__(self, release: threading.Event):
        self.release = release

    def enhance(self, metadata, context):
        if context.filename == "slow.md":
            self.release.wait(5)
        return metadata


def _registry(*plugins) -> PluginRegistry:
    registry = PluginRegistry()
    for plugin in plugins:
        registry.register(plugin)
    return registry


def _context(path: str = "docs/a.md", content: str = CANONICAL_MD) -> ProcessingContext:
    return ProcessingContext.for_path(path, content=content)


@pytest.fixture(name="canonical")
def canonical_fixture():
    return Pipeline().run(CANONICAL_MD, DocumentMetadata(), _context(CANONICAL_PATH))


# --- default registry ---

def test_canonical_metadata(canonical):
    metadata = canonical.metadata
    assert metadata.title == "Introduction"
    assert metadata.description == "An introductory paragraph about the pipeline."
    assert metadata.category == "Guide"
    assert metadata.extra["reading_time"] == 1
    assert metadata.extra["word_count"] > 0
    assert "format" not in metadata.extra


def test_canonical_content_is_repaired(canonical):
    assert canonical.repair.fixed
    assert canonical.content.startswith('---\ntitle: "Introduction"\n')
    assert canonical.content.endswith(CANONICAL_MD)


def test_canonical_reports(canonical):
    assert [name for name, _ in canonical.reports] == ["frontmatter-validator", "content-quality-validator"]
    assert all(isinstance(report, QualityReport) for _, report in canonical.reports)
    assert canonical.reports[0][1].level == "high"
    assert canonical.failures == []


def test_generate_toc_pass():
    result = Pipeline(settings=Settings(generate_toc=True)).run(CANONICAL_MD, context=_context(CANONICAL_PATH))
    assert result.content.startswith("---\n")
    assert "# Introduction\n\n## Table of Contents\n\n- [Details](#details)\n" in result.content


def test_passes_can_be_disabled():
    result = Pipeline(settings=PLAIN).run(CANONICAL_MD, context=_context())
    assert result.repair is None
    assert result.content == CANONICAL_MD
    assert result.reports == []


# --- ordering and isolation ---

def test_enhancers_run_by_priority():
    calls: list[str] = []
    registry = _registry(Recorder("low", 1, calls), Recorder("a", 5, calls), Recorder("b", 5, calls))
    result = Pipeline(registry, PLAIN).run(CANONICAL_MD, context=_context())
    assert calls == ["a", "b", "low"]
    assert result.metadata.tags == ["a", "b", "low"]


def test_failing_enhancer_is_isolated(log_messages):
    """A raising enhancer is logged and skipped; its partial changes are discarded."""
    registry = _registry(Boom(), Recorder("ok"))
    result = Pipeline(registry, PLAIN).run(CANONICAL_MD, DocumentMetadata(tags=["start"]), _context())
    assert result.metadata.tags == ["start", "ok"]
    assert result.failures == ["boom"]
    assert any("boom" in m and "docs/a.md" in m and "kaboom" in m for m in log_messages)


def test_enhancer_returning_non_metadata_is_isolated(log_messages):
    """A None result counts as a failure of that enhancer; earlier metadata is kept."""
    registry = _registry(ReturnsNothing(), Recorder("ok"))
    result = Pipeline(registry, PLAIN).run(CANONICAL_MD, DocumentMetadata(tags=["start"]), _context())
    assert result.metadata.tags == ["start", "ok"]
    assert result.failures == ["returns-nothing"]
    assert any("returns-nothing" in m and "NoneType" in m for m in log_messages)


def test_only_enhancer_returning_none_still_completes():
    result = Pipeline(_registry(ReturnsNothing()), PLAIN).run(CANONICAL_MD, context=_context())
    assert result.metadata == DocumentMetadata()
    assert result.failures == ["returns-nothing"]


def test_failing_validator_is_skipped(log_messages):
    registry = _registry(BrokenValidator(), ContentQualityValidator())
    result = Pipeline(registry, Settings(repair_frontmatter=False)).run(CANONICAL_MD, context=_context())
    assert [name for name, _ in result.reports] == ["content-quality-validator"]
    assert result.failures == ["broken-validator"]
    assert any("broken-validator" in m for m in log_messages)


def test_validator_without_report_is_skipped(log_messages):
    registry = _registry(SilentValidator(), ContentQualityValidator())
    result = Pipeline(registry, Settings(repair_frontmatter=False)).run(CANONICAL_MD, context=_context())
    assert [name for name, _ in result.reports] == ["content-quality-validator"]
    assert result.failures == ["silent-validator"]
    assert any("silent-validator" in m and "NoneType" in m for m in log_messages)


def test_caller_metadata_is_not_mutated():
    incoming = DocumentMetadata(title="Mine")
    Pipeline(_registry(Recorder("tagger")), PLAIN).run(CANONICAL_MD, incoming, _context())
    assert incoming.tags == []


def test_run_freezes_registry():
    registry = _registry(Recorder("first"))
    Pipeline(registry, PLAIN).run(CANONICAL_MD, context=_context())
    with pytest.raises(RegistryFrozenError):
        registry.register(Recorder("late"))


# --- batch ---

def test_batch_preserves_input_order_and_reports_errors(tmp_path):
    contexts = [
        _context("a.md", "# A\n"),
        ProcessingContext.for_path(tmp_path / "missing.md"),
        _context("c.md", "# C\n"),
    ]
    items = Pipeline(_registry(Recorder("r")), PLAIN).run_batch(contexts, max_workers=2)
    assert [item.context.filename for item in items] == ["a.md", "missing.md", "c.md"]
    assert items[0].result.metadata.tags == ["r"]
    assert items[1].result is None and items[1].error
    assert items[2].error is None


def test_batch_documents_get_independent_metadata():
    contexts = [_context(f"doc{i}.md", f"# Doc {i}\n") for i in range(5)]
    items = Pipeline(_registry(Recorder("r")), PLAIN).run_batch(contexts)
    assert all(item.result.metadata.tags == ["r"] for item in items)


def test_batch_isolates_one_failing_document(log_messages):
    """An enhancer raising on one document leaves every document with metadata and one warning."""
    contexts = [_context(f"doc{i}.md", f"# Doc {i}\n") for i in range(5)]
    items = Pipeline(_registry(FailsOn("doc2.md"), Recorder("r")), PLAIN).run_batch(contexts, max_workers=3)
    assert all(item.error is None for item in items)
    assert [item.result.metadata.tags for item in items] == [
        ["seen", "r"], ["seen", "r"], ["r"], ["seen", "r"], ["seen", "r"],
    ]
    assert [item.result.failures for item in items] == [[], [], ["fails-on"], [], []]
    warnings = [m for m in log_messages if "fails-on" in m]
    assert len(warnings) == 1
    assert "doc2.md" in warnings[0]


def test_batch_timeout(log_messages):
    release = threading.Event()
    contexts = [_context("fast.md", "# Fast\n"), _context("slow.md", "# Slow\n")]
    try:
        items = Pipeline(_registry(Blocking(release)), PLAIN).run_batch(contexts, max_workers=2, timeout=0.2)
    finally:
        release.set()
    assert items[0].error is None
    assert items[1].error == "Timed out after 0.2s"
    assert any("slow.md" in m for m in log_messages)
