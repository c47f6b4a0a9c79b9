"""Unit tests for plugins/builtin.py"""

from mdenrich.core.models import DocumentMetadata
from mdenrich.plugins.builtin import (
    ContentAnalyzerEnhancer,
    FrontmatterEnhancer,
    FrontmatterValidator,
    metadata_from_frontmatter,
)


DOC = """\
---
title: "Hello"
tags:
  - "a"
draft: true
---

# Hi

Body paragraph that is long enough.
"""


def test_metadata_from_frontmatter():
    metadata = metadata_from_frontmatter({"title": "T", "tags": "a, b", "draft": True, "category": ""})
    assert metadata.title == "T"
    assert metadata.category is None
    assert metadata.tags == ["a", "b"]
    assert metadata.extra == {"draft": True}


def test_frontmatter_enhancer_reads_repaired_block(make_context):
    metadata = FrontmatterEnhancer().enhance(DocumentMetadata(), make_context("docs/hi.md", DOC))
    assert metadata.title == "Hello"
    assert metadata.description == "Body paragraph that is long enough."
    assert metadata.tags == ["a"]
    assert metadata.extra == {"draft": True}


def test_frontmatter_enhancer_keeps_incoming_values(make_context):
    incoming = DocumentMetadata(title="Preset", tags=["first"])
    metadata = FrontmatterEnhancer().enhance(incoming, make_context("docs/hi.md", DOC))
    assert metadata.title == "Preset"
    assert metadata.tags == ["first", "a"]


def test_frontmatter_enhancer_skips_unrepairable(make_context):
    incoming = DocumentMetadata(title="Kept")
    context = make_context("bad.md", "---\ntitle: [oops\n---\n\nBody\n")
    assert FrontmatterEnhancer().enhance(incoming, context) == incoming


def test_analyzer_enhancer_adds_statistics(make_context):
    context = make_context("docs/guide/intro.md", "# Intro\n\nA paragraph describing the introduction well.\n")
    metadata = ContentAnalyzerEnhancer().enhance(DocumentMetadata(), context)
    assert metadata.title == "Intro"
    assert metadata.category == "Guides"
    assert metadata.extra["reading_time"] == 1
    assert metadata.extra["word_count"] > 0
    assert metadata.extra["complexity"] == "low"


def test_analyzer_enhancer_default_category(make_context):
    context = make_context("notes/x.md", "# X\n\nSome text for the body of the note.\n")
    metadata = ContentAnalyzerEnhancer(default_category="Misc").enhance(DocumentMetadata(), context)
    assert metadata.category == "Misc"


def test_analyzer_enhancer_does_not_override(make_context):
    context = make_context("docs/guide/intro.md", "# Intro\n\nA paragraph describing the introduction well.\n")
    incoming = DocumentMetadata(title="Chosen", category="Custom")
    metadata = ContentAnalyzerEnhancer().enhance(incoming, context)
    assert metadata.title == "Chosen"
    assert metadata.category == "Custom"


def test_analyzer_enhancer_skips_html(make_context):
    incoming = DocumentMetadata()
    assert ContentAnalyzerEnhancer().enhance(incoming, make_context("page.html", "<h1>x</h1>")) == incoming


def test_frontmatter_validator_maps_levels(make_context):
    validator = FrontmatterValidator()
    report = validator.validate("# No block\n", DocumentMetadata(), make_context("x.md", "# No block\n"))
    assert report.level == "low"
    assert report.score == 55
    assert "Add a frontmatter block with title and description" in report.suggestions

    report = validator.validate(DOC.replace('title: "Hello"', 'title: "Hello"\ndescription: "Greets."'),
                                DocumentMetadata(), make_context("x.md", DOC))
    assert report.level == "high"
    assert report.score == 100
