"""Unit tests for core/analyze.py"""

import pytest

from mdenrich.core.analyze import ContentAnalyzer, count_words, fallback_description


def test_analyze_title_from_first_h1(analyzer, guide_md):
    """The first level-1 heading becomes the title."""
    result = analyzer.analyze(guide_md, "docs/guide/getting-started.md")
    assert result.metadata.title == "Getting Started"


def test_analyze_description_from_first_paragraph(analyzer, guide_md):
    """The first prose paragraph becomes the description."""
    result = analyzer.analyze(guide_md, "docs/guide/getting-started.md")
    assert result.metadata.description == (
        "This guide walks you through installing the toolkit and running your first build."
    )


def test_analyze_tags(analyzer, guide_md):
    """Fence languages are aliased, then structure and keyword tags follow."""
    tags = analyzer.analyze(guide_md, "docs/guide/getting-started.md").metadata.tags
    assert tags[:2] == ["shell", "code-examples"]
    assert "in-depth" in tags
    assert "python" in tags
    assert len(tags) == len(set(tags))


def test_analyze_category_from_path(analyzer, guide_md):
    assert analyzer.analyze(guide_md, "docs/guide/getting-started.md").metadata.category == "Guides"
    assert analyzer.analyze(guide_md, "docs/misc/getting-started.md").metadata.category is None


def test_analyze_category_falls_back_to_topics(analyzer):
    content = "# Notes\n\n## Machine Learning Basics\n\nText.\n\n## Setup\n\nMore.\n"
    assert analyzer.analyze(content, "misc/notes.md").metadata.category == "AI & ML"
    assert analyzer.analyze("# Notes\n\n## Setup\n\nText.\n", "misc/notes.md").metadata.category == "Guides"


def test_analyze_category_topic_keywords_match_whole_words(analyzer):
    """'build' does not count as the 'ui' keyword."""
    assert analyzer.analyze("# Build\n\nRun the **build** step.\n", "misc/x.md").metadata.category is None


def test_analyze_heading_anchors_match_toc(analyzer, toc, toc_md):
    anchors = [h.anchor for h in analyzer.analyze(toc_md, "guide.md").analysis.headings]
    assert anchors == ["guide", "api-reference", "get-usersid", "api-reference-2"]
    toc_anchors = [entry.anchor for entry in toc.generate_toc(toc_md)[0].children]
    assert toc_anchors == ["api-reference", "api-reference-2"]


def test_analyze_statistics(analyzer, guide_md):
    analysis = analyzer.analyze(guide_md, "docs/guide/getting-started.md").analysis
    assert analysis.word_count > 0
    assert analysis.reading_time == 1
    assert analysis.content_type == "guide"
    assert [h.level for h in analysis.headings] == [1, 2, 2, 3]


def test_analyze_empty_body_falls_back_to_filename(analyzer):
    """An empty document yields only a filename-derived title."""
    result = analyzer.analyze("", "notes/my_file.md")
    assert result.metadata.title == "My File"
    assert result.metadata.description is None
    assert result.metadata.tags == []


def test_analyze_skips_frontmatter(analyzer):
    content = "---\ntitle: Ignored\n---\n\nSome paragraph long enough for a description here.\n"
    result = analyzer.analyze(content, "notes/readme.md")
    assert result.metadata.title == "Readme"
    assert result.metadata.description == "Some paragraph long enough for a description here."


def test_analyze_description_is_capped(analyzer):
    """A long opening paragraph is cut to the configured maximum."""
    paragraph = " ".join(f"word{i}" for i in range(80))
    description = analyzer.analyze(f"# T\n\n{paragraph}\n", "t.md").metadata.description
    assert len(description) <= 150
    assert description.endswith(".")


def test_analyze_without_paragraph_uses_title_fallback(analyzer):
    result = analyzer.analyze("# Python Tutorial\n\n## Setup\n", "t.md")
    assert result.metadata.description == "Step-by-step tutorial for Python."


def test_analyze_respects_max_tags(guide_md):
    tags = ContentAnalyzer(max_tags=2).analyze(guide_md, "g.md").metadata.tags
    assert tags == ["shell", "code-examples"]


@pytest.mark.parametrize("sections,expected", [
    (1, "low"),
    (8, "medium"),
    (16, "high"),
])
def test_complexity_grows_with_headings(analyzer, sections, expected):
    body = "\n\n".join(f"## Section {i}\n\ntext" for i in range(sections))
    assert analyzer.analyze(body, "c.md").analysis.complexity == expected


@pytest.mark.parametrize("title,expected", [
    ("Python Tutorial", "Step-by-step tutorial for Python."),
    ("Deployment Guide", "Comprehensive guide covering Deployment."),
    ("Widgets", "Documentation for Widgets."),
])
def test_fallback_description(title, expected):
    assert fallback_description(title) == expected


def test_count_words_ignores_code_and_markup():
    assert count_words("# Title\n\nHello **world**\n\n```\ncode here\n```\n") == 3
