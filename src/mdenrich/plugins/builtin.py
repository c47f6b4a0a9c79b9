"""Built-in plugins wrapping the frontmatter engine and the content analyzer"""

from typing import Any, Optional

from mdenrich.config import Settings
from mdenrich.core.analyze import ContentAnalyzer
from mdenrich.core.frontmatter import FrontmatterRepair
from mdenrich.core.models import DocumentMetadata, ProcessingContext, QualityReport, merge_metadata
from mdenrich.core.parse import split_frontmatter
from mdenrich.plugins.base import MetadataEnhancer, PluginInfo, QualityValidator


ANALYZED_EXTENSIONS = {'.md', '.mdx', '.markdown', '.txt'}
KNOWN_FIELDS = ('title', 'description', 'category', 'tags')

LEVEL_BY_OVERALL = {'good': 'high', 'fair': 'medium', 'poor': 'low'}


def metadata_from_frontmatter(data: dict[str, Any]) -> DocumentMetadata:
    """Map a parsed frontmatter block onto DocumentMetadata; unknown keys go to `extra`."""
    tags = data.get('tags') or []
    if isinstance(tags, str):
        tags = [t.strip() for t in tags.split(',')]
    return DocumentMetadata(
        title=_text(data.get('title')),
        description=_text(data.get('description')),
        category=_text(data.get('category')),
        tags=[str(t) for t in tags if isinstance(t, (str, int, float)) and str(t).strip()],
        extra={k: v for k, v in data.items() if k not in KNOWN_FIELDS},
    )


def _text(value: Any) -> Optional[str]:
    if value is None or isinstance(value, (dict, list, tuple)):
        return None
    return str(value).strip() or None


class FrontmatterEnhancer(MetadataEnhancer):
    """Fills metadata from the document's own frontmatter, repairing it in memory first."""

    info = PluginInfo(
        name='frontmatter-enhancer',
        version='1.0.0',
        description='Enhances metadata from a repaired frontmatter block',
    )
    priority = 100

    def __init__(self, repair: FrontmatterRepair = None):
        self.repair = repair or FrontmatterRepair()

    @classmethod
    def from_settings(cls, settings: Settings) -> "FrontmatterEnhancer":
        return cls(FrontmatterRepair.from_settings(settings))

    def enhance(self, metadata: DocumentMetadata, context: ProcessingContext) -> DocumentMetadata:
        result = self.repair.repair_frontmatter(context.content(), context.input_path)
        if not result.success:
            return metadata
        block = split_frontmatter(result.repaired_content)
        return merge_metadata(derived=metadata_from_frontmatter(block.data), overrides=metadata)


class ContentAnalyzerEnhancer(MetadataEnhancer):
    """Merges analyzer-derived title, description, tags and reading statistics."""

    info = PluginInfo(
        name='markdown-enhancer',
        version='2.0.0',
        description='Enhances metadata extraction for text documents using ContentAnalyzer',
    )
    priority = 50

    def __init__(self, analyzer: ContentAnalyzer = None, default_category: str = None):
        self.analyzer = analyzer or ContentAnalyzer()
        self.default_category = default_category

    @classmethod
    def from_settings(cls, settings: Settings) -> "ContentAnalyzerEnhancer":
        return cls(ContentAnalyzer.from_settings(settings), settings.default_category)

    def enhance(self, metadata: DocumentMetadata, context: ProcessingContext) -> DocumentMetadata:
        if context.extension not in ANALYZED_EXTENSIONS:
            return metadata
        result = self.analyzer.analyze(context.content(), context.input_path)
        derived = result.metadata.model_copy(update={"extra": {
            "reading_time": result.analysis.reading_time,
            "word_count": result.analysis.word_count,
            "content_type": result.analysis.content_type,
            "complexity": result.analysis.complexity,
        }})
        defaults = DocumentMetadata(category=self.default_category)
        return merge_metadata(defaults, derived, metadata)


class FrontmatterValidator(QualityValidator):
    """Reports frontmatter structure and required-field problems."""

    info = PluginInfo(
        name='frontmatter-validator',
        version='1.0.0',
        description='Validates frontmatter quality and structure',
    )

    def __init__(self, repair: FrontmatterRepair = None):
        self.repair = repair or FrontmatterRepair()

    @classmethod
    def from_settings(cls, settings: Settings) -> "FrontmatterValidator":
        return cls(FrontmatterRepair.from_settings(settings))

    def validate(self, content: str, metadata: DocumentMetadata, context: ProcessingContext) -> QualityReport:
        result = self.repair.validate_content(content, context.input_path)
        suggestions = [i.suggestion for i in result.issues if i.suggestion]
        suggestions += [s for s in result.score.suggestions if s not in suggestions]
        return QualityReport(
            level=LEVEL_BY_OVERALL[result.score.overall],
            score=result.score.points,
            issues=result.issues,
            suggestions=tuple(suggestions),
        )
