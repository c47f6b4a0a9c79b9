"""Data models shared by the analyzer, repair engine, TOC builder and plugin pipeline"""

from pathlib import Path
from typing import Any, Literal, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

from mdenrich.config import Settings


SUPPORTED_EXTENSIONS = {'.md', '.mdx', '.markdown', '.txt', '.html'}

QualityLevel = Literal['high', 'medium', 'low']
IssueKind = Literal['error', 'warning', 'info']


def _dedupe(tags: list[str]) -> list[str]:
    return list(dict.fromkeys(t for t in tags if t))


class DocumentMetadata(BaseModel):
    """Metadata threaded through every enhancer; format-specific keys live in `extra`."""
    model_config = ConfigDict(validate_assignment=True)

    title:       Optional[str] = None
    description: Optional[str] = None
    category:    Optional[str] = None
    tags:        list[str] = Field(default_factory=list)
    extra:       dict[str, Any] = Field(default_factory=dict)

    @field_validator('tags')
    @classmethod
    def _unique_tags(cls, tags: list[str]) -> list[str]:
        """Tags keep first-occurrence order with duplicates removed."""
        return _dedupe(tags)

    def add_tags(self, *tags: str) -> None:
        self.tags = [*self.tags, *tags]


class ProcessingContext(BaseModel):
    """Immutable per-document record created before the pipeline runs."""
    model_config = ConfigDict(frozen=True)

    input_path:  str
    output_path: str = ""
    filename:    str
    extension:   str
    options:     Settings = Field(default_factory=Settings)
    data:        dict[str, Any] = Field(default_factory=dict)

    @classmethod
    def for_path(
        cls,
        input_path: str | Path,
        output_path: str | Path = "",
        options: Settings = None,
        content: str = None,
        ) -> "ProcessingContext":
        """Build a context from a source path; `content` is passed through the side channel."""
        path = Path(input_path)
        return cls(
            input_path=str(path),
            output_path=str(output_path),
            filename=path.name,
            extension=path.suffix.lower(),
            options=options or Settings(),
            data={"content": content} if content is not None else {},
        )

    def content(self) -> str:
        """Return side-channel content, reading input_path when none was supplied."""
        if isinstance(self.data.get("content"), str):
            return self.data["content"]
        return Path(self.input_path).read_text(encoding='utf-8')


class ValidationIssue(BaseModel):
    """A single finding; severity (0-10) only drives display buckets and scoring."""
    model_config = ConfigDict(frozen=True)

    kind:       IssueKind
    message:    str
    severity:   Optional[int] = Field(default=None, ge=0, le=10)
    field:      Optional[str] = None
    suggestion: Optional[str] = None

    @property
    def bucket(self) -> str:
        severity = self.severity or 0
        if severity >= 7:
            return "High"
        if severity >= 4:
            return "Medium"
        return "Low"


class QualityReport(BaseModel):
    model_config = ConfigDict(frozen=True)

    level:       QualityLevel
    score:       float
    issues:      tuple[ValidationIssue, ...] = ()
    suggestions: tuple[str, ...] = ()


class QualityScore(BaseModel):
    """Coarse frontmatter score; `overall` is the ordinal callers should act on."""
    model_config = ConfigDict(frozen=True)

    overall:           Literal['poor', 'fair', 'good']
    points:            int
    title_score:       int = 0
    description_score: int = 0
    content_score:     int = 0
    structure_score:   int = 0
    suggestions:       tuple[str, ...] = ()


class ValidationResult(BaseModel):
    model_config = ConfigDict(frozen=True)

    valid:    bool
    issues:   tuple[ValidationIssue, ...]
    score:    QualityScore
    metadata: Optional[dict[str, Any]] = None


class RepairResult(BaseModel):
    """Outcome of a frontmatter repair; `fixed` is true iff the content changed."""
    model_config = ConfigDict(frozen=True)

    success:          bool
    fixed:            bool
    repaired_content: str
    issues:           tuple[str, ...]


class TocEntry(BaseModel):
    level:    int = Field(ge=1, le=6)
    title:    str
    anchor:   str
    children: list["TocEntry"] = Field(default_factory=list)


class Analysis(BaseModel):
    """Raw heuristics derived by the content analyzer."""
    word_count:   int = 0
    reading_time: int = 0
    complexity:   Literal['low', 'medium', 'high'] = 'low'
    content_type: str = 'documentation'
    headings:     list[TocEntry] = Field(default_factory=list)
    topics:       list[str] = Field(default_factory=list)


class AnalysisResult(BaseModel):
    metadata: DocumentMetadata
    analysis: Analysis


def _first(*values):
    for value in values:
        if value:
            return value
    return None


def merge_metadata(
    defaults: DocumentMetadata = None,
    derived: DocumentMetadata = None,
    overrides: DocumentMetadata = None,
    ) -> DocumentMetadata:
    """Merge three metadata layers with a fixed precedence.

    - title, description, category: first non-empty of overrides, derived, defaults
    - tags: ordered union of overrides, derived, defaults
    - extra: updated key by key from defaults, then derived, then overrides
    """
    layers = [m or DocumentMetadata() for m in (defaults, derived, overrides)]
    low, mid, high = layers
    extra: dict[str, Any] = {}
    for layer in layers:
        extra.update(layer.extra)
    return DocumentMetadata(
        title=_first(high.title, mid.title, low.title),
        description=_first(high.description, mid.description, low.description),
        category=_first(high.category, mid.category, low.category),
        tags=[*high.tags, *mid.tags, *low.tags],
        extra=extra,
    )
