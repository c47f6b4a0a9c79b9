"""Content quality validator: weighted metadata, structure, content and accessibility checks"""

import re
from collections import Counter

from mdenrich.config import Settings
from mdenrich.core.models import DocumentMetadata, ProcessingContext, QualityReport, ValidationIssue
from mdenrich.core.parse import parse_tokens, split_frontmatter
from mdenrich.core.utils.tokens import iter_headings
from mdenrich.plugins.base import PluginInfo, QualityValidator


WEIGHTS = {"metadata": 0.25, "structure": 0.3, "content": 0.35, "accessibility": 0.1}
HIGH_THRESHOLD = 80
MEDIUM_THRESHOLD = 60

PLACEHOLDERS = (
    'lorem ipsum', 'todo', 'tbd', 'fixme', 'xxx', 'placeholder', 'coming soon', 'under construction',
)
EXAMPLE_HOSTS = ('example.com', 'localhost')
COLOR_ONLY_RE = re.compile(
    r'\b(red|green|blue|yellow|orange|purple)\s+(indicates?|means?|shows?)\b', re.IGNORECASE,
)
PIPE_ROW_RE = re.compile(r'^[ \t]*\|.*\|[ \t]*$', re.MULTILINE)
SENTENCE_SPLIT_RE = re.compile(r'[.!?]+')


class _Section:
    """Accumulates issues and deductions for one scoring dimension."""

    def __init__(self, issues: list[ValidationIssue]):
        self.issues = issues
        self.score = 100

    def flag(self, kind: str, message: str, severity: int, deduct: int = 0, field: str = None) -> None:
        self.issues.append(ValidationIssue(kind=kind, message=message, severity=severity, field=field))
        self.score -= deduct

    @property
    def result(self) -> int:
        return max(0, self.score)


class ContentQualityValidator(QualityValidator):
    """Scores a document 0-100 across four weighted dimensions and suggests fixes."""

    info = PluginInfo(
        name='content-quality-validator',
        version='1.0.0',
        description='Validates content quality and provides improvement suggestions',
    )

    def __init__(self, parser_config: str = 'gfm-like'):
        self.parser_config = parser_config

    @classmethod
    def from_settings(cls, settings: Settings) -> "ContentQualityValidator":
        return cls(settings.parser_config)

    def validate(self, content: str, metadata: DocumentMetadata, context: ProcessingContext) -> QualityReport:
        body = split_frontmatter(content).body
        tokens = parse_tokens(body, self.parser_config)
        issues: list[ValidationIssue] = []

        scores = {
            "metadata": self.check_metadata(metadata, _Section(issues)),
            "structure": self.check_structure(body, tokens, _Section(issues)),
            "content": self.check_content(body, _Section(issues)),
            "accessibility": self.check_accessibility(body, tokens, _Section(issues)),
        }
        score = round(sum(scores[k] * w for k, w in WEIGHTS.items()))
        if score >= HIGH_THRESHOLD:
            level = 'high'
        elif score >= MEDIUM_THRESHOLD:
            level = 'medium'
        else:
            level = 'low'
        return QualityReport(
            level=level,
            score=score,
            issues=tuple(issues),
            suggestions=tuple(self.suggestions(issues, metadata, body, tokens)),
        )

    @staticmethod
    def check_metadata(metadata: DocumentMetadata, section: _Section) -> int:
        title, description = metadata.title or '', metadata.description or ''
        if not title:
            section.flag('error', "Missing title", 9, 30, 'title')
        elif len(title) < 5:
            section.flag('warning', "Title is very short (less than 5 characters)", 6, 15, 'title')
        elif len(title) > 100:
            section.flag('warning', "Title is very long (over 100 characters)", 4, 10, 'title')

        if not description:
            section.flag('warning', "Missing description", 7, 20, 'description')
        elif len(description) < 20:
            section.flag('warning', "Description is very short (less than 20 characters)", 5, 10, 'description')
        elif len(description) > 300:
            section.flag('info', "Description is quite long (over 300 characters)", 2, 5, 'description')

        if not metadata.category:
            section.flag('info', "No category specified", 3, 5, 'category')
        if not metadata.tags:
            section.flag('info', "No tags specified", 2, 5, 'tags')
        elif len(metadata.tags) > 10:
            section.flag('warning', "Too many tags (over 10)", 3, 5, 'tags')
        return section.result

    @staticmethod
    def check_structure(body: str, tokens: list, section: _Section) -> int:
        levels = [level for level, _, _ in iter_headings(tokens)]
        if not levels:
            section.flag('warning', "No headings found - content may lack structure", 6, 20)
        elif len(levels) > 20:
            section.flag('info', "Many headings found - consider consolidating content", 2, 5)

        if any(b > a + 1 for a, b in zip(levels, levels[1:])):
            section.flag('warning', "Heading hierarchy has gaps (e.g., H1 followed by H3)", 4, 10)

        words = len(body.split())
        if words < 50:
            section.flag('warning', "Content is very short (less than 50 words)", 5, 15)
        elif words > 5000:
            section.flag('info', "Content is very long (over 5000 words) - consider splitting", 2, 5)

        fences = [t for t in tokens if t.type == 'fence']
        if any(not t.info.strip() for t in fences):
            section.flag('info', "Some code blocks lack language specification", 1, 2)
        return section.result

    @staticmethod
    def check_content(body: str, section: _Section) -> int:
        lowered = body.lower()
        for placeholder in PLACEHOLDERS:
            if re.search(rf'\b{re.escape(placeholder)}\b', lowered):
                section.flag('warning', f'Found placeholder text: "{placeholder}"', 7, 15)

        urls = re.findall(r'\[[^\]]+\]\(([^)]+)\)', body)
        for url in urls:
            if any(host in url for host in EXAMPLE_HOSTS):
                section.flag('warning', "Found example or localhost link that may need updating", 4, 5)
        if any(url.startswith(('./', '../', '/')) for url in urls):
            section.flag('info', "Internal links found - verify they point to existing files", 3)

        sentences = [s.strip() for s in SENTENCE_SPLIT_RE.split(body) if len(s.strip()) > 10]
        if any(n > 1 for n in Counter(sentences).values()):
            section.flag('info', "Found potentially duplicate sentences", 2, 5)
        return section.result

    @staticmethod
    def check_accessibility(body: str, tokens: list, section: _Section) -> int:
        images = [
            child for t in tokens if t.type == 'inline'
            for child in (t.children or []) if child.type == 'image'
        ]
        missing_alt = sum(1 for img in images if not img.content.strip())
        if missing_alt:
            section.flag('warning', f"{missing_alt} image(s) without alt text", 6, 20)

        has_table = any(t.type == 'table_open' for t in tokens)
        if PIPE_ROW_RE.search(body) and not has_table:
            section.flag('warning', "Tables found without proper headers", 4, 10)

        if COLOR_ONLY_RE.search(body):
            section.flag('info', "Content may rely on color alone for meaning", 3, 5)
        return section.result

    @staticmethod
    def suggestions(issues: list[ValidationIssue], metadata: DocumentMetadata, body: str, tokens: list) -> list[str]:
        kinds = Counter(i.kind for i in issues)
        suggestions = []
        if kinds['error']:
            suggestions.append("Fix critical errors first, especially missing titles or descriptions")
        if kinds['warning']:
            suggestions.append("Address warnings to improve content quality and user experience")
        if len(metadata.title or '') < 10:
            suggestions.append("Consider a more descriptive title that clearly explains the content")
        if len(metadata.description or '') < 50:
            suggestions.append("Add a comprehensive description that summarizes the key points")
        if not any(t.type == 'heading_open' for t in tokens):
            suggestions.append("Add headings to improve content structure and readability")
        if len(body.split()) < 100:
            suggestions.append("Consider expanding the content with more details and examples")
        if not metadata.tags:
            suggestions.append("Add relevant tags to improve discoverability")
        if any(t.type == 'fence' and not t.info.strip() for t in tokens):
            suggestions.append("Ensure all code blocks specify their programming language")
        return suggestions
