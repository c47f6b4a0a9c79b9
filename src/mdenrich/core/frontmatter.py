"""Frontmatter validation and repair over the full serialized document.

The on-disk shape is a `---` fenced block of `key: value` pairs where strings are
double-quoted and lists are YAML block sequences. Repair only rewrites the block
when something actually needed fixing, so a clean document comes back byte-identical
and repairing twice is the same as repairing once.
"""

import json
import re
from pathlib import Path
from typing import Any

import yaml

from mdenrich.config import Settings
from mdenrich.core.analyze import ContentAnalyzer, fallback_description
from mdenrich.core.models import QualityScore, RepairResult, ValidationIssue, ValidationResult
from mdenrich.core.parse import split_frontmatter
from mdenrich.core.utils.slug import humanize
from mdenrich.core.utils.text import clean_field, truncate_description


REQUIRED_FIELDS = ('title', 'description')
HEADING_RE = re.compile(r'^(#{1,6})\s+\S', re.MULTILINE)
PLAIN_KEY_RE = re.compile(r'^[A-Za-z_][\w-]*$')

NO_REPAIRS = "No repairs needed"
ADDED_FRONTMATTER = "Added missing frontmatter"

# Severity of each finding; >= 7 makes a document invalid
SEVERITY = {
    'structure': 9,
    'title': 8,
    'description': 7,
    'empty_body': 5,
    'long_title': 4,
    'long_description': 4,
    'heading_gap': 3,
    'no_headings': 2,
}
INVALID_SEVERITY = 7
FAIR_THRESHOLD = 4


class UnrepairableField(ValueError):
    """A value cannot be made syntactically valid without losing its meaning."""


def _kind(severity: int) -> str:
    if severity >= INVALID_SEVERITY:
        return 'error'
    return 'warning' if severity >= 4 else 'info'


def _issue(key: str, message: str, field: str = None, suggestion: str = None) -> ValidationIssue:
    severity = SEVERITY[key]
    return ValidationIssue(kind=_kind(severity), message=message, severity=severity,
                           field=field, suggestion=suggestion)


def _format_scalar(value: Any) -> str:
    if isinstance(value, str):
        return json.dumps(value, ensure_ascii=False)
    if isinstance(value, bool):
        return 'true' if value else 'false'
    if value is None:
        return 'null'
    if isinstance(value, (int, float)):
        return str(value)
    if hasattr(value, 'isoformat'):
        return value.isoformat()
    return json.dumps(str(value), ensure_ascii=False)


def _is_nested(value: Any) -> bool:
    """Mappings and lists holding containers go through YAML unchanged."""
    if isinstance(value, dict):
        return True
    return isinstance(value, (list, tuple)) and any(isinstance(item, (dict, list, tuple)) for item in value)


def build_frontmatter(data: dict[str, Any]) -> str:
    """Serialize a mapping as a fenced block: quoted strings, block-sequence lists."""
    lines = ['---']
    for key, value in data.items():
        if value is None or value == [] or value == '':
            continue
        if not PLAIN_KEY_RE.match(str(key)) or _is_nested(value):
            lines.append(yaml.safe_dump({key: value}, sort_keys=False, allow_unicode=True).rstrip())
        elif isinstance(value, (list, tuple)):
            lines.append(f'{key}:')
            lines.extend(f'  - {_format_scalar(item)}' for item in value)
        else:
            lines.append(f'{key}: {_format_scalar(value)}')
    lines.append('---')
    return '\n'.join(lines) + '\n'


class FrontmatterRepair:
    """Validates and repairs the metadata block of a serialized document."""

    def __init__(
        self,
        analyzer: ContentAnalyzer = None,
        max_description_length: int = 150,
        max_title_length: int = 60,
        ):
        self.analyzer = analyzer or ContentAnalyzer(max_description_length=max_description_length)
        self.max_description_length = max_description_length
        self.max_title_length = max_title_length

    @classmethod
    def from_settings(cls, settings: Settings, analyzer: ContentAnalyzer = None) -> "FrontmatterRepair":
        return cls(
            analyzer=analyzer or ContentAnalyzer.from_settings(settings),
            max_description_length=settings.max_description_length,
            max_title_length=settings.max_title_length,
        )

    # --- validation ---

    def validate_content(self, content: str, path: str) -> ValidationResult:
        """Check block presence, required fields and body, in that order."""
        block = split_frontmatter(content)
        issues: list[ValidationIssue] = []

        if not block.present:
            issues.append(_issue('structure', "Missing frontmatter",
                                 suggestion="Add a frontmatter block with title and description"))
            return self._result(issues, None, content)
        if block.error:
            issues.append(_issue('structure', block.error, suggestion="Fix the frontmatter block syntax"))
            return self._result(issues, None, content)

        data = block.data
        for name in REQUIRED_FIELDS:
            if not self._text(data.get(name)):
                issues.append(_issue(name, f"Missing required frontmatter field: {name}",
                                     field=name, suggestion=f"Add {name} field to frontmatter"))

        if not block.body.strip():
            issues.append(_issue('empty_body', "Document body is empty", suggestion="Add content to the document"))
        else:
            self._check_headings(block.body, issues)

        title = self._text(data.get('title'))
        if title and len(title) > self.max_title_length:
            issues.append(_issue('long_title', f"Title is too long ({len(title)} chars, max {self.max_title_length})",
                                 field='title', suggestion="Shorten title for better readability"))
        description = self._text(data.get('description'))
        if description and len(description) > self.max_description_length:
            issues.append(_issue(
                'long_description',
                f"Description is too long ({len(description)} chars, max {self.max_description_length})",
                field='description', suggestion="Shorten description for better SEO",
            ))
        return self._result(issues, data, block.body)

    @staticmethod
    def _check_headings(body: str, issues: list[ValidationIssue]) -> None:
        levels = [len(m.group(1)) for m in HEADING_RE.finditer(body)]
        if not levels:
            issues.append(_issue('no_headings', "No headings found",
                                 suggestion="Add headings to improve document structure"))
            return
        previous = 0
        for level in levels:
            if level > previous + 1:
                issues.append(_issue('heading_gap', "Inconsistent heading structure",
                                     suggestion="Use sequential heading levels (h1 -> h2 -> h3)"))
                return
            previous = level

    def _result(self, issues: list[ValidationIssue], data: dict | None, body: str) -> ValidationResult:
        return ValidationResult(
            valid=all((i.severity or 0) < INVALID_SEVERITY for i in issues),
            issues=tuple(issues),
            score=self.score(issues, data, body),
            metadata=data,
        )

    def score(self, issues: list[ValidationIssue], data: dict | None, body: str) -> QualityScore:
        """Overall is driven only by issue severity: any invalidating issue is poor."""
        total = sum(i.severity or 0 for i in issues)
        if any((i.severity or 0) >= INVALID_SEVERITY for i in issues):
            overall = 'poor'
        elif total >= FAIR_THRESHOLD:
            overall = 'fair'
        else:
            overall = 'good'

        data = data or {}
        title = self._text(data.get('title'))
        description = self._text(data.get('description'))
        title_score = 0 if not title else 100 if 10 < len(title) <= self.max_title_length else 60
        description_score = (
            0 if not description
            else 100 if 50 <= len(description) <= self.max_description_length else 70
        )
        words = len(body.split())
        content_score = 100 if words > 100 else max(40, words) if words else 0
        structure_score = 100 if HEADING_RE.search(body) else 50

        suggestions = []
        if title_score < 80:
            suggestions.append("Improve title quality")
        if description_score < 80:
            suggestions.append("Add better description")
        if content_score < 80:
            suggestions.append("Add more content")
        if structure_score < 80:
            suggestions.append("Improve document structure with headings")

        return QualityScore(
            overall=overall,
            points=max(0, 100 - 5 * total),
            title_score=title_score,
            description_score=description_score,
            content_score=content_score,
            structure_score=structure_score,
            suggestions=tuple(suggestions),
        )

    # --- repair ---

    def repair_frontmatter(self, content: str, path: str) -> RepairResult:
        """Add or fix the metadata block; returns the input unchanged when nothing needs repair."""
        block = split_frontmatter(content)

        if not block.present:
            generated = self._generate(content, path)
            repaired = f"{build_frontmatter(generated)}\n{content}"
            return RepairResult(success=True, fixed=True, repaired_content=repaired,
                                issues=(ADDED_FRONTMATTER,))
        if block.error:
            return self._failed(content, f"Failed to repair: {block.error}")

        data = dict(block.data)
        issues: list[str] = []
        try:
            self._repair_fields(data, block.body, path, issues)
        except UnrepairableField as e:
            return self._failed(content, f"Failed to repair: {e}")

        if not issues:
            return RepairResult(success=True, fixed=False, repaired_content=content, issues=(NO_REPAIRS,))
        repaired = build_frontmatter(data) + block.body
        if repaired == content:
            return RepairResult(success=True, fixed=False, repaired_content=content, issues=(NO_REPAIRS,))
        return RepairResult(success=True, fixed=True, repaired_content=repaired, issues=tuple(issues))

    def _repair_fields(self, data: dict[str, Any], body: str, path: str, issues: list[str]) -> None:
        derived = None

        def analyzed():
            nonlocal derived
            if derived is None:
                derived = self.analyzer.analyze(body, path).metadata
            return derived

        for name in REQUIRED_FIELDS:
            value = data.get(name)
            if isinstance(value, (dict, list, tuple)):
                raise UnrepairableField(f"field '{name}' is a {type(value).__name__}, expected text")
            text = self._text(value)
            if not text:
                data[name] = self._fill(name, analyzed(), data, path)
                issues.append(f"Generated missing {name}")
                continue
            cleaned = clean_field(text)
            if not cleaned:
                raise UnrepairableField(f"field '{name}' has no usable characters")
            truncated = name == 'description' and len(cleaned) > self.max_description_length
            if truncated:
                cleaned = truncate_description(cleaned, self.max_description_length)
                issues.append("Truncated description")
            if cleaned != value:
                data[name] = cleaned
                if not truncated:
                    issues.append(f"Cleaned {name} formatting")

        category = data.get('category')
        if isinstance(category, str) and category and clean_field(category) != category:
            cleaned = clean_field(category)
            if not cleaned:
                raise UnrepairableField("field 'category' has no usable characters")
            data['category'] = cleaned
            issues.append("Cleaned category formatting")

        if 'tags' in data and data['tags'] is not None:
            tags = self._repair_tags(data['tags'])
            if tags != data['tags']:
                data['tags'] = tags
                issues.append("Normalized tags")

    def _fill(self, name: str, derived, data: dict[str, Any], path: str) -> str:
        if name == 'title':
            return clean_field(derived.title or '') or self._path_title(path)
        title = self._text(data.get('title')) or derived.title or self._path_title(path)
        description = clean_field(derived.description or '') or clean_field(fallback_description(title))
        return truncate_description(description, self.max_description_length)

    @staticmethod
    def _repair_tags(tags: Any) -> list[str]:
        if isinstance(tags, str):
            tags = tags.split(',')
        if not isinstance(tags, (list, tuple)):
            raise UnrepairableField(f"tags must be a list, got {type(tags).__name__}")
        cleaned = []
        for tag in tags:
            if isinstance(tag, (dict, list, tuple)):
                raise UnrepairableField("tags must contain only text values")
            if tag is None:
                continue
            text = clean_field(str(tag))
            if text:
                cleaned.append(text)
        return list(dict.fromkeys(cleaned))

    def _generate(self, content: str, path: str) -> dict[str, Any]:
        derived = self.analyzer.analyze(content, path).metadata
        title = clean_field(derived.title or '') or self._path_title(path)
        description = clean_field(derived.description or '') if content.strip() else ''
        if not description:
            description = clean_field(fallback_description(title))
        parent = Path(path).parent.name
        return {
            'title': title,
            'description': truncate_description(description, self.max_description_length),
            'category': clean_field(humanize(parent)) if parent else None,
        }

    @staticmethod
    def _path_title(path: str) -> str:
        return clean_field(ContentAnalyzer.title_from_path(path)) or "Untitled"

    @staticmethod
    def _text(value: Any) -> str:
        if value is None or isinstance(value, (dict, list, tuple)):
            return ''
        return str(value).strip()

    @staticmethod
    def _failed(content: str, message: str) -> RepairResult:
        return RepairResult(success=False, fixed=False, repaired_content=content, issues=(message,))
