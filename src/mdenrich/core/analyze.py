"""Content heuristics: title, description, tags, category and reading statistics"""

import math
import re
from dataclasses import dataclass, field
from pathlib import Path

from mdenrich.config import Settings
from mdenrich.core.heuristics import IGNORED_LANGUAGES, HeuristicTables
from mdenrich.core.models import Analysis, AnalysisResult, DocumentMetadata, TocEntry
from mdenrich.core.parse import parse_tokens, strip_frontmatter
from mdenrich.core.utils.slug import humanize, slugify, unique_anchor
from mdenrich.core.utils.text import end_sentence, strip_inline_markdown, truncate_description
from mdenrich.core.utils.tokens import iter_headings


FENCED_CODE_RE = re.compile(r'^(```|~~~).*?^\1[ \t]*$', re.DOTALL | re.MULTILINE)
PARAGRAPH_SPLIT_RE = re.compile(r'\n[ \t]*\n')
BOLD_RE = re.compile(r'\*\*(.+?)\*\*')

# Paragraphs starting with these are structure, not prose
NON_PROSE_PREFIXES = ('#', '```', '~~~', '{', '<', '|', 'import ', 'export ')
MIN_PARAGRAPH_LENGTH = 20

# Complexity weights and cut points; weights stay positive
HEADING_WEIGHT = 1.0
CODE_BLOCK_WEIGHT = 2.0
LINK_WEIGHT = 0.5
COMPLEXITY_LOW = 5
COMPLEXITY_MEDIUM = 15


@dataclass
class _Structure:
    """Counts gathered from one pass over the token stream."""
    headings:    list[TocEntry] = field(default_factory=list)
    languages:   list[str] = field(default_factory=list)
    code_blocks: int = 0
    links:       int = 0


def fallback_description(title: str) -> str:
    """Title-based description used when the body has no usable paragraph."""
    lower = title.lower()
    for keyword, template in (
        ('tutorial', "Step-by-step tutorial for {}."),
        ('guide', "Comprehensive guide covering {}."),
        ('api', "API documentation and reference for {}."),
        ('reference', "Reference documentation for {}."),
    ):
        if keyword in lower.split():
            rest = ' '.join(w for w in title.split() if w.lower() != keyword)
            if rest:
                return template.format(rest)
    return f"Documentation for {title}."


def count_words(body: str) -> int:
    """Count prose words, ignoring code, images and markdown punctuation."""
    text = FENCED_CODE_RE.sub(' ', body)
    text = strip_inline_markdown(text)
    text = re.sub(r'[#*_~`>|]', ' ', text)
    return len(text.split())


class ContentAnalyzer:
    """Derives metadata from a document's text. Pure: no I/O, never raises."""

    def __init__(
        self,
        tables: HeuristicTables = None,
        max_description_length: int = 150,
        max_tags: int = 8,
        words_per_minute: int = 200,
        parser_config: str = 'gfm-like',
        ):
        self.tables = tables or HeuristicTables()
        self.max_description_length = max_description_length
        self.max_tags = max_tags
        self.words_per_minute = words_per_minute
        self.parser_config = parser_config

    @classmethod
    def from_settings(cls, settings: Settings, tables: HeuristicTables = None) -> "ContentAnalyzer":
        return cls(
            tables=tables,
            max_description_length=settings.max_description_length,
            max_tags=settings.max_tags,
            words_per_minute=settings.words_per_minute,
            parser_config=settings.parser_config,
        )

    def analyze(self, content: str, path: str) -> AnalysisResult:
        """Analyze content (frontmatter is skipped) and return derived metadata plus statistics."""
        filename_title = self.title_from_path(path)
        _, body = strip_frontmatter(content or '')
        if not body.strip():
            return AnalysisResult(metadata=DocumentMetadata(title=filename_title), analysis=Analysis())

        structure = self._scan(parse_tokens(body, self.parser_config))
        word_count = count_words(body)
        title = self.title(structure) or filename_title
        topics = self.topics(body, structure)
        analysis = Analysis(
            word_count=word_count,
            reading_time=max(1, math.ceil(word_count / self.words_per_minute)),
            complexity=self.complexity(structure),
            content_type=self.content_type(body, path),
            headings=structure.headings,
            topics=topics,
        )
        metadata = DocumentMetadata(
            title=title,
            description=self.description(body) or fallback_description(title),
            category=self.category(path, topics),
            tags=self.tags(body, structure, word_count),
        )
        return AnalysisResult(metadata=metadata, analysis=analysis)

    # --- fields ---

    @staticmethod
    def title_from_path(path: str) -> str:
        return humanize(Path(path).stem) or "Untitled"

    @staticmethod
    def title(structure: _Structure) -> str | None:
        """First level-1 heading, markup removed."""
        for entry in structure.headings:
            if entry.level == 1 and entry.title:
                return entry.title
        return None

    def description(self, body: str) -> str | None:
        """First prose paragraph of at least MIN_PARAGRAPH_LENGTH characters, cleaned and capped."""
        prose = FENCED_CODE_RE.sub('', body)
        for paragraph in PARAGRAPH_SPLIT_RE.split(prose):
            paragraph = paragraph.strip()
            if len(paragraph) < MIN_PARAGRAPH_LENGTH or paragraph.startswith(NON_PROSE_PREFIXES):
                continue
            text = strip_inline_markdown(paragraph)
            if len(text) < MIN_PARAGRAPH_LENGTH:
                continue
            text = end_sentence(text)
            return truncate_description(text, self.max_description_length)
        return None

    def tags(self, body: str, structure: _Structure, word_count: int) -> list[str]:
        """Bounded tag set from fence languages, structure and keyword patterns."""
        tags: list[str] = []
        for lang in structure.languages:
            lang = self.tables.language_aliases.get(lang, lang)
            if lang not in IGNORED_LANGUAGES:
                tags.append(lang)
        if structure.code_blocks:
            tags.append('code-examples')
        if structure.links >= 3 and structure.links * 100 >= 2 * max(word_count, 1):
            tags.append('links')
        if any(h.level >= 3 for h in structure.headings):
            tags.append('in-depth')

        lower = body.lower()
        for tag, patterns in self.tables.tag_patterns.items():
            if any(re.search(rf'(?<![\w-]){re.escape(p)}(?![\w-])', lower) for p in patterns):
                tags.append(tag)

        tags = list(dict.fromkeys(tags))
        return tags[:self.max_tags] if self.max_tags else tags

    def category(self, path: str, topics: list[str] = ()) -> str | None:
        """First path segment word matching a category pattern, else the first topic category."""
        for part in Path(path).with_suffix('').parts:
            for word in re.split(r'[-_.\s]+', part.lower()):
                if word in self.tables.category_patterns:
                    return self.tables.category_patterns[word]
        for category, keywords in self.tables.topic_categories.items():
            if any(re.search(rf'\b{re.escape(k)}\b', topic) for k in keywords for topic in topics):
                return category
        return None

    # --- statistics ---

    @staticmethod
    def complexity_score(structure: _Structure) -> float:
        return (
            len(structure.headings) * HEADING_WEIGHT
            + structure.code_blocks * CODE_BLOCK_WEIGHT
            + structure.links * LINK_WEIGHT
        )

    def complexity(self, structure: _Structure) -> str:
        score = self.complexity_score(structure)
        if score < COMPLEXITY_LOW:
            return 'low'
        if score < COMPLEXITY_MEDIUM:
            return 'medium'
        return 'high'

    def content_type(self, body: str, path: str) -> str:
        lower = body.lower()
        path_lower = Path(path).as_posix().lower()
        if 'tutorial' in path_lower or 'guide' in path_lower:
            return 'tutorial' if 'step' in lower else 'guide'
        if 'api' in path_lower or 'reference' in path_lower:
            return 'reference'
        if 'blog' in path_lower or '/post' in f"/{path_lower}":
            return 'blog'
        for content_type, indicators in self.tables.content_indicators.items():
            if sum(1 for i in indicators if i in lower) >= 2:
                return content_type
        return 'documentation'

    @staticmethod
    def topics(body: str, structure: _Structure) -> list[str]:
        topics = [h.title.lower() for h in structure.headings]
        topics += [t.strip().lower() for t in BOLD_RE.findall(body) if 2 < len(t.strip()) < 30]
        return [t for t in dict.fromkeys(topics) if len(t) > 2][:10]

    def _scan(self, tokens: list) -> _Structure:
        structure = _Structure()
        seen: set[str] = set()
        for level, text, _ in iter_headings(tokens):
            title = strip_inline_markdown(text)
            anchor = unique_anchor(slugify(title), seen)
            structure.headings.append(TocEntry(level=level, title=title, anchor=anchor))
        for tok in tokens:
            if tok.type in ('fence', 'code_block'):
                structure.code_blocks += 1
                info = (tok.info or '').strip().split()
                if tok.type == 'fence' and info:
                    structure.languages.append(info[0].lower())
            elif tok.type == 'inline' and tok.children:
                structure.links += sum(1 for c in tok.children if c.type == 'link_open')
        return structure
