"""MDX metadata enhancer: component usage, JSX complexity and interactivity"""

import re
from dataclasses import dataclass

from mdenrich.core.heuristics import DEFAULT_COMPONENT_TAGS
from mdenrich.core.models import DocumentMetadata, ProcessingContext
from mdenrich.plugins.base import MetadataEnhancer, PluginInfo


COMPONENT_RE = re.compile(r'<([A-Z][a-zA-Z0-9]*)')
IMPORT_RE = re.compile(r'^import\s+', re.MULTILINE)
EXPORT_RE = re.compile(r'^export\s+', re.MULTILINE)
EXPRESSION_RE = re.compile(r'\{[^}]+\}')
NESTED_RE = re.compile(r'<[A-Z][a-zA-Z0-9]*[^>]*>[\s\S]*?<[A-Z][a-zA-Z0-9]*')
FRONTMATTER_RE = re.compile(r'^---\r?\n[\s\S]+?\r?\n---')

# Weighted JSX complexity score and cut points
COMPONENT_WEIGHT = 2
IMPORT_WEIGHT = 3
EXPORT_WEIGHT = 5
EXPRESSION_WEIGHT = 1
NESTED_WEIGHT = 3
LOW_THRESHOLD = 10
MEDIUM_THRESHOLD = 30

INTERACTIVITY_SIGNALS = (
    (re.compile(r'\bon[A-Z][a-zA-Z]*='), 'event-handlers'),
    (re.compile(r'\buse(State|Reducer|Context)\b'), 'state-management'),
    (re.compile(r'\buse(Layout)?Effect\b'), 'side-effects'),
    (re.compile(r'<(form|input|button|select|textarea)\b', re.IGNORECASE), 'forms'),
    (re.compile(r'\bimport\s*\('), 'dynamic-imports'),
    (re.compile(r'\bclient:(load|idle|visible|media|only)\b'), 'client-hydration'),
)


@dataclass(frozen=True)
class MDXEnhancementOptions:
    detect_components:    bool = True
    analyze_complexity:   bool = True
    add_mdx_tags:         bool = True
    detect_interactivity: bool = True


class MDXEnhancer(MetadataEnhancer):
    """Adds MDX-specific keys to metadata; other formats pass through untouched."""

    info = PluginInfo(
        name='mdx-enhancer',
        version='1.0.0',
        description='Enhances metadata for MDX documents',
    )
    priority = 10

    def __init__(
        self,
        options: MDXEnhancementOptions = None,
        component_tags: tuple[tuple[str, str], ...] = DEFAULT_COMPONENT_TAGS,
        ):
        self.options = options or MDXEnhancementOptions()
        self.component_tags = tuple(
            (re.compile(rf'<({pattern})', re.IGNORECASE), tag) for pattern, tag in component_tags
        )

    def enhance(self, metadata: DocumentMetadata, context: ProcessingContext) -> DocumentMetadata:
        if context.extension != '.mdx':
            return metadata

        content = context.content()
        extra = dict(metadata.extra)
        tags = list(metadata.tags)

        if self.options.detect_components:
            components = self.detect_components(content)
            extra['mdx_components'] = components
            extra['component_count'] = len(components)
        if self.options.analyze_complexity:
            extra['mdx_complexity'] = self.analyze_complexity(content)
        if self.options.add_mdx_tags:
            tags += self.mdx_tags(content)
        if self.options.detect_interactivity:
            features = self.detect_interactivity(content)
            extra['is_interactive'] = bool(features)
            extra['interactive_features'] = features

        extra['format'] = 'mdx'
        extra['has_frontmatter'] = bool(FRONTMATTER_RE.match(content))
        extra['has_imports'] = bool(IMPORT_RE.search(content))
        return metadata.model_copy(update={"extra": extra, "tags": DocumentMetadata(tags=tags).tags})

    @staticmethod
    def detect_components(content: str) -> list[str]:
        """Distinct capitalized JSX tag names, sorted."""
        return sorted(set(COMPONENT_RE.findall(content)))

    @staticmethod
    def complexity_score(content: str) -> int:
        return (
            len(COMPONENT_RE.findall(content)) * COMPONENT_WEIGHT
            + len(IMPORT_RE.findall(content)) * IMPORT_WEIGHT
            + len(EXPORT_RE.findall(content)) * EXPORT_WEIGHT
            + len(EXPRESSION_RE.findall(content)) * EXPRESSION_WEIGHT
            + len(NESTED_RE.findall(content)) * NESTED_WEIGHT
        )

    def analyze_complexity(self, content: str) -> str:
        score = self.complexity_score(content)
        if score < LOW_THRESHOLD:
            return 'low'
        if score < MEDIUM_THRESHOLD:
            return 'medium'
        return 'high'

    def mdx_tags(self, content: str) -> list[str]:
        tags = ['mdx']
        tags += [tag for pattern, tag in self.component_tags if pattern.search(content)]
        if re.search(r'\bon(Click|Change|Submit)\b', content):
            tags.append('interactive')
        return list(dict.fromkeys(tags))

    @staticmethod
    def detect_interactivity(content: str) -> list[str]:
        return [feature for pattern, feature in INTERACTIVITY_SIGNALS if pattern.search(content)]
