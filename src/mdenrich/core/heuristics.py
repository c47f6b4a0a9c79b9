"""Immutable lookup tables used by the content analyzer and format enhancers"""

from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Mapping


DEFAULT_CATEGORY_PATTERNS: Mapping[str, str] = MappingProxyType({
    'ai': 'AI & ML',
    'ml': 'AI & ML',
    'guide': 'Guides',
    'tutorial': 'Guides',
    'howto': 'Guides',
    'reference': 'Reference',
    'api': 'Reference',
    'design': 'Design System',
    'component': 'Design System',
    'project': 'Projects',
    'blog': 'Blog',
    'post': 'Blog',
    'news': 'Blog',
})

DEFAULT_TAG_PATTERNS: Mapping[str, tuple[str, ...]] = MappingProxyType({
    'javascript': ('javascript', 'node.js', 'npm', 'pnpm'),
    'typescript': ('typescript',),
    'python': ('python', 'pip', 'pytest'),
    'react': ('react', 'jsx'),
    'vue': ('vue', 'nuxt'),
    'css': ('css', 'scss', 'sass', 'tailwind'),
    'api': ('api', 'rest', 'graphql', 'endpoint'),
    'database': ('database', 'sql', 'mongodb', 'postgres', 'sqlite'),
    'ai': ('machine learning', 'llm', 'neural network'),
    'docker': ('docker', 'container', 'kubernetes'),
    'security': ('security', 'auth', 'authentication'),
    'performance': ('performance', 'optimization', 'cache'),
    'testing': ('testing', 'unit test', 'integration test'),
})

# Fence info strings folded onto one canonical language tag
DEFAULT_LANGUAGE_ALIASES: Mapping[str, str] = MappingProxyType({
    'js': 'javascript',
    'jsx': 'javascript',
    'mjs': 'javascript',
    'ts': 'typescript',
    'tsx': 'typescript',
    'py': 'python',
    'python3': 'python',
    'sh': 'shell',
    'bash': 'shell',
    'zsh': 'shell',
    'console': 'shell',
    'yml': 'yaml',
    'rb': 'ruby',
    'rs': 'rust',
    'golang': 'go',
})

# Languages that carry no topical signal
IGNORED_LANGUAGES = frozenset({'text', 'plain', 'plaintext', 'txt', 'output', 'diff', 'md', 'markdown'})

# (component name regex, tag); matched case-insensitively against `<Name`
DEFAULT_COMPONENT_TAGS: tuple[tuple[str, str], ...] = (
    (r'Tabs|TabItem', 'tabs'),
    (r'Card|CardGrid|LinkCard', 'cards'),
    (r'Aside|Details', 'callouts'),
    (r'Steps|Step', 'steps'),
    (r'Badge|Icon', 'badges'),
    (r'FileTree', 'file-tree'),
    (r'Code|Pre', 'code-examples'),
    (r'Chart|Graph|Diagram', 'visualization'),
    (r'Form|Input|Button|Select', 'forms'),
)

# Category fallback when no path segment matches; keywords are matched as words in topics
DEFAULT_TOPIC_CATEGORIES: Mapping[str, tuple[str, ...]] = MappingProxyType({
    'AI & ML': ('ai', 'machine learning', 'llm', 'neural', 'model'),
    'Development': ('code', 'programming', 'function', 'class', 'method'),
    'Guides': ('tutorial', 'guide', 'how to', 'step', 'setup'),
    'Reference': ('api', 'reference', 'documentation', 'spec'),
    'Design': ('ui', 'ux', 'design', 'style', 'component'),
})

CONTENT_TYPE_INDICATORS: Mapping[str, tuple[str, ...]] = MappingProxyType({
    'tutorial': ('step 1', 'first, ', 'next, ', 'finally, ', 'prerequisites'),
    'reference': ('parameters', 'returns', 'example', 'usage', 'api'),
    'guide': ('overview', 'introduction', 'getting started', 'how to'),
})


@dataclass(frozen=True)
class HeuristicTables:
    """Tunable analyzer tables; pass a custom instance to change behavior without patching."""
    category_patterns:  Mapping[str, str] = field(default_factory=lambda: DEFAULT_CATEGORY_PATTERNS)
    tag_patterns:       Mapping[str, tuple[str, ...]] = field(default_factory=lambda: DEFAULT_TAG_PATTERNS)
    language_aliases:   Mapping[str, str] = field(default_factory=lambda: DEFAULT_LANGUAGE_ALIASES)
    content_indicators: Mapping[str, tuple[str, ...]] = field(default_factory=lambda: CONTENT_TYPE_INDICATORS)
    topic_categories:   Mapping[str, tuple[str, ...]] = field(default_factory=lambda: DEFAULT_TOPIC_CATEGORIES)
