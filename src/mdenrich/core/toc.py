"""Table of contents: heading tree, anchors, rendering, insertion and removal"""

import html
import re
from typing import Callable

from mdenrich.config import Settings
from mdenrich.core.models import TocEntry
from mdenrich.core.parse import parse_tokens, split_frontmatter
from mdenrich.core.utils.slug import slugify, unique_anchor
from mdenrich.core.utils.text import strip_inline_markdown
from mdenrich.core.utils.tokens import heading_level, iter_headings


TOC_TITLE = "Table of Contents"
TOC_CLASS = "table-of-contents"
TOC_POSITIONS = ('top', 'after-title', 'custom')

NAV_OPEN_RE = re.compile(
    rf'<nav\b[^>]*\bclass\s*=\s*["\'][^"\']*\b{TOC_CLASS}\b[^"\']*["\'][^>]*>', re.IGNORECASE,
)
NAV_BLOCK_RE = re.compile(NAV_OPEN_RE.pattern + r'.*?</nav>[ \t]*\n?', re.IGNORECASE | re.DOTALL)


class TocBuilder:
    """Builds and manipulates tables of contents for markdown bodies.

    `anchor_func` replaces the default slug for every heading; repeated anchors
    are still suffixed so they stay unique within a document.
    """

    def __init__(
        self,
        max_depth: int = 4,
        min_entries: int = 2,
        title: str = TOC_TITLE,
        parser_config: str = 'gfm-like',
        anchor_func: Callable[[str], str] = None,
        ):
        self.max_depth = max_depth
        self.min_entries = min_entries
        self.title = title
        self.parser_config = parser_config
        self.anchor_func = anchor_func or self.anchor

    @classmethod
    def from_settings(cls, settings: Settings) -> "TocBuilder":
        return cls(
            max_depth=settings.toc_max_depth,
            min_entries=settings.toc_min_entries,
            parser_config=settings.parser_config,
        )

    @staticmethod
    def anchor(title: str) -> str:
        """URL-safe anchor: 'API Reference' -> 'api-reference'."""
        return slugify(title)

    def _is_toc_title(self, title: str) -> bool:
        return title.strip().lower() == self.title.lower()

    def _headings(self, body: str) -> list[tuple[int, str, str, tuple[int, int] | None]]:
        """(level, title, anchor, line map) for every heading except a TOC heading.

        Repeated anchors get -2, -3, ... suffixes in document order.
        """
        seen: set[str] = set()
        headings = []
        for level, text, line_map in iter_headings(parse_tokens(body, self.parser_config)):
            title = strip_inline_markdown(text)
            if self._is_toc_title(title):
                continue
            headings.append((level, title, unique_anchor(self.anchor_func(title), seen), line_map))
        return headings

    def generate_toc(self, content: str) -> list[TocEntry]:
        """Heading tree for content; empty when fewer than min_entries headings qualify."""
        body = split_frontmatter(content).body
        headings = [h for h in self._headings(body) if h[0] <= self.max_depth]
        if len(headings) < self.min_entries:
            return []

        roots: list[TocEntry] = []
        stack: list[TocEntry] = []
        for level, title, anchor, _ in headings:
            entry = TocEntry(level=level, title=title, anchor=anchor)
            while stack and stack[-1].level >= level:
                stack.pop()
            if stack:
                stack[-1].children.append(entry)
            else:
                roots.append(entry)
            stack.append(entry)
        return roots

    @staticmethod
    def section_entries(toc: list[TocEntry]) -> list[TocEntry]:
        """Entries listed in a rendered TOC: a level-1 root is the title, so list its children."""
        entries: list[TocEntry] = []
        for root in toc:
            if root.level == 1:
                entries.extend(root.children)
            else:
                entries.append(root)
        return entries

    def has_existing_toc(self, content: str) -> bool:
        body = split_frontmatter(content).body
        if NAV_OPEN_RE.search(body):
            return True
        for _, text, _ in iter_headings(parse_tokens(body, self.parser_config)):
            if self._is_toc_title(strip_inline_markdown(text)):
                return True
        return False

    def insert_toc_into_content(self, content: str, position: str = 'after-title', marker: str = None) -> str:
        """Insert a markdown TOC into content.

        position:
            'after-title'   after the first level-1 heading, or at the top of the body without one
            'top'           at the top of the body, below any frontmatter
            'custom'        in place of the first occurrence of `marker`; content is unchanged
                            when the marker is absent, and a missing marker means 'after-title'
        """
        if position not in TOC_POSITIONS:
            raise ValueError(f"Unknown TOC position: {position!r}, expected one of {', '.join(TOC_POSITIONS)}")
        if self.has_existing_toc(content):
            return content
        toc = self.generate_toc(content)
        entries = self.section_entries(toc)
        if not entries:
            return content

        block = split_frontmatter(content)
        prefix, body = block.raw, block.body
        rendered = self.render_toc_as_markdown(entries)

        if position == 'custom' and marker:
            if marker not in body:
                return content
            return prefix + body.replace(marker, rendered, 1)

        first_h1 = next((h for h in self._headings(body) if h[0] == 1 and h[3]), None)
        if position == 'top' or first_h1 is None:
            return f"{prefix}{rendered}\n" + body.lstrip("\n")

        # markdown-it line maps count '\n'-separated lines
        lines = body.split('\n')
        end = first_h1[3][1]
        before = '\n'.join(lines[:end]).rstrip('\n')
        after = '\n'.join(lines[end:]).lstrip('\n')
        if not after:
            return f"{prefix}{before}\n\n{rendered}"
        return f"{prefix}{before}\n\n{rendered}\n{after}"

    def remove_existing_toc(self, content: str) -> str:
        """Delete a TOC heading with the list right after it, and any TOC <nav> block.

        Headings inside fenced code or block quotes are left alone.
        """
        block = split_frontmatter(content)
        body = NAV_BLOCK_RE.sub('', block.body)

        lines = body.split('\n')
        dropped: set[int] = set()
        for start, end in self._toc_spans(body):
            while end < len(lines) - 1 and not lines[end].strip():
                end += 1
            dropped.update(range(start, end))
        return block.raw + '\n'.join(line for i, line in enumerate(lines) if i not in dropped)

    def _toc_spans(self, body: str) -> list[tuple[int, int]]:
        """Line ranges of each top-level TOC heading plus the list directly after it."""
        tokens = parse_tokens(body, self.parser_config)
        spans = []
        for i, tok in enumerate(tokens):
            if tok.level != 0 or heading_level(tok) is None or not tok.map or i + 1 >= len(tokens):
                continue
            if not self._is_toc_title(strip_inline_markdown(tokens[i + 1].content.strip())):
                continue
            start, end = tok.map
            # heading_open, inline, heading_close, then the list
            following = tokens[i + 3] if i + 3 < len(tokens) else None
            if following is not None and following.type in ('bullet_list_open', 'ordered_list_open') and following.map:
                end = following.map[1]
            spans.append((start, end))
        return spans

    # --- renderers ---

    def render_toc_as_markdown(self, toc: list[TocEntry]) -> str:
        lines = [f"## {self.title}", ""]

        def walk(entries: list[TocEntry], depth: int) -> None:
            for entry in entries:
                lines.append(f"{'  ' * depth}- [{entry.title}](#{entry.anchor})")
                walk(entry.children, depth + 1)

        walk(toc, 0)
        return '\n'.join(lines) + '\n'

    def render_toc_as_html(self, toc: list[TocEntry]) -> str:
        lines = [f'<nav class="{TOC_CLASS}">', f'<h2>{html.escape(self.title)}</h2>', '<ul>']

        def walk(entries: list[TocEntry], depth: int) -> None:
            indent = '  ' * depth
            for entry in entries:
                lines.append(f'{indent}<li><a href="#{entry.anchor}">{html.escape(entry.title)}</a>')
                if entry.children:
                    lines.append(f'{indent}  <ul>')
                    walk(entry.children, depth + 2)
                    lines.append(f'{indent}  </ul>')
                lines.append(f'{indent}</li>')

        walk(toc, 1)
        lines += ['</ul>', '</nav>']
        return '\n'.join(lines)

    @staticmethod
    def render_toc_as_sidebar(toc: list[TocEntry], base_url: str = '') -> list[dict]:
        """Nested {label, link, items} dicts for site navigation."""
        items = []
        for entry in toc:
            item = {"label": entry.title, "link": f"{base_url}#{entry.anchor}"}
            if entry.children:
                item["items"] = TocBuilder.render_toc_as_sidebar(entry.children, base_url)
            items.append(item)
        return items
