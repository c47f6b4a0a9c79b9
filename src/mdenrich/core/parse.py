"""File discovery, frontmatter splitting, and markdown-it tokenization"""

import re
from dataclasses import dataclass, field
from functools import lru_cache
from pathlib import Path
from typing import Any, Optional

import yaml
from markdown_it import MarkdownIt

from mdenrich.core.models import SUPPORTED_EXTENSIONS


OPEN_FENCE_RE = re.compile(r'\A---[ \t]*\r?\n')
FRONTMATTER_RE = re.compile(r'\A---[ \t]*\r?\n(.*?)^---[ \t]*(?:\r?\n|\Z)', re.DOTALL | re.MULTILINE)


@dataclass
class FrontmatterBlock:
    """A document split into its leading metadata block and body.

    `raw` is the block exactly as it appears on disk (fences included) so callers can
    put it back verbatim. `error` is set when a block is present but unusable.
    """
    present: bool
    raw:     str
    body:    str
    data:    dict[str, Any] = field(default_factory=dict)
    error:   Optional[str] = None


def split_frontmatter(text: str) -> FrontmatterBlock:
    """Split text into frontmatter block and body without raising on malformed input."""
    if not OPEN_FENCE_RE.match(text):
        return FrontmatterBlock(present=False, raw='', body=text)
    m = FRONTMATTER_RE.match(text)
    if not m:
        return FrontmatterBlock(
            present=True, raw='', body=text, error="Unterminated frontmatter block",
        )
    raw, body = text[:m.end()], text[m.end():]
    try:
        data = yaml.safe_load(m.group(1)) if m.group(1).strip() else {}
    except yaml.YAMLError as e:
        return FrontmatterBlock(present=True, raw=raw, body=body, error=f"Invalid YAML frontmatter: {e}")
    if data is None:
        data = {}
    if not isinstance(data, dict):
        return FrontmatterBlock(
            present=True, raw=raw, body=body,
            error=f"Invalid YAML frontmatter: expected a mapping, got {type(data).__name__}",
        )
    return FrontmatterBlock(present=True, raw=raw, body=body, data=data)


def strip_frontmatter(text: str) -> tuple[dict[str, Any], str]:
    """Return (frontmatter_dict, body); a malformed block yields an empty dict."""
    block = split_frontmatter(text)
    return block.data, block.body


@lru_cache(maxsize=8)
def make_parser(preset: str = 'gfm-like') -> MarkdownIt:
    """Build a MarkdownIt instance for the given preset name."""
    return MarkdownIt(preset, options_update={"linkify": False})


def parse_tokens(body: str, preset: str = 'gfm-like') -> list:
    """Tokenize a markdown body; body must already have its frontmatter removed."""
    return make_parser(preset).parse(body)


def discover_files(path: Path, extensions: set[str] = None) -> list[Path]:
    """Return sorted supported files under path, or [path] if a single supported file."""
    extensions = extensions or SUPPORTED_EXTENSIONS
    if path.is_file():
        return [path] if path.suffix.lower() in extensions else []
    return sorted(p for p in path.rglob('*') if p.is_file() and p.suffix.lower() in extensions)
