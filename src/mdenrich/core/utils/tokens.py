"""Shared markdown-it token utilities"""

from typing import Iterator


def heading_level(token) -> int | None:
    """Return the heading level (1-6) for a heading_open token, else None."""
    if token.type == 'heading_open' and token.tag and token.tag[0] == 'h' and token.tag[1:].isdigit():
        return int(token.tag[1:])
    return None


def iter_headings(tokens: list) -> Iterator[tuple[int, str, tuple[int, int] | None]]:
    """Yield (level, inline source, line map) for every heading in document order."""
    for i, tok in enumerate(tokens):
        level = heading_level(tok)
        if level is None or i + 1 >= len(tokens):
            continue
        inline = tokens[i + 1]
        yield level, inline.content.strip(), tuple(tok.map) if tok.map else None
