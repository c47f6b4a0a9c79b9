"""Slug and title helpers for anchors and filename-derived titles"""

import re


def slugify(text: str) -> str:
    """Convert text to a lowercase, hyphen-separated URL-safe slug.

    Punctuation other than hyphens is dropped, underscores included.
    """
    text = text.lower()
    text = re.sub(r'[^\w\s-]|_', '', text)
    text = re.sub(r'\s+', '-', text)
    return re.sub(r'-+', '-', text).strip('-')


def unique_anchor(base: str, seen: set[str]) -> str:
    """Return `base`, or `base-2`, `base-3`, ... when taken; records the result in `seen`."""
    base = base or 'section'
    anchor, n = base, 1
    while anchor in seen:
        n += 1
        anchor = f"{base}-{n}"
    seen.add(anchor)
    return anchor


def humanize(name: str) -> str:
    """Turn a file stem like 'api-reference_v2' or 'gettingStarted' into a title-cased phrase."""
    text = re.sub(r'[-_]+', ' ', name)
    text = re.sub(r'([a-z])([A-Z])', r'\1 \2', text)
    words = text.split()
    return ' '.join(w[:1].upper() + w[1:] for w in words)
