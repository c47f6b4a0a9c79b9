"""Text clean-up helpers shared by the analyzer and the frontmatter repair engine"""

import re


_INLINE_MARKERS = [
    (re.compile(r'!\[([^\]]*)\]\([^)]*\)'), ''),          # images
    (re.compile(r'\[([^\]]+)\]\([^)]*\)'), r'\1'),        # links keep their text
    (re.compile(r'`([^`]*)`'), r'\1'),
    (re.compile(r'\*\*(.+?)\*\*'), r'\1'),
    (re.compile(r'__(.+?)__'), r'\1'),
    (re.compile(r'(?<!\w)\*(.+?)\*(?!\w)'), r'\1'),
    (re.compile(r'(?<!\w)_(.+?)_(?!\w)'), r'\1'),
    (re.compile(r'~~(.+?)~~'), r'\1'),
]

# Characters that would break a double-quoted frontmatter value
_UNSAFE_RE = re.compile(r'["\\{}\[\]]')
_TAIL_RE = re.compile(r'[\s.,;:!?-]+$')


def collapse_whitespace(text: str) -> str:
    return re.sub(r'\s+', ' ', text).strip()


def strip_inline_markdown(text: str) -> str:
    """Remove emphasis, link, image and code markers, keeping the readable text."""
    for pattern, repl in _INLINE_MARKERS:
        text = pattern.sub(repl, text)
    return collapse_whitespace(text)


def clean_field(value: str) -> str:
    """Strip characters that cannot live inside a quoted frontmatter value."""
    return collapse_whitespace(_UNSAFE_RE.sub('', value))


def end_sentence(text: str) -> str:
    """Normalize trailing punctuation to a single terminator, adding a period if none."""
    text = text.rstrip()
    m = _TAIL_RE.search(text)
    if m is None:
        return f"{text}." if text else text
    tail, text = m.group(0), text[:m.start()]
    if not text:
        return text
    if '?' in tail:
        return f"{text}?"
    if '!' in tail:
        return f"{text}!"
    return f"{text}."


def truncate_description(text: str, max_length: int) -> str:
    """Cut text to at most max_length characters at a word boundary, ending with one period."""
    text = collapse_whitespace(text)
    if len(text) <= max_length:
        return text
    cut = text[:max_length - 1]
    space = cut.rfind(' ')
    if space > max_length // 2:
        cut = cut[:space]
    cut = _TAIL_RE.sub('', cut)
    return f"{cut}."
