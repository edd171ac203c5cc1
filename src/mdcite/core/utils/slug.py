"""Heading slug generation for URL-style anchor ids"""

import re


_PUNCT_RE = re.compile(r'[^\w\s-]')
_SPACE_RE = re.compile(r'\s')


def slugify(text: str) -> str:
    """Convert heading text to a lowercase, hyphen-separated anchor slug.

    Mirrors the GitHub/Obsidian heading-id rule: punctuation is dropped, each
    whitespace character becomes one hyphen, runs of hyphens are kept as-is.
    """
    text = _PUNCT_RE.sub('', text.strip().lower())
    return _SPACE_RE.sub('-', text)
