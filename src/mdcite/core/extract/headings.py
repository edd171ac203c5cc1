"""Heading extraction from the markdown-it token stream"""

from mdcite.core.models import HeadingObject
from mdcite.core.utils.tokens import heading_level


def _source_slice(token, source_lines: list[str]) -> str:
    """Raw source of a block token via token.map; fallback to token.content."""
    if token.map:
        start, end = token.map
        return '\n'.join(source_lines[start:end]).rstrip()
    return token.content


def iter_heading_tokens(tokens: list):
    """Yield (heading_open, inline) token pairs in document order."""
    for i, tok in enumerate(tokens):
        if heading_level(tok) is not None and i + 1 < len(tokens) and tokens[i + 1].type == 'inline':
            yield tok, tokens[i + 1]


def extract_headings(tokens: list, source_lines: list[str]) -> list[HeadingObject]:
    """Return one HeadingObject per heading token, including nested ones."""
    return [
        HeadingObject(level=heading_level(open_tok), text=inline.content.strip(),
                      raw=_source_slice(open_tok, source_lines))
        for open_tok, inline in iter_heading_tokens(tokens)
    ]
