"""Shared markdown-it token utilities"""


CODE_TOKEN_TYPES = {'fence', 'code_block'}


def heading_level(token) -> int | None:
    """Return the heading level (1-6) for a heading_open token, else None."""
    if token.type == 'heading_open' and token.tag and token.tag[0] == 'h' and token.tag[1:].isdigit():
        return int(token.tag[1:])
    return None


def code_lines(tokens: list) -> set[int]:
    """Return 0-based source line numbers covered by fenced or indented code blocks."""
    lines: set[int] = set()
    for tok in tokens:
        if tok.type in CODE_TOKEN_TYPES and tok.map:
            start, end = tok.map
            lines.update(range(start, end))
    return lines


def inline_text(children: list) -> str:
    """Concatenate the visible text of inline child tokens."""
    return ''.join(c.content for c in children if c.type in ('text', 'code_inline', 'html_inline'))
