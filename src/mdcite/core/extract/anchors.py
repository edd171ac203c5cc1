"""Header and block anchor extraction"""

import re

from mdcite.core.models import BlockAnchor, HeaderAnchor
from mdcite.core.extract.headings import iter_heading_tokens
from mdcite.core.utils.slug import slugify


BLOCK_ANCHOR_RE = re.compile(r'(?<!\S)\^([A-Za-z0-9_-]+)\s*$')
EMPHASIS_ANCHOR_RE = re.compile(r'==\*\*([^*]+)\*\*==')
EXPLICIT_ID_RE = re.compile(r'^(.+?)\s*\{#([^}]+)\}$')


def header_anchors(tokens: list, source_lines: list[str]) -> list[HeaderAnchor]:
    """Derive a dual-id anchor from each heading token.

    `id` is the heading text as written; `url_encoded_id` is its slug. An
    explicit `{#custom-id}` suffix replaces both ids.
    """
    anchors = []
    for open_tok, inline in iter_heading_tokens(tokens):
        text = inline.content.strip()
        line_index = open_tok.map[0] if open_tok.map else 0
        full_match = source_lines[line_index].rstrip('\n') if line_index < len(source_lines) else text

        if m := EXPLICIT_ID_RE.match(text):
            anchor_id = m.group(2).strip()
            anchors.append(HeaderAnchor(
                id=anchor_id, url_encoded_id=anchor_id, raw_text=m.group(1).strip(),
                full_match=full_match, line=line_index + 1, column=1,
            ))
        else:
            anchors.append(HeaderAnchor(
                id=text, url_encoded_id=slugify(text), raw_text=text,
                full_match=full_match, line=line_index + 1, column=1,
            ))
    return anchors


def block_anchors(source_lines: list[str], skip_lines: set[int]) -> list[BlockAnchor]:
    """Scan raw lines for `^id` at end of line and `==**Text**==` markers."""
    anchors = []
    for index, line in enumerate(source_lines):
        if index in skip_lines:
            continue
        line = line.rstrip('\n')
        if m := BLOCK_ANCHOR_RE.search(line):
            anchors.append(BlockAnchor(
                id=m.group(1), full_match=m.group(0).rstrip(), line=index + 1, column=m.start() + 1,
            ))
        for m in EMPHASIS_ANCHOR_RE.finditer(line):
            anchors.append(BlockAnchor(
                id=m.group(1), full_match=m.group(0), line=index + 1, column=m.start() + 1,
            ))
    return anchors


def extract_anchors(tokens: list, source_lines: list[str], skip_lines: set[int]) -> list:
    """Return header anchors (document order) followed by block anchors."""
    return [*header_anchors(tokens, source_lines), *block_anchors(source_lines, skip_lines)]
