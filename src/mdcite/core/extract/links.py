"""Link extraction: CommonMark links from tokens, Obsidian syntaxes from raw lines"""

import logging
import os
import re

from markdown_it import MarkdownIt
from markdown_it.common.utils import normalizeReference, unescapeAll

from mdcite.core.extract.markers import detect_extraction_marker
from mdcite.core.models import LinkObject, LinkSource, LinkTarget, TargetPath
from mdcite.core.utils.paths import is_within, relative_link_path, resolve_link_path
from mdcite.core.utils.tokens import inline_text


logger = logging.getLogger(__name__)

EXTERNAL_RE = re.compile(r'^[a-zA-Z][a-zA-Z0-9+.-]+:')      # http:, https:, mailto:, ...
EMPHASIS_ANCHOR_RE = re.compile(r'^==\*\*[^*]+\*\*==$')

# Inline CommonMark link as written in source, used to locate token links.
INLINE_LINK_RE = re.compile(
    r'(?<!!)\[(?P<text>(?:[^\[\]\\]|\\.|\[[^\[\]]*\])*)\]'
    r'\(\s*(?P<dest><[^<>\n]*>|[^\s()]*(?:\([^\s()]*\)[^\s()]*)*)'
    r'(?:\s+(?:"[^"]*"|\'[^\']*\'|\([^()]*\)))?\s*\)'
)
# Full [text][label], collapsed [text][] and shortcut [label] reference links.
REFERENCE_LINK_RE = re.compile(
    r'(?<![!\\])\[(?P<text>(?:[^\[\]\\]|\\.|\[[^\[\]]*\])*)\]'
    r'(?:\[(?P<label>(?:[^\[\]\\]|\\.)*)\])?(?![(\[:])'
)
# Permissive fallbacks for anchors with raw spaces/colons/parens (not valid CommonMark).
_NESTED_ANCHOR = r'((?:[^()]|\((?:[^()]|\([^)]*\))*\))+)'
MD_FILE_LINK_RE = re.compile(r'(?<!!)\[([^\]]+)\]\(([^)#]+\.md)(?:#' + _NESTED_ANCHOR + r')?\)')
INTERNAL_LINK_RE = re.compile(r'(?<!!)\[([^\]]+)\]\(#' + _NESTED_ANCHOR + r'\)')

WIKI_LINK_RE = re.compile(r'\[\[(?P<path>[^\[\]|#]*)(?:#(?P<anchor>[^\[\]|]+))?(?:\|(?P<text>[^\[\]]+))?\]\]')
CITE_LINK_RE = re.compile(r'\[cite:\s*([^\]]+)\]')
CARET_REF_RE = re.compile(r'(?<![\w^])\^([A-Za-z0-9_-]+)')
SEMVER_TAIL_RE = re.compile(r'^\.\d')


def determine_anchor_type(anchor: str | None) -> str | None:
    """Classify a fragment: None when absent, 'block' for ^id or ==**Text**==, else 'header'."""
    if not anchor:
        return None
    if anchor.startswith('^') or EMPHASIS_ANCHOR_RE.match(anchor):
        return 'block'
    return 'header'


def is_inside_inline_code(line: str, position: int) -> bool:
    """True if position falls inside a backtick code span (unescaped backticks only)."""
    in_code = False
    for i, char in enumerate(line[:position]):
        if char == '`' and (i == 0 or line[i - 1] != '\\'):
            in_code = not in_code
    return in_code


def _resolve_target(raw_path: str, source_path: str, scope_root: str | None) -> str | None:
    """Absolute target path, or None for malformed or out-of-scope references."""
    if not raw_path.strip() or '\x00' in raw_path:
        return None
    absolute = resolve_link_path(raw_path, source_path)
    if scope_root and not is_within(absolute, scope_root):
        return None
    return absolute


def create_link_object(
    *,
    link_type: str,
    raw_path: str | None,
    anchor: str | None,
    source_path: str,
    text: str | None,
    full_match: str,
    line: int,
    column: int,
    lines: list[str],
    scope_root: str | None = None,
    ) -> LinkObject:
    """Build a LinkObject; line and column are 1-based.

    A link without a path targets its own source file (scope 'internal').
    """
    if raw_path:
        absolute = _resolve_target(raw_path, source_path, scope_root)
        target_path = TargetPath(
            raw=raw_path,
            absolute=absolute,
            relative=relative_link_path(absolute, source_path) if absolute else None,
        )
        scope = 'cross-document'
    else:
        target_path = TargetPath(raw=None, absolute=source_path, relative=os.path.basename(source_path))
        scope = 'internal'

    end_line = line - 1 + full_match.count('\n')
    end_column = (column - 1 + len(full_match)) if '\n' not in full_match else len(full_match.rsplit('\n', 1)[1])

    return LinkObject(
        link_type=link_type,
        scope=scope,
        anchor_type=determine_anchor_type(anchor),
        source=LinkSource(path=source_path),
        target=LinkTarget(path=target_path, anchor=anchor or None),
        text=text,
        full_match=full_match,
        line=line,
        column=column,
        extraction_marker=detect_extraction_marker(lines, end_line, end_column),
    )


def _split_href(href: str) -> tuple[str, str | None]:
    """Split 'path#anchor' into (path, anchor); anchor None when absent or empty."""
    path, _, anchor = href.partition('#')
    return path, anchor or None


def _close_index(children: list, open_index: int) -> int:
    """Index of the link_close matching children[open_index]."""
    depth = 0
    for i in range(open_index, len(children)):
        if children[i].type == 'link_open':
            depth += 1
        elif children[i].type == 'link_close':
            depth -= 1
            if depth == 0:
                return i
    return len(children)


def _position(block: str, start: int, m: re.Match) -> tuple[int, int]:
    """0-based (line_index, column_index) of a match in a block that begins at line start."""
    before = block[:m.start()]
    return start + before.count('\n'), m.start() - (before.rfind('\n') + 1)


def _locate(md: MarkdownIt, href: str, lines: list[str], start: int, end: int, used, references: dict) -> tuple[int, int, str, str] | None:
    """Find the first unused source occurrence of a link with this href in lines[start:end].

    Inline links are matched on their unescaped destination; reference links
    ([text][label], [text][], [label]) on the definition their label names.
    Returns (line_index, column_index, full_match, dest), 0-based.
    """
    block = '\n'.join(lines[start:end])
    candidates = []
    for m in INLINE_LINK_RE.finditer(block):
        dest = m.group('dest')
        if dest.startswith('<') and dest.endswith('>'):
            dest = dest[1:-1]
        dest = unescapeAll(dest)
        if dest == href or md.normalizeLink(dest) == href:
            candidates.append((*_position(block, start, m), m.group(0), dest))

    for m in REFERENCE_LINK_RE.finditer(block):
        label = m.group('label') or m.group('text')
        ref = references.get(normalizeReference(label))
        if ref and ref.get('href') == href:
            candidates.append((*_position(block, start, m), m.group(0), href))

    free = [c for c in candidates if (c[0], c[1]) not in used]
    return min(free) if free else None


def _token_links(md, tokens, lines, source_path, scope_root, references: dict, found: dict) -> None:
    """Collect standard markdown links from inline tokens (code spans never yield links)."""
    for tok in tokens:
        if tok.type != 'inline' or not tok.children:
            continue
        start, end = tok.map if tok.map else (0, len(lines))
        for i, child in enumerate(tok.children):
            if child.type != 'link_open':
                continue
            href = child.attrGet('href') or ''
            if EXTERNAL_RE.match(href):
                continue
            text = inline_text(tok.children[i + 1:_close_index(tok.children, i)])

            located = _locate(md, href, lines, start, end, found.keys(), references)
            if located is None:
                logger.debug("no source position for link %r -> %s", text, href)
                continue
            line_index, column_index, full_match, written = located
            raw_path, anchor = _split_href(written)
            found[(line_index, column_index)] = create_link_object(
                link_type='markdown', raw_path=raw_path, anchor=anchor, source_path=source_path,
                text=text, full_match=full_match, line=line_index + 1, column=column_index + 1,
                lines=lines, scope_root=scope_root,
            )


def _claimed_spans(found: dict, index: int) -> list[tuple[int, int]]:
    """0-based column spans on line index already covered by an extracted link."""
    spans = []
    for link in found.values():
        first = link.line - 1
        parts = link.full_match.split('\n')
        if not first <= index < first + len(parts):
            continue
        offset = index - first
        start = link.column - 1 if offset == 0 else 0
        spans.append((start, start + len(parts[offset])))
    return spans


def _line_links(line: str, index: int, lines, source_path, scope_root, found: dict) -> None:
    """Regex extraction for syntaxes markdown-it does not recognize."""
    def add(link_type, raw_path, anchor, text, m):
        if is_inside_inline_code(line, m.start()):
            return
        if any(s <= m.start() < e for s, e in _claimed_spans(found, index)):
            return
        found[(index, m.start())] = create_link_object(
            link_type=link_type, raw_path=raw_path, anchor=anchor, source_path=source_path,
            text=text, full_match=m.group(0), line=index + 1, column=m.start() + 1,
            lines=lines, scope_root=scope_root,
        )

    for m in MD_FILE_LINK_RE.finditer(line):
        if not EXTERNAL_RE.match(m.group(2)):
            add('markdown', m.group(2), m.group(3), m.group(1), m)
    for m in INTERNAL_LINK_RE.finditer(line):
        add('markdown', None, m.group(2), m.group(1), m)

    for m in WIKI_LINK_RE.finditer(line):
        path, anchor = m.group('path').strip(), m.group('anchor')
        if not path and not anchor:
            continue
        if path and not os.path.splitext(path)[1]:
            path += '.md'
        add('wiki', path or None, anchor.strip() if anchor else None, m.group('text'), m)

    for m in CITE_LINK_RE.finditer(line):
        raw_path = m.group(1).strip()
        add('cite', raw_path, None, f"cite: {raw_path}", m)

    for m in CARET_REF_RE.finditer(line):
        tail = line[m.end():]
        if SEMVER_TAIL_RE.match(tail) or not tail.strip():    # version range / block-anchor definition
            continue
        add('caret', None, f"^{m.group(1)}", None, m)


def extract_links(
    md: MarkdownIt,
    tokens: list,
    lines: list[str],
    source_path: str,
    skip_lines: set[int],
    scope_root: str | None = None,
    references: dict | None = None,
    ) -> list[LinkObject]:
    """Return every outgoing link in the document, ordered by (line, column).

    Token-based extraction runs first; line regexes then add wiki links,
    citations, caret references and links markdown-it rejects, skipping any
    span already claimed by a link and any line inside a code block.
    references is the markdown-it env's reference map, keyed by normalized label.
    """
    found: dict[tuple[int, int], LinkObject] = {}
    _token_links(md, tokens, lines, source_path, scope_root, references or {}, found)
    for index, line in enumerate(lines):
        if index not in skip_lines:
            _line_links(line, index, lines, source_path, scope_root, found)
    return [found[key] for key in sorted(found)]
