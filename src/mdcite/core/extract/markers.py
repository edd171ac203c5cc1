"""Extraction marker detection next to a link"""

import re

from mdcite.core.models import ExtractionMarker


STOP_MARKER = 'stop-extract-link'
FORCE_MARKER = 'force-extract'

# %%text%% (Obsidian comment) or <!-- text --> (HTML comment)
_MARKER = r'(%%(?P<obsidian>.+?)%%|<!--\s*(?P<html>.+?)\s*-->)'
_INLINE_MARKER_RE = re.compile(r'^\s*' + _MARKER)
_LINE_MARKER_RE = re.compile(r'^\s*' + _MARKER + r'\s*$')


def _to_marker(m: re.Match) -> ExtractionMarker:
    inner = m.group('obsidian') if m.group('obsidian') is not None else m.group('html')
    return ExtractionMarker(full_match=m.group(1), inner_text=inner.strip())


def detect_extraction_marker(lines: list[str], line_index: int, end_column: int) -> ExtractionMarker | None:
    """Return the marker directly after a link ending at (line_index, end_column), if any.

    end_column is a 0-based offset into lines[line_index]. A marker must follow
    the link on the same line (whitespace allowed), or, when nothing else follows
    the link, sit alone on the next line.
    """
    if not 0 <= line_index < len(lines):
        return None
    rest = lines[line_index][end_column:]
    if m := _INLINE_MARKER_RE.match(rest):
        return _to_marker(m)
    if rest.strip() or line_index + 1 >= len(lines):
        return None
    if m := _LINE_MARKER_RE.match(lines[line_index + 1]):
        return _to_marker(m)
    return None
