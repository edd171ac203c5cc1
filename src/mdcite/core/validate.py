"""Citation validation: target files, anchors, and correction hints"""

import asyncio
import logging
import os
import re
from dataclasses import dataclass, field
from pathlib import Path
from urllib.parse import unquote

from mdcite.core.cache import ParsedFileCache
from mdcite.core.document import ParsedDocument
from mdcite.core.file_index import FileIndex, FileMatch
from mdcite.core.models import CitationResult, LinkObject, PathConversion, ValidationResult, ValidationSummary
from mdcite.core.utils.paths import normalize_path, relative_link_path, resolve_link_path, to_posix
from mdcite.core.utils.similarity import similarity


logger = logging.getLogger(__name__)

CARET_ANCHOR_RE = re.compile(r'^\^[A-Za-z0-9_-]+$')
EMPHASIS_ANCHOR_RE = re.compile(r'^==\*\*([^*]+)\*\*==$')

_MARKDOWN_CLEANUP = (
    (re.compile(r'`'), ''),
    (re.compile(r'\*\*'), ''),
    (re.compile(r'\*'), ''),
    (re.compile(r'==([^=]+)=='), r'\1'),
    (re.compile(r'\[([^\]]+)\]\([^)]+\)'), r'\1'),
)

MAX_LISTED_ANCHORS = 5
MAX_LISTED_SUGGESTIONS = 3


def classify_pattern(link: LinkObject) -> str:
    """Surface syntax of a link: 'caret', 'emphasis', 'wiki' or 'plain'.

    Only affects how an error is phrased, never whether the link passes.
    """
    anchor = link.target.anchor or ''
    if link.link_type == 'caret':
        return 'caret'
    if anchor.startswith('==') or anchor.endswith('=='):
        return 'emphasis'
    if link.link_type == 'wiki':
        return 'wiki'
    return 'plain'


def clean_markdown(text: str) -> str:
    """Strip inline markdown (code ticks, emphasis, highlights, links) for loose comparison."""
    for pattern, repl in _MARKDOWN_CLEANUP:
        text = pattern.sub(repl, text)
    return text.strip()


def _syntax_error(link: LinkObject, pattern: str) -> tuple[str, str] | None:
    """(error, suggestion) for a malformed caret or emphasis anchor."""
    anchor = link.target.anchor or ''
    if pattern == 'caret' and not CARET_ANCHOR_RE.match(anchor):
        return f"Invalid caret pattern: {anchor}", "Use format: ^block-id, ^FR1"
    if pattern == 'emphasis' and not EMPHASIS_ANCHOR_RE.match(anchor):
        if '==' in anchor and '**' in anchor:
            return ("Malformed emphasis anchor - incorrect marker placement",
                    f"Use format: ==**ComponentName**== (found: {anchor})")
        return ("Malformed emphasis anchor - missing ** markers",
                f"Use format: ==**ComponentName**== (found: {anchor})")
    return None


def _path_conversion(link: LinkObject, source_path: str, target_path: str) -> PathConversion:
    original = link.target.path.raw or ''
    anchor = f"#{link.target.anchor}" if link.target.anchor else ''
    return PathConversion(
        original=f"{original}{anchor}",
        recommended=f"{relative_link_path(target_path, source_path)}{anchor}",
    )


@dataclass
class _AnchorCheck:
    found:       bool
    suggestions: list[str] = field(default_factory=list)
    message:     str | None = None


@dataclass
class _TargetLookup:
    path:  str | None
    match: FileMatch | None = None
    tried: list[str] = field(default_factory=list)


class CitationValidator:
    """Validates every link of a source file against the files and anchors it names.

    Targets are parsed through the shared ParsedFileCache, so a target linked
    from many places is parsed once. Per-link problems are returned as
    CitationResult data; only a missing source file raises.
    """

    def __init__(self, cache: ParsedFileCache, file_index: FileIndex | None = None):
        self.cache = cache
        self.file_index = file_index

    async def validate_file(self, path: str | Path) -> ValidationResult:
        source = normalize_path(path)
        if not os.path.isfile(source):
            raise FileNotFoundError(f"File not found: {source}")

        doc = await self.cache.resolve_parsed_file(source)
        results = await asyncio.gather(
            *(self.validate_single_citation(link, source) for link in doc.get_links())
        )
        summary = ValidationSummary(
            total=len(results),
            valid=sum(r.status == 'valid' for r in results),
            errors=sum(r.status == 'error' for r in results),
            warnings=sum(r.status == 'warning' for r in results),
        )
        logger.info("%s: %d links, %d errors, %d warnings",
                    source, summary.total, summary.errors, summary.warnings)
        return ValidationResult(file=source, summary=summary, results=list(results))

    async def validate_single_citation(self, link: LinkObject, source_path: str | None = None) -> CitationResult:
        source = source_path or link.source.path
        pattern = classify_pattern(link)

        syntax = _syntax_error(link, pattern)
        if syntax:
            return CitationResult(link=link, status='error', error=syntax[0], suggestion=syntax[1])

        if link.scope == 'internal':
            return await self._validate_anchor(link, source, cross_dir=False)

        raw = link.target.path.raw or ''
        if link.target.path.absolute is None:
            return CitationResult(
                link=link, status='error',
                error=f"Path resolution failed: {raw}",
                suggestion="Link path is malformed or points outside the scope directory",
            )

        lookup = self._find_target(raw, source)
        if lookup.path is None:
            return self._file_not_found(link, lookup)

        standard = resolve_link_path(raw, source)
        cross_dir = os.path.dirname(lookup.path) != os.path.dirname(standard)
        result = await self._validate_anchor(link, lookup.path, cross_dir)
        if result.status == 'error' or not (cross_dir or (lookup.match and lookup.match.fuzzy)):
            return result

        update = {'status': 'warning', 'path_conversion': _path_conversion(link, source, lookup.path)}
        if result.status == 'valid':
            fuzzy = lookup.match is not None and lookup.match.fuzzy
            update['suggestion'] = lookup.match.message if fuzzy else \
                f"Found via file cache in different directory: {lookup.path}"
        return result.model_copy(update=update)

    def _find_target(self, raw: str, source: str) -> _TargetLookup:
        """Locate the target file: decoded path, raw path, scope-absolute, real source dir, filename index."""
        candidates = [resolve_link_path(raw, source), resolve_link_path(raw, source, decode=False)]
        if self.file_index and self.file_index.scope_dir and to_posix(raw).startswith('/'):
            candidates.append(normalize_path(os.path.join(self.file_index.scope_dir, unquote(raw).lstrip('/\\'))))
        real_source = os.path.realpath(source)
        if real_source != source:
            candidates.append(resolve_link_path(raw, real_source))

        tried = list(dict.fromkeys(candidates))
        for candidate in tried:
            if os.path.isfile(candidate):
                return _TargetLookup(candidate, tried=tried)

        if self.file_index is not None:
            match = self.file_index.resolve(os.path.basename(to_posix(unquote(raw))))
            if match.found:
                return _TargetLookup(match.path, match, tried)
            return _TargetLookup(None, match, tried)
        return _TargetLookup(None, tried=tried)

    @staticmethod
    def _file_not_found(link: LinkObject, lookup: _TargetLookup) -> CitationResult:
        raw = link.target.path.raw or ''
        debug = f"Tried: {', '.join(lookup.tried)}"
        if lookup.match is not None and lookup.match.message:
            suggestion = f"{lookup.match.message} {debug}"
        else:
            suggestion = f"Check if file exists or fix path. {debug}"
        return CitationResult(link=link, status='error', error=f"File not found: {raw}", suggestion=suggestion)

    async def _validate_anchor(self, link: LinkObject, target: str, cross_dir: bool) -> CitationResult:
        anchor = link.target.anchor
        if not anchor:
            return CitationResult(link=link, status='valid')

        check = await self.check_anchor(anchor, target)
        if check.found:
            return CitationResult(link=link, status='valid')

        error = f"Anchor not found: #{anchor}"
        if cross_dir:
            error = f"Found via file cache in different directory: {target}. {error}"
        return CitationResult(
            link=link,
            status='warning' if cross_dir else 'error',
            error=error,
            suggestion=check.message,
            suggestions=check.suggestions,
        )

    async def check_anchor(self, anchor: str, target: str) -> _AnchorCheck:
        """Look up anchor in target, accepting decoded, block-alias and markdown-loose forms."""
        try:
            doc = await self.cache.resolve_parsed_file(target)
        except OSError as e:
            logger.debug("target unreadable: %s", e)
            return _AnchorCheck(False, message=f"Error reading target file: {e}")

        if any(doc.has_anchor(form) for form in _anchor_forms(anchor)):
            return _AnchorCheck(True)
        if _flexible_match(anchor, doc):
            return _AnchorCheck(True)

        suggestions = doc.find_similar_anchors(anchor)
        return _AnchorCheck(False, suggestions, _suggestion_message(anchor, suggestions, doc))


def _anchor_forms(anchor: str) -> list[str]:
    forms = [anchor, unquote(anchor)]
    if anchor.startswith('^'):
        forms.append(anchor[1:])
    emphasis = EMPHASIS_ANCHOR_RE.match(unquote(anchor))
    if emphasis:
        forms.append(emphasis.group(1))
    return forms


def _flexible_match(anchor: str, doc: ParsedDocument) -> bool:
    search = unquote(anchor)
    cleaned_search = clean_markdown(search)
    for a in doc.anchors:
        raw = a.raw_text or a.id
        if raw == search:
            return True
        if search.startswith('`') and search.endswith('`') and search[1:-1] in (raw, a.id):
            return True
        if clean_markdown(raw) == cleaned_search:
            return True
    return False


def _suggestion_message(anchor: str, suggestions: list[str], doc: ParsedDocument) -> str:
    """Suggestions, then header anchors closest to anchor first, then block refs."""
    parts = []
    if suggestions:
        parts.append(f"Available anchors: {', '.join(suggestions[:MAX_LISTED_SUGGESTIONS])}")
    by_closeness = sorted(
        (a for a in doc.anchors if a.anchor_type == 'header'),
        key=lambda a: similarity(anchor, a.raw_text), reverse=True,
    )
    headers = [f'"{a.raw_text}" → #{a.id}' for a in by_closeness]
    if headers:
        parts.append(f"Available headers: {', '.join(headers[:MAX_LISTED_ANCHORS])}")
    blocks = [f"^{a.id}" for a in doc.anchors if a.anchor_type == 'block']
    if blocks:
        parts.append(f"Available block refs: {', '.join(blocks[:MAX_LISTED_ANCHORS])}")
    return '; '.join(parts) if parts else "No similar anchors found"
