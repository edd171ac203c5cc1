"""File discovery, reading, and markdown-it tokenization into the parser contract"""

import re
from pathlib import Path

from markdown_it import MarkdownIt

from mdcite.core.errors import ReadError
from mdcite.core.extract.anchors import extract_anchors
from mdcite.core.extract.headings import extract_headings
from mdcite.core.extract.links import extract_links
from mdcite.core.models import ParserOutput
from mdcite.core.utils.paths import normalize_path
from mdcite.core.utils.tokens import code_lines


FRONTMATTER_RE = re.compile(r'^---[ \t]*\n(.*?)\n---[ \t]*(?:\n|$)', re.DOTALL)
MD_EXTENSIONS = {'.md', '.mdx'}


def _make_parser(preset: str) -> MarkdownIt:
    """Build a MarkdownIt instance for the given preset name."""
    return MarkdownIt(preset, options_update={"linkify": False})


def _frontmatter_lines(text: str) -> int:
    """Number of lines taken by a leading YAML frontmatter block (0 if none)."""
    m = FRONTMATTER_RE.match(text)
    return m.group(0).rstrip('\n').count('\n') + 1 if m else 0


def discover_files(path: Path) -> list[Path]:
    """Return sorted .md/.mdx files under path, or [path] if a single file."""
    if path.is_file():
        return [path] if path.suffix in MD_EXTENSIONS else []
    return sorted(p for p in path.rglob('*') if p.suffix in MD_EXTENSIONS)


def read_markdown(path: str | Path) -> str:
    """Read a markdown file as UTF-8; FileNotFoundError if absent, ReadError otherwise."""
    p = Path(path)
    if not p.is_file():
        raise FileNotFoundError(f"File not found: {p}")
    try:
        return p.read_text(encoding='utf-8')
    except FileNotFoundError:
        raise
    except (OSError, UnicodeDecodeError) as e:
        raise ReadError(str(p), e) from e


class MarkdownParser:
    """Turns one markdown file into a ParserOutput (headings, anchors, links).

    Parsing is lenient: malformed markdown yields fewer links or anchors, never
    an error. When scope_root is set, link targets outside it stay unresolved.
    """

    def __init__(self, parser_config: str = 'gfm-like', scope_root: str | Path | None = None):
        self.md = _make_parser(parser_config)
        self.scope_root = normalize_path(scope_root) if scope_root else None

    def parse_file(self, path: str | Path) -> ParserOutput:
        file_path = normalize_path(path)
        return self.parse_text(read_markdown(file_path), file_path)

    def parse_text(self, content: str, file_path: str) -> ParserOutput:
        text = content.replace('\r\n', '\n')
        lines = text.split('\n')

        # Frontmatter is blanked rather than cut so token line maps match the file.
        fm_lines = _frontmatter_lines(text)
        body = '\n' * fm_lines + '\n'.join(lines[fm_lines:]) if fm_lines else text
        env: dict = {}
        tokens = self.md.parse(body, env)
        skip = code_lines(tokens) | set(range(fm_lines))

        headings = extract_headings(tokens, lines)
        return ParserOutput(
            file_path=file_path,
            content=content,
            tokens=tokens,
            links=tuple(extract_links(
                self.md, tokens, lines, file_path, skip, self.scope_root, env.get('references'),
            )),
            headings=tuple(headings),
            anchors=tuple(extract_anchors(tokens, lines, skip)),
        )
