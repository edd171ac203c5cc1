"""Filename index over a scope directory, for links written by bare name"""

import difflib
import logging
import os
from pathlib import Path

from pydantic import BaseModel

from mdcite.core.utils.paths import normalize_path


logger = logging.getLogger(__name__)

CLOSE_MATCH_CUTOFF = 0.8


class FileMatch(BaseModel):
    """Result of a filename lookup."""
    found:   bool
    path:    str | None = None
    reason:  str | None = None      # 'duplicate' | 'duplicate_fuzzy' | 'not_found'
    message: str | None = None
    fuzzy:   bool = False


def _duplicate_message(filename: str) -> str:
    return f'Multiple files named "{filename}" found in scope. Use relative path for disambiguation.'


class FileIndex:
    """Maps markdown file basenames under a scope directory to their paths.

    Names seen more than once are ambiguous and never resolve.
    """

    def __init__(self):
        self._files: dict[str, str] = {}
        self._duplicates: set[str] = set()
        self.scope_dir: str | None = None

    def __len__(self) -> int:
        return len(self._files)

    @property
    def duplicates(self) -> list[str]:
        return sorted(self._duplicates)

    def build(self, scope_dir: str | Path) -> 'FileIndex':
        self._files.clear()
        self._duplicates.clear()
        self.scope_dir = normalize_path(scope_dir)
        real_scope = os.path.realpath(self.scope_dir)

        for root, dirs, names in os.walk(real_scope, onerror=self._walk_error):
            dirs.sort()
            for name in sorted(names):
                if not name.endswith('.md'):
                    continue
                if name in self._files:
                    self._duplicates.add(name)
                else:
                    self._files[name] = os.path.join(root, name)

        if self._duplicates:
            logger.warning("duplicate filenames in scope: %s", ", ".join(self.duplicates))
        logger.debug("indexed %d files under %s", len(self._files), real_scope)
        return self

    @staticmethod
    def _walk_error(err: OSError) -> None:
        logger.warning("could not read directory %s: %s", err.filename, err.strerror)

    def _lookup(self, name: str) -> FileMatch | None:
        if name not in self._files:
            return None
        if name in self._duplicates:
            return FileMatch(found=False, reason='duplicate', message=_duplicate_message(name))
        return FileMatch(found=True, path=self._files[name])

    def _corrected(self, filename: str, corrected: str, note: str) -> FileMatch:
        if corrected in self._duplicates:
            return FileMatch(
                found=False, reason='duplicate_fuzzy',
                message=f'Found potential match "{corrected}" ({note}), but multiple files '
                        f'with this name exist. Use relative path for disambiguation.',
            )
        return FileMatch(
            found=True, path=self._files[corrected], fuzzy=True,
            message=f'Auto-corrected {note}: "{filename}" → "{corrected}"',
        )

    def resolve(self, filename: str) -> FileMatch:
        """Resolve a bare filename: exact, with/without '.md', then fuzzy corrections."""
        filename = os.path.basename(filename)
        stem = filename[:-3] if filename.endswith('.md') else filename
        for name in (filename, f"{stem}.md"):
            match = self._lookup(name)
            if match:
                return match

        if filename.endswith('.md.md') and filename[:-3] in self._files:
            return self._corrected(filename, filename[:-3], 'double extension')

        close = difflib.get_close_matches(f"{stem}.md", list(self._files), n=1, cutoff=CLOSE_MATCH_CUTOFF)
        if close:
            return self._corrected(filename, close[0], 'close filename')

        return FileMatch(found=False, reason='not_found', message=f'File "{filename}" not found in scope folder.')
