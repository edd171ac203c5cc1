"""Single-flight async cache of parsed documents keyed by normalized path"""

import asyncio
import logging
from functools import partial

from mdcite.core.document import MAX_SUGGESTIONS, SIMILARITY_THRESHOLD, ParsedDocument
from mdcite.core.utils.paths import normalize_path


logger = logging.getLogger(__name__)


class ParsedFileCache:
    """Maps a normalized path to one shared parse task producing a ParsedDocument.

    The task is stored before anything is awaited, so concurrent callers for the
    same path attach to a single parse. A failed task is evicted so the next
    call retries; every caller of the failed attempt sees the same exception.

    Parses of different paths run concurrently in worker threads through one
    parser, so parser.parse_file must not keep per-call state on the instance
    (MarkdownParser keeps its state in locals and the markdown-it env).
    """

    def __init__(
        self,
        parser,
        similarity_threshold: float = SIMILARITY_THRESHOLD,
        max_suggestions: int = MAX_SUGGESTIONS,
        ):
        self._parser = parser
        self._similarity_threshold = similarity_threshold
        self._max_suggestions = max_suggestions
        self._tasks: dict[str, asyncio.Task] = {}

    def __contains__(self, path) -> bool:
        return normalize_path(path) in self._tasks

    def __len__(self) -> int:
        return len(self._tasks)

    async def resolve_parsed_file(self, path) -> ParsedDocument:
        key = normalize_path(path)
        task = self._tasks.get(key)
        if task is None:
            logger.debug("cache miss: %s", key)
            task = asyncio.ensure_future(self._parse(key))
            self._tasks[key] = task
            task.add_done_callback(partial(self._evict_failed, key))
        else:
            logger.debug("cache hit: %s", key)
        # shield: a cancelled caller must not cancel the parse other callers share
        return await asyncio.shield(task)

    async def _parse(self, key: str) -> ParsedDocument:
        output = await asyncio.to_thread(self._parser.parse_file, key)
        return ParsedDocument(output, self._similarity_threshold, self._max_suggestions)

    def _evict_failed(self, key: str, task: asyncio.Task) -> None:
        if task.cancelled() or task.exception() is not None:
            if self._tasks.get(key) is task:
                del self._tasks[key]
            logger.debug("evicted failed parse: %s", key)

    def invalidate(self, path) -> bool:
        """Drop the entry for path; returns True if one existed."""
        return self._tasks.pop(normalize_path(path), None) is not None

    def clear(self) -> None:
        self._tasks.clear()
