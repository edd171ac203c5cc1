"""Pipeline step functions: validate and extract orchestration"""

import asyncio
import logging
from pathlib import Path

from mdcite.config import Settings
from mdcite.core.cache import ParsedFileCache
from mdcite.core.eligibility import EligibilityChain
from mdcite.core.extract.content import extract_links_content
from mdcite.core.file_index import FileIndex
from mdcite.core.models import ExtractedContent, ExtractionFlags, ValidationResult
from mdcite.core.parse import MarkdownParser, discover_files
from mdcite.core.validate import CitationValidator


logger = logging.getLogger(__name__)


def build_validator(settings: Settings) -> CitationValidator:
    """Wire parser, cache, and optional scope index into one validator."""
    parser = MarkdownParser(settings.parser_config, scope_root=settings.scope_dir)
    cache = ParsedFileCache(parser, settings.similarity_threshold, settings.max_suggestions)
    file_index = FileIndex().build(settings.scope_dir) if settings.scope_dir else None
    return CitationValidator(cache, file_index)


async def run_validate(path: str, settings: Settings) -> list[ValidationResult]:
    """Validate every markdown file under path concurrently with one shared cache."""
    root = Path(path)
    if not root.exists():
        raise FileNotFoundError(f"File not found: {root}")
    files = discover_files(root)
    validator = build_validator(settings)
    logger.debug("validating %d file(s) under %s", len(files), root)
    return list(await asyncio.gather(*(validator.validate_file(f) for f in files)))


async def run_extract(path: str, settings: Settings) -> ExtractedContent:
    """Extract deduplicated content from the eligible links of one source file."""
    validator = build_validator(settings)
    return await extract_links_content(
        path,
        ExtractionFlags(full_files=settings.full_files),
        validator.cache,
        validator,
        EligibilityChain(),
    )
