"""Aggregate deduplicated content from a source file's eligible outgoing links"""

import logging

from mdcite.core.cache import ParsedFileCache
from mdcite.core.eligibility import EligibilityChain
from mdcite.core.models import (
    ContentBlock, ExtractedContent, ExtractionFlags, ExtractionStats, LinkObject, ProcessedLink,
    SourceLinkEntry,
)
from mdcite.core.utils.hashing import content_id
from mdcite.core.validate import CitationValidator


logger = logging.getLogger(__name__)


async def _link_content(cache: ParsedFileCache, link: LinkObject) -> str:
    doc = await cache.resolve_parsed_file(link.target.path.absolute)
    if link.anchor_type == 'header':
        return doc.extract_section(link.target.anchor)
    if link.anchor_type == 'block':
        return doc.extract_block(link.target.anchor.lstrip('^'))
    return doc.extract_full_content()


async def extract_links_content(
    source_path: str,
    flags: ExtractionFlags,
    cache: ParsedFileCache,
    validator: CitationValidator,
    chain: EligibilityChain | None = None,
    ) -> ExtractedContent:
    """Validate source_path, then collect content of each eligible cross-document link.

    Content is stored once per content id; every processed link records which
    block it resolved to, or why it was skipped or failed.
    """
    chain = chain or EligibilityChain()
    validation = await validator.validate_file(source_path)

    blocks: dict[str, ContentBlock] = {}
    processed: list[ProcessedLink] = []
    stats = ExtractionStats()

    for result in validation.results:
        link = result.link
        if link.scope == 'internal':
            continue
        stats.total_links += 1

        if result.status == 'error':
            processed.append(ProcessedLink(
                link=link, status='skipped', reason=f"Link failed validation: {result.error}"))
            continue

        decision = chain.decide(link, flags)
        if not decision.eligible:
            processed.append(ProcessedLink(
                link=link, status='skipped', reason=f"Link not eligible: {decision.reason}"))
            continue

        try:
            content = await _link_content(cache, link)
        except (NotImplementedError, OSError) as e:
            logger.debug("extraction failed for %s: %s", link.full_match, e)
            processed.append(ProcessedLink(link=link, status='failed', reason=f"Extraction failed: {e}"))
            continue

        cid = content_id(content)
        if cid in blocks:
            stats.duplicate_content_detected += 1
            stats.characters_saved += len(content)
        else:
            blocks[cid] = ContentBlock(content=content, content_length=len(content))
            stats.unique_content += 1
        blocks[cid].source_links.append(SourceLinkEntry(full_match=link.full_match, line=link.line))
        processed.append(ProcessedLink(link=link, status='extracted', content_id=cid, reason=decision.reason))

    stored = sum(block.content_length for block in blocks.values())
    if stored + stats.characters_saved:
        stats.compression_ratio = stats.characters_saved / (stored + stats.characters_saved)

    return ExtractedContent(
        source_file=validation.file,
        content_blocks=blocks,
        processed_links=processed,
        stats=stats,
    )
