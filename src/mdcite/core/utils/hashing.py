"""SHA-256 content hashing for extracted-content deduplication"""

import hashlib


def sha256(content: str) -> str:
    """Return hex-encoded SHA-256 hash of content (64 chars)."""
    return hashlib.sha256(content.encode("utf-8")).hexdigest()


def content_id(content: str) -> str:
    """Return the 16-char content id used to key extracted content blocks."""
    return sha256(content)[:16]
