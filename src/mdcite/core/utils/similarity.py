"""Edit-distance string similarity for anchor suggestions"""


def levenshtein(a: str, b: str) -> int:
    """Return the Levenshtein edit distance between a and b."""
    if len(a) < len(b):
        a, b = b, a
    previous = list(range(len(b) + 1))
    for i, ca in enumerate(a, start=1):
        current = [i]
        for j, cb in enumerate(b, start=1):
            current.append(min(
                previous[j] + 1,                # deletion
                current[j - 1] + 1,             # insertion
                previous[j - 1] + (ca != cb),   # substitution
            ))
        previous = current
    return previous[-1]


def similarity(a: str, b: str) -> float:
    """Case-insensitive similarity in [0, 1]; 1.0 means identical."""
    if a == b:
        return 1.0
    if not a or not b:
        return 0.0
    a, b = a.lower(), b.lower()
    return 1.0 - levenshtein(a, b) / max(len(a), len(b))


def rank_similar(query: str, candidates, threshold: float, limit: int) -> list[tuple[str, float]]:
    """Score candidates against query; keep those >= threshold, best first, at most limit.

    Ties keep candidate order, so callers control precedence by ordering input.
    """
    scored = [(c, similarity(query, c)) for c in candidates]
    kept = [pair for pair in scored if pair[1] >= threshold]
    return sorted(kept, key=lambda pair: pair[1], reverse=True)[:limit]
