"""Query facade over one parser result"""

from mdcite.core.models import BlockAnchor, HeaderAnchor, HeadingObject, LinkObject, ParserOutput
from mdcite.core.utils.similarity import rank_similar


SIMILARITY_THRESHOLD = 0.3
MAX_SUGGESTIONS = 5

_UNSET = object()


class ParsedDocument:
    """Stable query surface over a ParserOutput.

    Downstream code asks questions (does this anchor exist? what is close to
    it?) instead of walking tokens or anchor lists. Instances are immutable
    apart from the memoized fuzzy-candidate list.
    """

    def __init__(
        self,
        parser_output: ParserOutput,
        similarity_threshold: float = SIMILARITY_THRESHOLD,
        max_suggestions: int = MAX_SUGGESTIONS,
        ):
        self._data = parser_output
        self._similarity_threshold = similarity_threshold
        self._max_suggestions = max_suggestions
        self._anchor_ids = _UNSET

    @property
    def file_path(self) -> str:
        return self._data.file_path

    @property
    def anchors(self) -> tuple[HeaderAnchor | BlockAnchor, ...]:
        return self._data.anchors

    @property
    def headings(self) -> tuple[HeadingObject, ...]:
        return self._data.headings

    def has_anchor(self, anchor_id: str) -> bool:
        """True if anchor_id equals an anchor's id, or a header anchor's url_encoded_id."""
        for anchor in self._data.anchors:
            if anchor.id == anchor_id:
                return True
            if anchor.anchor_type == 'header' and anchor.url_encoded_id == anchor_id:
                return True
        return False

    def get_anchor_ids(self) -> list[str]:
        """Unique anchor ids, both forms for header anchors, in document order."""
        if self._anchor_ids is _UNSET:
            ids: dict[str, None] = {}
            for anchor in self._data.anchors:
                ids[anchor.id] = None
                if anchor.anchor_type == 'header':
                    ids[anchor.url_encoded_id] = None
            self._anchor_ids = list(ids)
        return self._anchor_ids

    def find_similar_anchors(self, anchor_id: str) -> list[str]:
        """Anchor ids similar to anchor_id, best first, at most max_suggestions."""
        ranked = rank_similar(anchor_id, self.get_anchor_ids(), self._similarity_threshold, self._max_suggestions)
        return [candidate for candidate, _ in ranked]

    def get_links(self) -> tuple[LinkObject, ...]:
        return self._data.links

    def extract_full_content(self) -> str:
        return self._data.content

    def extract_section(self, heading_text: str, heading_level: int | None = None) -> str:
        raise NotImplementedError(
            f"Section extraction is not supported (heading {heading_text!r}); use extract_full_content()"
        )

    def extract_block(self, anchor_id: str) -> str:
        raise NotImplementedError(
            f"Block extraction is not supported (block {anchor_id!r}); use extract_full_content()"
        )
