"""Data contracts for the parse, validate, and extract pipeline"""

from dataclasses import dataclass
from typing import Annotated, Literal, Optional, Union

from pydantic import BaseModel, ConfigDict, Field


LinkType = Literal["markdown", "wiki", "cite", "caret"]
LinkScope = Literal["internal", "cross-document"]
AnchorType = Literal["header", "block"]
ValidationStatus = Literal["valid", "error", "warning"]


class _Frozen(BaseModel):
    model_config = ConfigDict(frozen=True)


# --- parser output ---

class HeadingObject(_Frozen):
    """One markdown heading, whether or not anything links to it."""
    level: int = Field(..., ge=1, le=6)
    text:  str                      # inline heading text as written
    raw:   str                      # full source of the heading block


class HeaderAnchor(_Frozen):
    """Heading-derived anchor with two equivalent ids (raw text and slug)."""
    anchor_type:    Literal["header"] = "header"
    id:             str
    url_encoded_id: str
    raw_text:       str
    full_match:     str
    line:           int = Field(..., ge=1)
    column:         int = Field(..., ge=1)


class BlockAnchor(_Frozen):
    """Inline block marker (^id or ==**Text**==); a single id, no raw text."""
    anchor_type: Literal["block"] = "block"
    id:          str
    raw_text:    None = None
    full_match:  str
    line:        int = Field(..., ge=1)
    column:      int = Field(..., ge=1)


Anchor = Annotated[Union[HeaderAnchor, BlockAnchor], Field(discriminator="anchor_type")]


class ExtractionMarker(_Frozen):
    full_match: str                 # marker with delimiters, e.g. '%%force-extract%%'
    inner_text: str                 # trimmed directive text


class LinkSource(_Frozen):
    path: str                       # absolute path of the file containing the link


class TargetPath(_Frozen):
    raw:      Optional[str] = None  # path as written; None for internal links
    absolute: Optional[str] = None  # None when the reference could not be resolved
    relative: Optional[str] = None


class LinkTarget(_Frozen):
    path:   TargetPath
    anchor: Optional[str] = None


class LinkObject(_Frozen):
    """A single outgoing reference found in a markdown source file."""
    link_type:         LinkType
    scope:             LinkScope
    anchor_type:       Optional[AnchorType] = None     # None = whole-file link
    source:            LinkSource
    target:            LinkTarget
    text:              Optional[str] = None
    full_match:        str
    line:              int
    column:            int
    extraction_marker: Optional[ExtractionMarker] = None


@dataclass(frozen=True)
class ParserOutput:
    """Structural contract for one parsed file; a pure function of its content."""
    file_path: str
    content:   str
    tokens:    list                 # markdown-it Token objects
    links:     tuple[LinkObject, ...]
    headings:  tuple[HeadingObject, ...]
    anchors:   tuple[Union[HeaderAnchor, BlockAnchor], ...]


# --- validation output ---

class PathConversion(BaseModel):
    """Recommended relative path for a target found outside the expected directory."""
    type:        Literal["path-conversion"] = "path-conversion"
    original:    str
    recommended: str


class CitationResult(BaseModel):
    """Outcome for one link: valid, error, or warning."""
    link:            LinkObject
    status:          ValidationStatus
    error:           Optional[str] = None
    suggestion:      Optional[str] = None       # human-readable correction hint
    suggestions:     list[str] = []             # fuzzy-matched anchor ids, best first
    path_conversion: Optional[PathConversion] = None


class ValidationSummary(BaseModel):
    total:    int = 0
    valid:    int = 0
    errors:   int = 0
    warnings: int = 0


class ValidationResult(BaseModel):
    """Per-file validation report; the file never fails as a unit."""
    file:    str
    summary: ValidationSummary
    results: list[CitationResult]

    @property
    def has_errors(self) -> bool:
        return self.summary.errors > 0


# --- extraction ---

class ExtractionFlags(BaseModel):
    """Caller-supplied extraction switches."""
    full_files: bool = False


class EligibilityDecision(_Frozen):
    eligible: bool
    reason:   str


class SourceLinkEntry(BaseModel):
    full_match: str
    line:       int


class ContentBlock(BaseModel):
    """Extracted content, stored once per distinct content id."""
    content:        str
    content_length: int
    source_links:   list[SourceLinkEntry] = []


class ProcessedLink(BaseModel):
    """Per-link extraction outcome; every cross-document link gets one entry."""
    link:       LinkObject
    status:     Literal["extracted", "skipped", "failed"]
    content_id: Optional[str] = None
    reason:     Optional[str] = None


class ExtractionStats(BaseModel):
    total_links:                int = 0
    unique_content:             int = 0
    duplicate_content_detected: int = 0
    characters_saved:           int = 0
    compression_ratio:          float = 0.0


class ExtractedContent(BaseModel):
    """Deduplicated content aggregated from a source file's outgoing links."""
    source_file:     str
    content_blocks:  dict[str, ContentBlock] = {}
    processed_links: list[ProcessedLink] = []
    stats:           ExtractionStats = Field(default_factory=ExtractionStats)
