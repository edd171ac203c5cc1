"""Unit tests for core/validate.py"""

import pytest

from mdcite.core.cache import ParsedFileCache
from mdcite.core.file_index import FileIndex
from mdcite.core.parse import MarkdownParser
from mdcite.core.validate import CitationValidator, classify_pattern, clean_markdown


async def _validate_one(validator, write_md, text):
    """Write source.md with text and return the result for its only link."""
    source = write_md("source.md", text)
    result = await validator.validate_file(source)
    assert result.summary.total == 1
    return result.results[0]


def test_clean_markdown():
    """Code ticks, emphasis, highlights, and inline links are stripped."""
    assert clean_markdown("**Bold** `code` ==hi== [t](u.md)") == "Bold code hi t"


def test_classify_pattern(parse):
    """Surface syntax is caret, emphasis, wiki, or plain."""
    links = parse("See ^FR1 here. [[w]] [e](t.md#==**X**==) [p](t.md#Y)\n").links
    assert [classify_pattern(l) for l in links] == ["caret", "wiki", "emphasis", "plain"]


@pytest.mark.asyncio
async def test_valid_anchor(validator, write_md, target_file):
    """A link to an existing heading is valid."""
    r = await _validate_one(validator, write_md, "[i](target.md#Introduction)\n")
    assert r.status == "valid"
    assert r.error is None


@pytest.mark.asyncio
async def test_valid_slug_anchor(validator, write_md, target_file):
    """The slug form of a heading is accepted."""
    r = await _validate_one(validator, write_md, "[i](target.md#getting-started)\n")
    assert r.status == "valid"


@pytest.mark.asyncio
async def test_typo_anchor_suggests(validator, write_md, target_file):
    """A misspelled anchor is an error whose top suggestion is the real heading."""
    r = await _validate_one(validator, write_md, "[i](target.md#Intruduction)\n")
    assert r.status == "error"
    assert r.error == "Anchor not found: #Intruduction"
    assert r.suggestions[0] == "Introduction"
    assert r.suggestion.startswith("Available anchors: Introduction")
    assert '"Getting Started" → #Getting Started' in r.suggestion
    assert "Available block refs: ^setup-step, ^Component" in r.suggestion


@pytest.mark.asyncio
async def test_percent_encoded_anchor(validator, write_md, target_file):
    """A percent-encoded anchor matches its decoded heading text."""
    r = await _validate_one(validator, write_md, "[i](target.md#Getting%20Started)\n")
    assert r.status == "valid"


@pytest.mark.asyncio
async def test_block_reference_alias(validator, write_md, target_file):
    """#^id links resolve against block anchors."""
    r = await _validate_one(validator, write_md, "[s](target.md#^setup-step)\n")
    assert r.status == "valid"


@pytest.mark.asyncio
async def test_emphasis_anchor(validator, write_md, target_file):
    """An ==**Text**== fragment resolves to the matching emphasis block."""
    r = await _validate_one(validator, write_md, "[c](target.md#==**Component**==)\n")
    assert r.status == "valid"


@pytest.mark.asyncio
async def test_malformed_emphasis_anchor(validator, write_md, target_file):
    """A half-written emphasis anchor reports the expected form."""
    r = await _validate_one(validator, write_md, "[c](target.md#==**Component==)\n")
    assert r.status == "error"
    assert r.error == "Malformed emphasis anchor - incorrect marker placement"
    assert "==**ComponentName**==" in r.suggestion


@pytest.mark.asyncio
async def test_markdown_insensitive_anchor(validator, write_md, target_file):
    """Headings with inline markup match their plain-text spelling."""
    r = await _validate_one(validator, write_md, "[b](target.md#Bold%20Title)\n")
    assert r.status == "valid"


@pytest.mark.asyncio
async def test_whole_file_link_valid(validator, write_md, target_file):
    """A link without an anchor is valid once the file exists."""
    r = await _validate_one(validator, write_md, "[t](target.md)\n")
    assert r.status == "valid"


@pytest.mark.asyncio
async def test_missing_target_file(validator, write_md):
    """A link to a missing file is an error naming the path as written."""
    r = await _validate_one(validator, write_md, "[m](missing.md#Intro)\n")
    assert r.status == "error"
    assert r.error == "File not found: missing.md"
    assert r.suggestion.startswith("Check if file exists or fix path.")


@pytest.mark.asyncio
async def test_internal_links(validator, write_md):
    """Internal and caret references are checked against the source file itself."""
    source = write_md("source.md", "# Setup\n\nStep one ^FR1\n\n[a](#Setup) [b](#Nope) and ^FR1 again.\n")
    result = await validator.validate_file(source)
    assert [r.status for r in result.results] == ["valid", "error", "valid"]
    assert result.summary.errors == 1


@pytest.mark.asyncio
async def test_unreadable_target(validator, write_md, tmp_path):
    """An undecodable target becomes a per-link error, not an exception."""
    (tmp_path / "bad.md").write_bytes(b"\xff\xfe\xfa")
    r = await _validate_one(validator, write_md, "[x](bad.md#Intro)\n")
    assert r.status == "error"
    assert r.suggestion.startswith("Error reading target file:")


@pytest.mark.asyncio
async def test_path_resolution_failure(write_md, tmp_path):
    """Targets outside the scope root are path-resolution errors."""
    parser = MarkdownParser(scope_root=tmp_path / "docs")
    validator = CitationValidator(ParsedFileCache(parser))
    source = write_md("docs/source.md", "[x](../outside.md)\n")
    write_md("outside.md", "# Outside\n")
    result = await validator.validate_file(source)
    assert result.results[0].status == "error"
    assert result.results[0].error == "Path resolution failed: ../outside.md"


@pytest.mark.asyncio
async def test_missing_source_raises(validator, tmp_path):
    """validate_file fails fast when the source file does not exist."""
    with pytest.raises(FileNotFoundError):
        await validator.validate_file(tmp_path / "nope.md")


@pytest.mark.asyncio
async def test_summary_counts(validator, write_md, target_file):
    """Summary tallies every link by status."""
    source = write_md("source.md", "[a](target.md#Introduction)\n[b](target.md#Nope)\n[c](gone.md)\n")
    result = await validator.validate_file(source)
    assert (result.summary.total, result.summary.valid, result.summary.errors) == (3, 1, 2)
    assert result.has_errors


# --- scope file index ---

@pytest.fixture(name="indexed_validator")
def indexed_validator_fixture(md_parser, tmp_path):
    def _build():
        return CitationValidator(ParsedFileCache(md_parser), FileIndex().build(tmp_path))
    return _build


@pytest.mark.asyncio
async def test_cross_directory_warning(indexed_validator, write_md):
    """A bare filename found elsewhere in scope is a warning with a path conversion."""
    write_md("other/target.md", "# Introduction\n")
    source = write_md("docs/source.md", "[t](target.md#Introduction)\n")
    result = await indexed_validator().validate_file(source)
    r = result.results[0]
    assert r.status == "warning"
    assert r.suggestion.startswith("Found via file cache in different directory:")
    assert r.path_conversion.original == "target.md#Introduction"
    assert r.path_conversion.recommended == "../other/target.md#Introduction"
    assert result.summary.warnings == 1


@pytest.mark.asyncio
async def test_cross_directory_missing_anchor_is_warning(indexed_validator, write_md):
    """A cross-directory hit with a missing anchor stays a warning naming both problems."""
    write_md("other/target.md", "# Introduction\n")
    source = write_md("docs/source.md", "[t](target.md#Nope)\n")
    r = (await indexed_validator().validate_file(source)).results[0]
    assert r.status == "warning"
    assert "Anchor not found: #Nope" in r.error
    assert r.path_conversion is not None


@pytest.mark.asyncio
async def test_fuzzy_filename_warning(indexed_validator, write_md):
    """A double .md.md extension is corrected through the index as a warning."""
    write_md("docs/target.md", "# Introduction\n")
    source = write_md("docs/source.md", "[t](target.md.md)\n")
    r = (await indexed_validator().validate_file(source)).results[0]
    assert r.status == "warning"
    assert "double extension" in r.suggestion
    assert r.path_conversion.recommended == "target.md"


@pytest.mark.asyncio
async def test_duplicate_filename_error(indexed_validator, write_md):
    """An ambiguous bare filename is an error explaining the duplicates."""
    write_md("a/target.md", "# A\n")
    write_md("b/target.md", "# B\n")
    source = write_md("docs/source.md", "[t](target.md)\n")
    r = (await indexed_validator().validate_file(source)).results[0]
    assert r.status == "error"
    assert 'Multiple files named "target.md"' in r.suggestion


@pytest.mark.asyncio
async def test_available_headers_closest_first(validator, write_md):
    """The header list in a suggestion is ordered by closeness to the broken anchor."""
    names = ["Alpha", "Bravo", "Charlie", "Delta", "Echo", "Foxtrot", "Installation Guide"]
    write_md("manual.md", "".join(f"# {n}\n\ntext\n\n" for n in names))
    r = await _validate_one(validator, write_md, "[g](manual.md#Installation Gide)\n")
    assert r.status == "error"
    headers = r.suggestion.split("Available headers: ", 1)[1]
    assert headers.startswith('"Installation Guide" → #Installation Guide')
