"""Shared fixtures for core unit tests"""

import pytest

from mdcite.core.cache import ParsedFileCache
from mdcite.core.parse import MarkdownParser
from mdcite.core.validate import CitationValidator


TARGET_MD = """\
# Introduction

Intro paragraph.

## Getting Started

Install it first. ^setup-step

## **Bold** Title

==**Component**== handles requests.

```markdown
# Not A Heading
```
"""


class CountingParser(MarkdownParser):
    """MarkdownParser that records how often each path is parsed."""

    def __init__(self, *args, fail_times: int = 0, **kwargs):
        super().__init__(*args, **kwargs)
        self.calls: dict[str, int] = {}
        self.fail_times = fail_times

    def parse_file(self, path):
        key = str(path)
        self.calls[key] = self.calls.get(key, 0) + 1
        if self.fail_times:
            self.fail_times -= 1
            raise OSError(f"transient failure reading {key}")
        return super().parse_file(path)


@pytest.fixture(name="md_parser")
def md_parser_fixture():
    return MarkdownParser()


@pytest.fixture(name="source_path")
def source_path_fixture(tmp_path):
    return str(tmp_path / "source.md")


@pytest.fixture(name="parse")
def parse_fixture(md_parser, source_path):
    """Parse text as if it were the content of source.md in tmp_path."""
    def _parse(text: str):
        return md_parser.parse_text(text, source_path)
    return _parse


@pytest.fixture(name="target_file")
def target_file_fixture(write_md):
    return write_md("target.md", TARGET_MD)


@pytest.fixture(name="validator")
def validator_fixture(md_parser):
    return CitationValidator(ParsedFileCache(md_parser))


@pytest.fixture(name="counting_parser")
def counting_parser_fixture():
    """The CountingParser class, for tests that build their own instances."""
    return CountingParser
