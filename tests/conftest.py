"""Root test configuration: isolate tests from user config and environment"""

import os

import pytest


@pytest.fixture(autouse=True)
def clean_env(monkeypatch):
    """Drop MDCITE_* environment variables so settings start from defaults."""
    for name in list(os.environ):
        if name.startswith("MDCITE_"):
            monkeypatch.delenv(name, raising=False)


@pytest.fixture(name="write_md")
def write_md_fixture(tmp_path):
    """Return a helper that writes a markdown file under tmp_path and returns its path."""
    def _write(rel: str, text: str):
        p = tmp_path / rel
        p.parent.mkdir(parents=True, exist_ok=True)
        p.write_text(text, encoding="utf-8")
        return p
    return _write
