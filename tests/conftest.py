from pathlib import Path

import pytest

from rendera import aws

FIXTURES = Path(__file__).parent / "fixtures"


@pytest.fixture(autouse=True)
def isolated(tmp_path, monkeypatch):
    """Run every test from an empty folder with no helper path configured."""
    monkeypatch.delenv("RENDERA_HELPERS", raising=False)
    monkeypatch.delenv("RENDERA_DEBUG", raising=False)
    monkeypatch.chdir(tmp_path)
    aws.clear_cache()
    yield
    aws.clear_cache()


@pytest.fixture
def fixtures() -> Path:
    return FIXTURES
