"""Shared pytest fixtures for mw-ve tests."""

from pathlib import Path
from unittest.mock import MagicMock

import pytest

from mw_ve.parsoid import DirectParsoidClient, PageIdentity, RevisionRecord, WikitextContent

FIXTURES_DIR = Path(__file__).parent / "fixtures"
WIKITEXT_DIR = FIXTURES_DIR / "wikitext"


@pytest.fixture
def fixtures_dir() -> Path:
    """Return path to fixtures directory."""
    return FIXTURES_DIR


@pytest.fixture
def wikitext_dir() -> Path:
    """Return path to wikitext fixtures."""
    return WIKITEXT_DIR


@pytest.fixture
def load_fixture() -> callable:
    """Factory fixture to load wikitext fixture files.

    Usage:
        def test_something(load_fixture):
            content = load_fixture("paris_commune.txt")
    """

    def _load(name: str) -> str:
        path = WIKITEXT_DIR / name
        return path.read_text(encoding="utf-8")

    return _load


# =============================================================================
# PARSOID COLLABORATORS
# =============================================================================


@pytest.fixture
def page() -> PageIdentity:
    """An existing article."""
    return PageIdentity(page_id=42, namespace=0, db_key="Paris_Commune")


@pytest.fixture
def revision(page: PageIdentity) -> RevisionRecord:
    """A stored revision of the article."""
    return RevisionRecord(
        page=page,
        rev_id=1234,
        page_id=page.page_id,
        slots={"main": WikitextContent("The '''Paris Commune''' was a government.")},
    )


@pytest.fixture
def renderer() -> MagicMock:
    """Mock HTML output renderer returning a small page."""
    renderer = MagicMock()
    renderer.get_html.return_value.get_raw_text.return_value = "<p>The Paris Commune</p>"
    renderer.get_content_language.return_value = "en"
    renderer.get_etag.return_value = '"1234/0f1e2d3c"'
    return renderer


@pytest.fixture
def renderer_factory(renderer: MagicMock) -> MagicMock:
    """Mock factory handing out the mock renderer."""
    factory = MagicMock()
    factory.configure.return_value = renderer
    return factory


@pytest.fixture
def transformer() -> MagicMock:
    """Mock HTML input transformer producing wikitext content."""
    transformer = MagicMock()
    transformer.get_content.return_value = WikitextContent("The '''Paris Commune'''")
    return transformer


@pytest.fixture
def transformer_factory(transformer: MagicMock) -> MagicMock:
    """Mock factory handing out the mock transformer."""
    factory = MagicMock()
    factory.configure.return_value = transformer
    return factory


@pytest.fixture
def performer() -> MagicMock:
    """Mock authority performing the requests."""
    performer = MagicMock()
    performer.get_user.return_value.get_name.return_value = "Example"
    return performer


@pytest.fixture
def client(
    renderer_factory: MagicMock, transformer_factory: MagicMock, performer: MagicMock
) -> DirectParsoidClient:
    """DirectParsoidClient wired to mock collaborators."""
    return DirectParsoidClient(
        output_stash=MagicMock(name="stash"),
        stats=MagicMock(name="stats"),
        renderer_factory=renderer_factory,
        transformer_factory=transformer_factory,
        performer=performer,
    )
