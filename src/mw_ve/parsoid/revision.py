"""Page, revision and content records passed to rendering collaborators.

Only the in-memory shape is modelled here. Loading and saving revisions
belongs to the revision store, which this package never touches: a
synthetic revision built by :func:`make_fake_revision` exists only for the
duration of one transform call.
"""

from __future__ import annotations

from dataclasses import dataclass, field

MAIN_SLOT = "main"

WIKITEXT_MODEL = "wikitext"
WIKITEXT_FORMAT = "text/x-wiki"


@dataclass(frozen=True)
class PageIdentity:
    """Identity of a wiki page.

    Attributes:
        page_id: Page ID (0 for a page that does not exist yet)
        namespace: Namespace number (0 is the main/article namespace)
        db_key: Title in database form, e.g. "Paris_Commune"
    """

    page_id: int
    namespace: int
    db_key: str

    def get_id(self) -> int:
        return self.page_id

    def exists(self) -> bool:
        return self.page_id > 0


@dataclass(frozen=True)
class WikitextContent:
    """Wikitext stored in a revision slot."""

    text: str

    @property
    def model(self) -> str:
        return WIKITEXT_MODEL

    def get_default_format(self) -> str:
        return WIKITEXT_FORMAT

    def serialize(self, format: str | None = None) -> str:
        if format is not None and format != WIKITEXT_FORMAT:
            raise ValueError(f"Unsupported format for wikitext content: {format}")
        return self.text


@dataclass
class RevisionRecord:
    """A page revision with its slot contents.

    Attributes:
        page: Page the revision belongs to
        rev_id: Revision ID (0 for a synthetic, unsaved revision)
        page_id: Page ID recorded on the revision
        parent_id: Revision this one is based on, if any
        slots: Slot role -> content
    """

    page: PageIdentity
    rev_id: int | None = None
    page_id: int | None = None
    parent_id: int | None = None
    slots: dict[str, WikitextContent] = field(default_factory=dict)

    def get_page(self) -> PageIdentity:
        return self.page

    def get_id(self) -> int | None:
        return self.rev_id

    def get_content(self, role: str = MAIN_SLOT) -> WikitextContent | None:
        return self.slots.get(role)

    def set_content(self, role: str, content: WikitextContent) -> None:
        self.slots[role] = content


def make_fake_revision(
    page: PageIdentity,
    wikitext: str,
    parent_id: int | None = None,
) -> RevisionRecord:
    """Build an unsaved revision holding ``wikitext`` in its main slot.

    Args:
        page: Page providing the parsing context
        wikitext: Content for the main slot
        parent_id: Revision the wikitext was edited from

    Returns:
        RevisionRecord with ID 0
    """
    rev = RevisionRecord(page=page, rev_id=0, page_id=page.get_id(), parent_id=parent_id)
    rev.set_content(MAIN_SLOT, WikitextContent(wikitext))
    return rev
