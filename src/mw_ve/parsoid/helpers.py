"""Interfaces of the rendering collaborators used by DirectParsoidClient.

The client does not render or transform anything itself. It asks a factory
for a freshly configured helper on every call and only shapes the helper's
results into response envelopes. Stash store and stats sink are opaque to
the client and handed straight to the factories.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any, Protocol

if TYPE_CHECKING:
    from mw_ve.parsoid.revision import PageIdentity, RevisionRecord


class UserIdentity(Protocol):
    """The user a request is performed as."""

    def get_name(self) -> str: ...


class Authority(Protocol):
    """Performer of a request."""

    def get_user(self) -> UserIdentity: ...


class ParserOutput(Protocol):
    """Rendered output of a page."""

    def get_raw_text(self) -> str: ...


class Content(Protocol):
    """Page content produced by an HTML input transform."""

    def get_default_format(self) -> str: ...

    def serialize(self, format: str | None = None) -> str | bytes: ...


class HtmlOutputRenderer(Protocol):
    """Renders a revision to HTML. Raises HttpError on failure."""

    def get_html(self) -> ParserOutput: ...

    def get_content_language(self) -> str: ...

    def get_etag(self) -> str: ...

    def set_flavor(self, flavor: str) -> None:
        """Switch the rendering flavor after configuration.

        DirectParsoidClient never calls this: it passes the flavor in the
        ``params`` given to ``HtmlOutputRendererFactory.configure``.
        """
        ...


class HtmlOutputRendererFactory(Protocol):
    """Creates a configured HtmlOutputRenderer per request."""

    def configure(
        self,
        page: PageIdentity,
        params: dict[str, Any],
        user: UserIdentity,
        revision: RevisionRecord | None = None,
        language: str | None = None,
        *,
        stash: Any,
        stats: Any,
    ) -> HtmlOutputRenderer: ...


class HtmlInputTransformer(Protocol):
    """Transforms HTML back to page content. Raises HttpError on failure."""

    def get_content(self) -> Content: ...


class HtmlInputTransformerFactory(Protocol):
    """Creates a configured HtmlInputTransformer per request."""

    def configure(
        self,
        page: PageIdentity,
        body: dict[str, Any],
        options: dict[str, Any],
        revision: RevisionRecord | None = None,
        language: str | None = None,
        *,
        stash: Any,
        stats: Any,
    ) -> HtmlInputTransformer: ...
