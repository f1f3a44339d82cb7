"""Direct (in-process) Parsoid client for the editor.

DirectParsoidClient calls the local HTML renderer and HTML input transformer
instead of a remote Parsoid/RESTBase service, and shapes their results into
the same response envelope a RESTBase server would return. Callers never
need to know where the transform happened.

Usage:
    from mw_ve.parsoid import DirectParsoidClient

    client = DirectParsoidClient(
        output_stash=stash,
        stats=stats,
        renderer_factory=renderer_factory,
        transformer_factory=transformer_factory,
        performer=performer,
    )
    response = client.get_page_html(revision, "en")
    if isinstance(response, SuccessResponse):
        html = response.body
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Any, Protocol

import httpx

from mw_ve.config import config
from mw_ve.parsoid.errors import Err, attempt
from mw_ve.parsoid.revision import make_fake_revision
from mw_ve.parsoid.types import ErrorResponse, SuccessResponse, TransformRequest

if TYPE_CHECKING:
    from mw_ve.parsoid.helpers import (
        Authority,
        HtmlInputTransformer,
        HtmlInputTransformerFactory,
        HtmlOutputRenderer,
        HtmlOutputRendererFactory,
    )
    from mw_ve.parsoid.revision import PageIdentity, RevisionRecord
    from mw_ve.parsoid.types import ResponseEnvelope

logger = logging.getLogger(__name__)

# Requested Parsoid HTML version. Keep in sync with the Accept: header the
# editor client sends.
PARSOID_VERSION = config.parsoid_version

FLAVOR_DEFAULT = "view"
FLAVOR_FRAGMENT = "fragment"


class ParsoidClient(Protocol):
    """Anything that can exchange page content with Parsoid."""

    def get_page_html(
        self, revision: RevisionRecord, target_language: str | None = None
    ) -> ResponseEnvelope: ...

    def transform_wikitext(
        self,
        page: PageIdentity,
        target_language: str | None,
        wikitext: str,
        body_only: bool,
        oldid: int | None,
        stash: bool,
    ) -> ResponseEnvelope: ...

    def transform_html(
        self,
        page: PageIdentity,
        target_language: str | None,
        html: str,
        oldid: int | None,
        etag: str | None,
    ) -> ResponseEnvelope: ...


class DirectParsoidClient:
    """ParsoidClient backed by in-process rendering helpers."""

    def __init__(
        self,
        output_stash: Any,
        stats: Any,
        renderer_factory: HtmlOutputRendererFactory,
        transformer_factory: HtmlInputTransformerFactory,
        performer: Authority,
    ) -> None:
        """Initialize the client.

        Args:
            output_stash: Stash store for rendered output, passed to helpers
            stats: Metrics sink, passed to helpers
            renderer_factory: Creates HTML output renderers
            transformer_factory: Creates HTML input transformers
            performer: Authority the requests are made on behalf of
        """
        self._output_stash = output_stash
        self._stats = stats
        self._renderer_factory = renderer_factory
        self._transformer_factory = transformer_factory
        self._performer = performer

    # =========================================================================
    # HELPERS
    # =========================================================================

    def _get_html_output_renderer(self, request: TransformRequest) -> HtmlOutputRenderer:
        return self._renderer_factory.configure(
            request.page,
            request.renderer_params(),
            self._performer.get_user(),
            request.revision,
            request.target_language,
            stash=self._output_stash,
            stats=self._stats,
        )

    def _get_html_input_transformer(self, request: TransformRequest) -> HtmlInputTransformer:
        return self._transformer_factory.configure(
            request.page,
            request.transformer_body(),
            {},
            None,
            request.target_language,
            stash=self._output_stash,
            stats=self._stats,
        )

    def _render(self, request: TransformRequest) -> ResponseEnvelope:
        """Render a revision and wrap the HTML in a response envelope."""

        def render() -> SuccessResponse:
            renderer = self._get_html_output_renderer(request)
            parser_output = renderer.get_html()
            return self._fake_restbase_html_response(parser_output.get_raw_text(), renderer)

        result = attempt(render)
        if isinstance(result, Err):
            return self._fake_restbase_error(result)
        return result.value

    # =========================================================================
    # PUBLIC API
    # =========================================================================

    def get_page_html(
        self, revision: RevisionRecord, target_language: str | None = None
    ) -> ResponseEnvelope:
        """Request page HTML from Parsoid.

        The editor may request the same render again when saving, so the
        result is always stashed.

        Args:
            revision: Page revision
            target_language: Page language

        Returns:
            SuccessResponse with the HTML, or ErrorResponse
        """
        request = TransformRequest(
            page=revision.get_page(),
            revision=revision,
            target_language=target_language,
            stash=True,
            flavor=FLAVOR_DEFAULT,
        )
        logger.debug(f"Rendering revision {revision.get_id()} of {request.page.db_key}")
        return self._render(request)

    def transform_wikitext(
        self,
        page: PageIdentity,
        target_language: str | None,
        wikitext: str,
        body_only: bool,
        oldid: int | None = None,
        stash: bool = False,
    ) -> ResponseEnvelope:
        """Transform wikitext to HTML.

        Args:
            page: Page providing the parsing context
            target_language: Page language
            wikitext: The wikitext fragment to parse
            body_only: Whether to return only the contents of <body>
            oldid: Revision the wikitext is based on
            stash: Whether to stash the result in the server-side cache

        Returns:
            SuccessResponse with the HTML, or ErrorResponse
        """
        revision = make_fake_revision(page, wikitext, parent_id=oldid)
        request = TransformRequest(
            page=page,
            payload=wikitext,
            revision=revision,
            base_revision_id=oldid,
            target_language=target_language,
            stash=stash,
            flavor=FLAVOR_FRAGMENT if body_only else FLAVOR_DEFAULT,
        )
        logger.debug(
            f"Transforming {len(wikitext)} chars of wikitext on {page.db_key} "
            f"(flavor={request.flavor}, stash={stash})"
        )
        return self._render(request)

    def transform_html(
        self,
        page: PageIdentity,
        target_language: str | None,
        html: str,
        oldid: int | None = None,
        etag: str | None = None,
    ) -> ResponseEnvelope:
        """Transform HTML to wikitext.

        Args:
            page: The page the content belongs to
            target_language: The desired output language
            html: The HTML of the page to be transformed
            oldid: Revision the HTML is based on
            etag: ETag of the original render

        Returns:
            SuccessResponse with the serialized content, or ErrorResponse
        """
        request = TransformRequest(
            page=page,
            payload=html,
            base_revision_id=oldid,
            target_language=target_language,
            etag=etag,
        )
        logger.debug(f"Transforming {len(html)} chars of HTML on {page.db_key}")

        def transform() -> SuccessResponse:
            content = self._get_html_input_transformer(request).get_content()
            content_format = content.get_default_format()
            return SuccessResponse(
                code=httpx.codes.OK,
                headers={"Content-Type": content_format},
                body=content.serialize(content_format),
            )

        result = attempt(transform)
        if isinstance(result, Err):
            return self._fake_restbase_error(result)
        return result.value

    # =========================================================================
    # RESPONSE SHAPING
    # =========================================================================

    @staticmethod
    def _fake_restbase_html_response(data: str, renderer: HtmlOutputRenderer) -> SuccessResponse:
        return SuccessResponse(
            code=httpx.codes.OK,
            headers={
                "content-language": renderer.get_content_language(),
                "etag": renderer.get_etag(),
            },
            body=data,
        )

    @staticmethod
    def _fake_restbase_error(err: Err) -> ErrorResponse:
        return ErrorResponse.from_err(err)
