"""Unit tests for linear data and wikitext conversion."""

from __future__ import annotations

from typing import TYPE_CHECKING

import pytest

from mw_ve.editcheck import ContentRange, LinearData, from_wikitext

if TYPE_CHECKING:
    from collections.abc import Callable


class TestContentRange:
    @pytest.mark.unit
    def test_length(self) -> None:
        assert ContentRange(10, 70).length == 60

    @pytest.mark.unit
    def test_iterates_half_open(self) -> None:
        assert list(ContentRange(3, 6)) == [3, 4, 5]

    @pytest.mark.unit
    def test_empty(self) -> None:
        assert list(ContentRange(4, 4)) == []


class TestLinearData:
    """Tests for the annotation probe on linear data."""

    @pytest.fixture
    def data(self) -> LinearData:
        return LinearData(
            [
                {"type": "paragraph"},
                "a",
                {"type": "mwReference", "attributes": {"listIndex": 0}},
                {"type": "/mwReference"},
                "b",
                {"type": "/paragraph"},
                {"type": "internalList"},
                {"type": "/internalList"},
            ]
        )

    @pytest.mark.unit
    def test_is_element_data(self, data: LinearData) -> None:
        assert data.is_element_data(0)
        assert not data.is_element_data(1)
        assert data.is_element_data(3)

    @pytest.mark.unit
    def test_out_of_range_is_not_element(self, data: LinearData) -> None:
        assert not data.is_element_data(-1)
        assert not data.is_element_data(100)

    @pytest.mark.unit
    def test_get_type_strips_close_marker(self, data: LinearData) -> None:
        assert data.get_type(2) == "mwReference"
        assert data.get_type(3) == "mwReference"
        assert data.get_type(1) is None

    @pytest.mark.unit
    def test_open_and_close(self, data: LinearData) -> None:
        assert data.is_open_element_data(2)
        assert data.is_close_element_data(3)
        assert not data.is_close_element_data(1)

    @pytest.mark.unit
    def test_document_end_is_internal_list(self, data: LinearData) -> None:
        assert data.internal_list_offset() == 6
        assert data.document_end() == 6

    @pytest.mark.unit
    def test_document_end_without_internal_list(self) -> None:
        data = LinearData("abc")
        assert data.internal_list_offset() is None
        assert data.document_end() == 3

    @pytest.mark.unit
    def test_get_text(self, data: LinearData) -> None:
        assert data.get_text() == "ab"
        assert data.get_text(0, 2) == "a"

    @pytest.mark.unit
    def test_items_returns_copy(self, data: LinearData) -> None:
        items = data.items()
        items.clear()
        assert len(data) == 8


class TestFromWikitext:
    """Tests for converting wikitext to linear data."""

    @pytest.mark.unit
    def test_reference_becomes_marker(self) -> None:
        data = from_wikitext("Hello<ref>Src</ref> world")

        assert data.items() == [
            {"type": "paragraph"},
            *"Hello",
            {"type": "mwReference", "attributes": {"listIndex": 0, "name": None}},
            {"type": "/mwReference"},
            *" world",
            {"type": "/paragraph"},
            {"type": "internalList"},
            {"type": "internalItem"},
            *"Src",
            {"type": "/internalItem"},
            {"type": "/internalList"},
        ]
        assert data.document_end() == 15

    @pytest.mark.unit
    def test_named_reference_reuse(self) -> None:
        data = from_wikitext('A<ref name="x">One</ref> B<ref name="x" /> C<ref>Two</ref>')

        refs = [item for item in data if isinstance(item, dict) and item["type"] == "mwReference"]
        assert [ref["attributes"]["listIndex"] for ref in refs] == [0, 0, 1]
        assert [ref["attributes"]["name"] for ref in refs] == ["x", "x", None]
        assert data.get_text(data.document_end()) == "OneTwo"

    @pytest.mark.unit
    def test_links_and_formatting_keep_display_text(self) -> None:
        data = from_wikitext("See [[Karl Marx|Marx]] and ''[[Capital]]'' at [https://example.org site].")
        assert data.get_text() == "See Marx and Capital at site."

    @pytest.mark.unit
    def test_template_becomes_transclusion(self) -> None:
        data = from_wikitext("Claim.{{Citation needed}}")
        assert data.get_type(7) == "mwTransclusionInline"
        assert data[7]["attributes"] == {"name": "Citation needed"}

    @pytest.mark.unit
    def test_comments_dropped(self) -> None:
        assert from_wikitext("a<!-- hidden -->b").get_text() == "ab"

    @pytest.mark.unit
    def test_headings_and_paragraphs(self) -> None:
        data = from_wikitext("== Title ==\nFirst line\nsame paragraph\n\nSecond")

        blocks = [item for item in data if isinstance(item, dict) and not item["type"].startswith("/")]
        assert blocks[0] == {"type": "heading", "attributes": {"level": 2}}
        assert [b["type"] for b in blocks] == ["heading", "paragraph", "paragraph", "internalList"]
        assert data.get_text() == "TitleFirst line same paragraphSecond"

    @pytest.mark.unit
    def test_empty_wikitext(self) -> None:
        data = from_wikitext("")
        assert data.items() == [{"type": "internalList"}, {"type": "/internalList"}]
        assert data.document_end() == 0

    @pytest.mark.unit
    def test_fixture_article(self, load_fixture: Callable[[str], str]) -> None:
        data = from_wikitext(load_fixture("paris_commune.txt"))

        types = [data.get_type(i) for i in range(len(data)) if data.is_open_element_data(i)]
        assert types.count("mwReference") == 1
        assert "mwTransclusionInline" in types
        assert data.get_text(data.document_end()) == "John Merriman, Massacre, 2014."


class TestTemplates:
    """Templates become a single marker however deeply they nest."""

    @pytest.mark.unit
    def test_nested_template_is_one_marker(self) -> None:
        data = from_wikitext("Paris.{{cite web|title={{lang|fr|Commune}}|url=x}}")

        assert data.get_text() == "Paris."
        assert data[7] == {"type": "mwTransclusionInline", "attributes": {"name": "cite web"}}
        assert data[8] == {"type": "/mwTransclusionInline"}
        assert data.get_type(9) == "paragraph"

    @pytest.mark.unit
    def test_infobox_adds_no_characters(self) -> None:
        data = from_wikitext(
            "{{Infobox event|name={{lang|fr|Commune de Paris}}|date=18 March 1871"
            "|place={{flag|France}}|result={{small|suppressed}}}}"
        )

        types = [data.get_type(i) for i in range(data.document_end()) if data.is_open_element_data(i)]
        assert types == ["paragraph", "mwTransclusionInline"]
        assert data.get_text() == ""

    @pytest.mark.unit
    def test_multiline_template_stays_in_one_block(self) -> None:
        data = from_wikitext("{{Infobox event\n| name = Commune\n\n| date = 1871\n}}\nText after.")

        blocks = [item for item in data if isinstance(item, dict) and item["type"] == "paragraph"]
        assert len(blocks) == 1
        assert data.get_text() == " Text after."

    @pytest.mark.unit
    def test_template_inside_reference_body(self) -> None:
        data = from_wikitext("Claim.<ref>{{cite book|title={{lang|fr|Capital}}}}</ref>")

        internal = data.items()[data.document_end() :]
        assert {"type": "mwTransclusionInline", "attributes": {"name": "cite book"}} in internal
        assert data.get_text(data.document_end()) == ""
