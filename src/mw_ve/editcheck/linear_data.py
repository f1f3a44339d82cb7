"""Linear content buffer of an editor document.

The document is a flat list of items. Each item is either a single
character (``str``) or an element marker (``dict`` with a ``"type"`` key).
Elements open with ``{"type": "paragraph", ...}`` and close with
``{"type": "/paragraph"}``. Reference bodies live in a trailing
``internalList`` region after the user-visible content.

Wikitext can be converted to this shape with :func:`from_wikitext`.
Uses mwparserfromhell for reliable MediaWiki template and tag parsing.
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from typing import TYPE_CHECKING, Any, Final

import mwparserfromhell
from mwparserfromhell.nodes import (
    ExternalLink,
    Heading,
    HTMLEntity,
    Tag,
    Template,
    Text,
    Wikilink,
)

from mw_ve.config import config

if TYPE_CHECKING:
    from collections.abc import Iterable, Iterator

    from mwparserfromhell.wikicode import Wikicode

Item = str | dict[str, Any]
"""A character or an element marker."""

REFERENCE_TYPE: Final[str] = config.reference_type
INTERNAL_LIST_TYPE: Final[str] = "internalList"
INTERNAL_ITEM_TYPE: Final[str] = "internalItem"
TRANSCLUSION_TYPE: Final[str] = "mwTransclusionInline"

# Pattern to match section headers (== Header == or === Subheader ===)
SECTION_HEADER_PATTERN: Final[re.Pattern[str]] = re.compile(
    r"^(={1,6})\s*([^=]+?)\s*\1\s*$",
)


@dataclass(frozen=True)
class ContentRange:
    """Half-open range [start, end) of offsets into a linear buffer."""

    start: int
    end: int

    @property
    def length(self) -> int:
        return self.end - self.start

    def __iter__(self) -> Iterator[int]:
        return iter(range(self.start, self.end))


class LinearData:
    """Flat list of characters and element markers."""

    def __init__(self, data: Iterable[Item] = ()) -> None:
        self._data: list[Item] = list(data)

    def __len__(self) -> int:
        return len(self._data)

    def __getitem__(self, offset: int) -> Item:
        return self._data[offset]

    def __iter__(self) -> Iterator[Item]:
        return iter(self._data)

    def __eq__(self, other: object) -> bool:
        if isinstance(other, LinearData):
            return self._data == other._data
        if isinstance(other, list):
            return self._data == other
        return NotImplemented

    def __repr__(self) -> str:
        return f"LinearData({len(self._data)} items)"

    def items(self) -> list[Item]:
        """Return a copy of the underlying item list."""
        return list(self._data)

    def is_element_data(self, offset: int) -> bool:
        """Whether the item at ``offset`` is an element marker.

        Offsets outside the buffer are not element data.
        """
        if not 0 <= offset < len(self._data):
            return False
        item = self._data[offset]
        return isinstance(item, dict) and "type" in item

    def is_open_element_data(self, offset: int) -> bool:
        return self.is_element_data(offset) and not self._data[offset]["type"].startswith("/")

    def is_close_element_data(self, offset: int) -> bool:
        return self.is_element_data(offset) and self._data[offset]["type"].startswith("/")

    def get_type(self, offset: int) -> str | None:
        """Element type at ``offset``; close markers report the closed type."""
        if not self.is_element_data(offset):
            return None
        return self._data[offset]["type"].lstrip("/")

    def get_text(self, start: int = 0, end: int | None = None) -> str:
        """Concatenate the characters in [start, end), skipping elements."""
        return "".join(item for item in self._data[start:end] if isinstance(item, str))

    def internal_list_offset(self) -> int | None:
        """Offset of the internalList open marker, if the buffer has one."""
        for offset, item in enumerate(self._data):
            if isinstance(item, dict) and item.get("type") == INTERNAL_LIST_TYPE:
                return offset
        return None

    def document_end(self) -> int:
        """End of user-visible content: the start of the internal list."""
        offset = self.internal_list_offset()
        return len(self._data) if offset is None else offset


# =============================================================================
# WIKITEXT CONVERSION
# =============================================================================


def _element(type_: str, **attributes: Any) -> list[Item]:
    open_item: dict[str, Any] = {"type": type_}
    if attributes:
        open_item["attributes"] = attributes
    return [open_item, {"type": f"/{type_}"}]


def _ref_name(tag: Tag) -> str | None:
    if not tag.has("name"):
        return None
    name = str(tag.get("name").value).strip()
    return name or None


class _WikitextConverter:
    """Converts wikitext blocks to linear items, collecting reference bodies."""

    def __init__(self) -> None:
        self.references: list[str] = []
        self._named: dict[str, int] = {}

    def _reference(self, tag: Tag) -> list[Item]:
        name = _ref_name(tag)
        body = "" if tag.self_closing or tag.contents is None else str(tag.contents).strip()

        if name is not None and name in self._named:
            index = self._named[name]
            if body and not self.references[index]:
                self.references[index] = body
        else:
            index = len(self.references)
            self.references.append(body)
            if name is not None:
                self._named[name] = index

        return _element(REFERENCE_TYPE, listIndex=index, name=name)

    def inline(self, wikicode: Wikicode) -> list[Item]:
        items: list[Item] = []
        for node in wikicode.nodes:
            if isinstance(node, Text):
                items.extend(str(node))
            elif isinstance(node, Template):
                # Nested templates stay inside the outer node
                items.extend(_element(TRANSCLUSION_TYPE, name=str(node.name).strip()))
            elif isinstance(node, Tag):
                tag_name = str(node.tag).strip().lower()
                if tag_name == "ref":
                    items.extend(self._reference(node))
                elif tag_name != "references" and not node.self_closing and node.contents is not None:
                    items.extend(self.inline(node.contents))
            elif isinstance(node, Wikilink):
                items.extend(self.inline(node.text if node.text is not None else node.title))
            elif isinstance(node, ExternalLink):
                if node.title is not None:
                    items.extend(self.inline(mwparserfromhell.parse(str(node.title).strip())))
                else:
                    items.extend(str(node.url))
            elif isinstance(node, HTMLEntity):
                items.extend(node.normalize())
            elif isinstance(node, Heading):
                items.extend(self.inline(node.title))
            # Comments, arguments: no content
        return items

    def block(self, type_: str, text: str, **attributes: Any) -> list[Item]:
        open_item, close_item = _element(type_, **attributes)
        return [open_item, *self.inline(mwparserfromhell.parse(text)), close_item]

    def internal_list(self) -> list[Item]:
        items: list[Item] = [{"type": INTERNAL_LIST_TYPE}]
        for body in self.references:
            open_item, close_item = _element(INTERNAL_ITEM_TYPE)
            items.extend([open_item, *self.inline(mwparserfromhell.parse(body)), close_item])
        items.append({"type": f"/{INTERNAL_LIST_TYPE}"})
        return items


def _split_blocks(text: str) -> list[tuple[str, str, int]]:
    """Split wikitext into (block type, text, heading level) tuples.

    Lines inside an unclosed ``{{...}}`` stay in the current paragraph, so a
    template spanning several lines is parsed as one node.
    """
    blocks: list[tuple[str, str, int]] = []
    paragraph: list[str] = []
    depth = 0

    def flush() -> None:
        if paragraph:
            blocks.append(("paragraph", " ".join(paragraph), 0))
            paragraph.clear()

    for line in text.splitlines():
        stripped = line.strip()
        if depth > 0:
            if stripped:
                paragraph.append(stripped)
            depth = max(depth + stripped.count("{{") - stripped.count("}}"), 0)
            continue
        if not stripped:
            flush()
            continue
        heading = SECTION_HEADER_PATTERN.match(stripped)
        if heading:
            flush()
            blocks.append(("heading", heading.group(2), len(heading.group(1))))
            continue
        paragraph.append(stripped)
        depth = max(stripped.count("{{") - stripped.count("}}"), 0)
    flush()
    return blocks


def from_wikitext(text: str) -> LinearData:
    """Convert wikitext to linear data.

    Paragraphs (separated by blank lines) and headings become block
    elements. ``<ref>`` tags become ``mwReference`` markers whose bodies are
    stored in the trailing internal list; a reused named reference points
    at the existing list item. Templates become inline transclusion
    markers; links contribute their display text.

    Args:
        text: Wikitext source

    Returns:
        LinearData ending with an internal list.
    """
    converter = _WikitextConverter()
    items: list[Item] = []
    for type_, block_text, level in _split_blocks(text):
        if type_ == "heading":
            items.extend(converter.block("heading", block_text, level=level))
        else:
            items.extend(converter.block("paragraph", block_text))
    items.extend(converter.internal_list())
    return LinearData(items)
