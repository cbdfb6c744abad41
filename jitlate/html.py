"""
HTML text extraction and reconstruction.

Walks a parsed document, collects translatable text nodes, and writes
translations back by fingerprint.
"""

from __future__ import annotations

from dataclasses import dataclass

from bs4 import BeautifulSoup
from bs4.element import (
    CData,
    Comment,
    Declaration,
    Doctype,
    NavigableString,
    ProcessingInstruction,
    Tag,
)

from jitlate.core.hashing import content_hash
from jitlate.core.models import TranslatableItem


# Elements whose text is never translated
IGNORED_TAGS = frozenset({"script", "style", "code", "pre", "textarea"})

# Opt-out attribute: <span data-no-translate>Acme</span>
NO_TRANSLATE_ATTR = "data-no-translate"

_NON_TEXT_STRINGS = (Comment, Declaration, Doctype, CData, ProcessingInstruction)


@dataclass
class TextNodeRef:
    """A translatable text node inside a parsed document."""

    stable_id: str
    text: str  # Raw text including surrounding whitespace
    fingerprint: str
    node: NavigableString

    def to_item(self) -> TranslatableItem:
        return TranslatableItem(text=self.text.strip(), fingerprint=self.fingerprint)


class HTMLProcessor:
    """
    Extracts text from HTML and puts translations back.

    Usage:
        processor = HTMLProcessor()
        root = processor.parse(html)
        refs = processor.extract_text_nodes(root)
        ...
        processor.apply_translations(refs, translations)
        html = processor.serialize(root)
    """

    def __init__(self, parser: str = "html.parser"):
        self.parser = parser

    def parse(self, html: str) -> BeautifulSoup:
        return BeautifulSoup(html, self.parser)

    def extract_text_nodes(self, root: Tag) -> list[TextNodeRef]:
        """Collect non-blank text nodes outside ignored and opted-out subtrees."""
        refs: list[TextNodeRef] = []

        def walk(node) -> None:
            if isinstance(node, Tag):
                if node.name and node.name.lower() in IGNORED_TAGS:
                    return
                if node.has_attr(NO_TRANSLATE_ATTR):
                    return
                for child in list(node.children):
                    walk(child)
            elif isinstance(node, NavigableString) and not isinstance(node, _NON_TEXT_STRINGS):
                text = str(node)
                if text.strip():
                    refs.append(TextNodeRef(
                        stable_id=f"t{len(refs)}",
                        text=text,
                        fingerprint=content_hash(text),
                        node=node,
                    ))

        walk(root)
        return refs

    def apply_translations(self, refs: list[TextNodeRef], translations: dict[str, str]) -> int:
        """
        Replace text nodes with their translations, keeping surrounding whitespace.

        Returns:
            Number of nodes replaced
        """
        replaced = 0
        for ref in refs:
            translated = translations.get(ref.fingerprint)
            if not translated:
                continue

            stripped = ref.text.strip()
            start = ref.text.find(stripped)
            leading = ref.text[:start]
            trailing = ref.text[start + len(stripped):]

            new_node = NavigableString(f"{leading}{translated}{trailing}")
            ref.node.replace_with(new_node)
            ref.node = new_node
            replaced += 1

        return replaced

    def set_page_attributes(self, root: Tag, lang: str, direction: str) -> None:
        """Set lang and dir on the <html> element, if the document has one."""
        html = root.find("html")
        if html is not None:
            html["lang"] = lang
            html["dir"] = direction

    def serialize(self, root: Tag) -> str:
        return str(root)
