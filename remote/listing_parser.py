"""Turns a directory-listing page into anchors with their surrounding text."""

from dataclasses import dataclass
from typing import List, Optional, Tuple

from bs4 import BeautifulSoup, ParserRejectedMarkup
from bs4.element import Tag

from common.exceptions import ParseFailureError

MAX_SIBLINGS = 5


@dataclass(frozen=True)
class AnchorContext:
    """
    One anchor element and the text that follows it in its container.

    Attributes:
        href: Raw href attribute, or None if absent
        text: Link text, stripped
        sibling_texts: Texts of up to MAX_SIBLINGS nodes following the anchor
        text_after: First non-blank line of text following the anchor
    """
    href: Optional[str]
    text: str
    sibling_texts: Tuple[str, ...] = ()
    text_after: str = ""


def _is_anchor(node) -> bool:
    return isinstance(node, Tag) and (node.name == "a" or node.find("a") is not None)


def _node_text(node) -> str:
    if isinstance(node, Tag):
        return node.get_text()
    return str(node)


def _first_line(text: str) -> str:
    for line in text.splitlines():
        if line.strip():
            return line
    return ""


def _context_for(link: Tag) -> AnchorContext:
    following = []
    for sibling in link.next_siblings:
        # The next entry of the listing starts here.
        if _is_anchor(sibling):
            break
        following.append(_node_text(sibling))

    href = link.get("href")
    if isinstance(href, list):
        href = " ".join(href)

    return AnchorContext(
        href=href,
        text=link.get_text().strip(),
        sibling_texts=tuple(following[:MAX_SIBLINGS]),
        text_after=_first_line("".join(following)),
    )


def parse_anchors(html: str) -> List[AnchorContext]:
    """
    Extract every anchor element of an HTML document, in document order.

    Args:
        html: Page body

    Returns:
        AnchorContext per anchor

    Raises:
        ParseFailureError: If the markup is rejected by the parser
    """
    try:
        soup = BeautifulSoup(html, "html.parser")
    except ParserRejectedMarkup as e:
        raise ParseFailureError(f"Unparsable listing page: {e}") from e
    return [_context_for(link) for link in soup.find_all("a")]
