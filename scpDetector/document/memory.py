"""In-memory document for headless use and tests."""

from __future__ import annotations

from typing import Iterable, Iterator, List, Mapping, Optional, Sequence, Union

from .base import ChangeNotifier, LinkCandidate, TextCandidate


class StaticNode:
    """Stand-in for a DOM element."""

    def __init__(self, text: str = "", href: Optional[str] = None, *, excluded: bool = False) -> None:
        self.text = text
        self.href = href
        self.excluded = excluded

    def __repr__(self) -> str:  # pragma: no cover - debugging aid
        return f"StaticNode(text={self.text!r}, href={self.href!r}, excluded={self.excluded})"


NodeLike = Union[StaticNode, str, Sequence[str]]


def _as_link(node: NodeLike) -> StaticNode:
    if isinstance(node, StaticNode):
        return node
    href, text = node
    return StaticNode(text=text, href=href)


def _as_block(node: NodeLike) -> StaticNode:
    if isinstance(node, StaticNode):
        return node
    return StaticNode(text=str(node))


class StaticDocument(ChangeNotifier):
    """Document assembled from explicit link and text-block lists.

    Selectors are ignored: every block is a text candidate and every link is
    a link candidate; ``StaticNode.excluded`` marks opted-out nodes.
    ``selections`` maps a selector to the texts :meth:`query_text` returns.
    """

    def __init__(
        self,
        location: str = "",
        title: str = "",
        *,
        links: Iterable[NodeLike] = (),
        blocks: Iterable[NodeLike] = (),
        selections: Mapping[str, Sequence[str]] | None = None,
        observable: bool = True,
    ) -> None:
        super().__init__(observable=observable)
        self._location = location
        self._title = title
        self.links: List[StaticNode] = [_as_link(node) for node in links]
        self.blocks: List[StaticNode] = [_as_block(node) for node in blocks]
        self.selections = {key: list(value) for key, value in (selections or {}).items()}
        self.blocks_read = 0

    @property
    def location(self) -> str:
        return self._location

    @property
    def base_url(self) -> str:
        return self._location

    @property
    def title(self) -> str:
        return self._title

    def enumerate_links(self, exclude_selectors: str) -> Iterator[LinkCandidate]:
        for node in list(self.links):
            yield LinkCandidate(href=node.href, text=node.text, element=node, excluded=node.excluded)

    def enumerate_text_candidates(
        self, include_selectors: str, exclude_selectors: str
    ) -> Iterator[TextCandidate]:
        for node in list(self.blocks):
            self.blocks_read += 1
            yield TextCandidate(text=node.text, element=node, excluded=node.excluded)

    def query_text(self, selector: str) -> List[str]:
        return list(self.selections.get(selector, []))

    def mutate(
        self,
        *,
        location: Optional[str] = None,
        title: Optional[str] = None,
        links: Optional[Iterable[NodeLike]] = None,
        blocks: Optional[Iterable[NodeLike]] = None,
        notify: bool = True,
    ) -> None:
        """Replace parts of the document and signal a change."""

        if location is not None:
            self._location = location
        if title is not None:
            self._title = title
        if links is not None:
            self.links = [_as_link(node) for node in links]
        if blocks is not None:
            self.blocks = [_as_block(node) for node in blocks]
        if notify:
            self.notify_changed()


__all__ = ["StaticDocument", "StaticNode"]
