"""BeautifulSoup-backed document source."""

from __future__ import annotations

from functools import lru_cache
from pathlib import Path
from typing import Iterator, List, Optional
from urllib.parse import urljoin

import soupsieve
from bs4 import BeautifulSoup, NavigableString, Tag

from .base import ChangeNotifier, LinkCandidate, TextCandidate


@lru_cache(maxsize=64)
def _compile(selector: str) -> soupsieve.SoupSieve:
    return soupsieve.compile(selector)


def _excluded(tag: Tag, exclude_selectors: str) -> bool:
    if not exclude_selectors:
        return False
    return _compile(exclude_selectors).closest(tag) is not None


def _text(tag: Tag, exclude_selectors: str = "") -> str:
    """Visible text of ``tag`` without the text of excluded descendants."""

    if not exclude_selectors:
        return tag.get_text().strip()
    matcher = _compile(exclude_selectors)
    parts: List[str] = []
    for string in tag.find_all(string=True):
        # Comments, script and style bodies are NavigableString subclasses.
        if type(string) is not NavigableString:
            continue
        parent = string.parent
        while parent is not None and parent is not tag and not matcher.match(parent):
            parent = parent.parent
        if parent is tag:
            parts.append(str(string))
    return "".join(parts).strip()


class HtmlDocument(ChangeNotifier):
    """Parsed HTML page plus the URL it was loaded from.

    Hosts that edit :attr:`soup` in place call :meth:`notify_changed`
    afterwards; :meth:`replace_html` and :meth:`navigate` notify on their own.
    """

    def __init__(
        self,
        html: str,
        location: str = "",
        *,
        parser: str = "lxml",
        observable: bool = True,
    ) -> None:
        super().__init__(observable=observable)
        self._parser = parser
        self._location = location
        self.soup = BeautifulSoup(html, parser)

    @classmethod
    def from_path(cls, path: Path, location: str = "", **kwargs) -> "HtmlDocument":
        html = Path(path).read_text(encoding="utf-8")
        return cls(html, location or Path(path).resolve().as_uri(), **kwargs)

    @property
    def location(self) -> str:
        return self._location

    @property
    def base_url(self) -> str:
        base = self.soup.find("base", href=True)
        if base is None:
            return self._location
        return urljoin(self._location, base["href"])

    @property
    def title(self) -> str:
        tag = self.soup.title
        return _text(tag) if tag is not None else ""

    def enumerate_links(self, exclude_selectors: str) -> Iterator[LinkCandidate]:
        for tag in _compile("a[href]").iselect(self.soup):
            yield LinkCandidate(
                href=tag.get("href"),
                text=_text(tag, exclude_selectors),
                element=tag,
                excluded=_excluded(tag, exclude_selectors),
            )

    def enumerate_text_candidates(
        self, include_selectors: str, exclude_selectors: str
    ) -> Iterator[TextCandidate]:
        for tag in _compile(include_selectors).iselect(self.soup):
            yield TextCandidate(
                text=_text(tag, exclude_selectors),
                element=tag,
                excluded=_excluded(tag, exclude_selectors),
            )

    def query_text(self, selector: str) -> List[str]:
        return [_text(tag) for tag in _compile(selector).select(self.soup)]

    def replace_html(self, html: str) -> None:
        self.soup = BeautifulSoup(html, self._parser)
        self.notify_changed()

    def navigate(self, location: str, html: Optional[str] = None) -> None:
        self._location = location
        if html is not None:
            self.soup = BeautifulSoup(html, self._parser)
        self.notify_changed()


__all__ = ["HtmlDocument"]
