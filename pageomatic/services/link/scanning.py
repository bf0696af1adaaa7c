"""Reference scanning over Markdown token streams."""

import posixpath
from typing import Iterable, Iterator, Optional, Union
from urllib.parse import unquote, urlsplit

from bs4 import BeautifulSoup
from markdown_it import MarkdownIt
from markdown_it.token import Token

from pageomatic.models.reference import DiagramKind, DiagramReference, LinkReference

Reference = Union[DiagramReference, LinkReference]

DEFAULT_DIAGRAM_LANGUAGES = ("mermaid",)
DEFAULT_DIAGRAM_EXTENSIONS = (".mmd", ".mermaid")

_md = MarkdownIt("commonmark")

# Raw HTML elements whose attribute points at a local file
_HTML_TARGETS = {"img": "src", "source": "src", "a": "href"}


def split_target(href: str) -> Optional[str]:
    """
    Reduce a link target to a local path.

    Returns None for external URLs, protocol-relative URLs, mailto links and
    pure fragment links, which are never resolved against local files.
    """
    href = href.strip()
    if not href or href.startswith("#") or href.startswith("//"):
        return None
    parts = urlsplit(href)
    if parts.scheme or parts.netloc:
        return None
    path = unquote(parts.path)
    return path or None


class ReferenceScanner:
    """Finds diagram embeds and relative links in a Markdown body."""

    def __init__(
        self,
        diagram_languages: Iterable[str] = DEFAULT_DIAGRAM_LANGUAGES,
        diagram_extensions: Iterable[str] = DEFAULT_DIAGRAM_EXTENSIONS,
    ):
        self.diagram_languages = {lang.lower() for lang in diagram_languages}
        self.diagram_extensions = tuple(ext.lower() for ext in diagram_extensions)

    def scan(self, body: str) -> Iterator[Reference]:
        """
        Yield every diagram and local link reference in document order.

        Args:
            body: Markdown body text

        Yields:
            DiagramReference or LinkReference records
        """
        for token in _md.parse(body):
            line = token.map[0] + 1 if token.map else None
            if token.type == "fence":
                language = token.info.strip().split(" ")[0].lower() if token.info else ""
                if language in self.diagram_languages:
                    yield DiagramReference(
                        kind=DiagramKind.INLINE,
                        source=token.content,
                        line=line,
                        language=language,
                    )
            elif token.type == "html_block":
                yield from self._scan_html(token.content, line)
            elif token.type == "inline" and token.children:
                yield from self._scan_inline(token.children, line)

    def _scan_inline(self, children: list[Token], line: Optional[int]) -> Iterator[Reference]:
        for child in children:
            if child.type == "image":
                href = child.attrGet("src")
                is_image = True
            elif child.type == "link_open":
                href = child.attrGet("href")
                is_image = False
            elif child.type == "html_inline":
                yield from self._scan_html(child.content, line)
                continue
            else:
                continue

            reference = self._reference(str(href or ""), line, is_image)
            if reference is not None:
                yield reference

    def _scan_html(self, html: str, line: Optional[int]) -> Iterator[Reference]:
        soup = BeautifulSoup(html, "html.parser")
        for element in soup.find_all(list(_HTML_TARGETS)):
            href = element.get(_HTML_TARGETS[element.name])
            if not isinstance(href, str):
                continue
            reference = self._reference(href, line, is_image=element.name != "a")
            if reference is not None:
                yield reference

    def _reference(self, href: str, line: Optional[int], is_image: bool) -> Optional[Reference]:
        path = split_target(href)
        if path is None:
            return None
        if posixpath.splitext(path)[1].lower() in self.diagram_extensions:
            return DiagramReference(kind=DiagramKind.FILE_REF, source=path, line=line)
        return LinkReference(target=path, line=line, is_image=is_image)


def scan_references(body: str) -> Iterator[Reference]:
    """Scan a body with the default diagram languages and extensions."""
    return ReferenceScanner().scan(body)
