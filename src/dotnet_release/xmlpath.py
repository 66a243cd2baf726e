# src/dotnet_release/xmlpath.py
# =============================================================================
# Dotted-path access to elements of a single-namespace XML document.
#
#   get_element_text(tree, "package.metadata.version")       -> "1.2.3" | None
#   set_element_text(tree, "package.metadata.version", "1.2.4")
#
# Paths are absolute: the first segment names the root element. Every segment is
# resolved in one namespace (the root's, unless overridden).
# =============================================================================

from __future__ import annotations

import logging
import xml.etree.ElementTree as ET
from dataclasses import dataclass
from typing import Optional, Tuple, Union

from .errors import MissingAncestorError

log = logging.getLogger(__name__)

DEFAULT_SEPARATOR = "."
_PREFIX = "ns"

Document = Union[ET.ElementTree, ET.Element]


@dataclass(frozen=True)
class XmlPath:
    segments: Tuple[str, ...]
    separator: str = DEFAULT_SEPARATOR

    @classmethod
    def parse(cls, text: str, separator: str = DEFAULT_SEPARATOR) -> "XmlPath":
        segments = tuple(text.split(separator))
        if not text or any(not s.strip() for s in segments):
            raise ValueError(f"invalid element path {text!r}")
        return cls(tuple(s.strip() for s in segments), separator)

    @property
    def leaf(self) -> str:
        return self.segments[-1]

    @property
    def parent(self) -> Optional["XmlPath"]:
        if len(self.segments) == 1:
            return None
        return XmlPath(self.segments[:-1], self.separator)

    def joined(self) -> str:
        return self.separator.join(self.segments)

    def __str__(self) -> str:
        return self.joined()


def _root(document: Document) -> ET.Element:
    if isinstance(document, ET.ElementTree):
        return document.getroot()
    return document


def _as_path(path: Union[XmlPath, str]) -> XmlPath:
    return path if isinstance(path, XmlPath) else XmlPath.parse(path)


def namespace_of(element: ET.Element) -> str:
    """Namespace URI of ``element`` ('' when it has none)."""
    tag = element.tag
    if isinstance(tag, str) and tag.startswith("{"):
        return tag[1:].partition("}")[0]
    return ""


def _qualify(name: str, namespace: str) -> str:
    return f"{{{namespace}}}{name}" if namespace else name


def find_element(
    document: Document, path: Union[XmlPath, str], namespace: Optional[str] = None
) -> Optional[ET.Element]:
    """Resolve ``path`` from the document root; None when any segment is missing."""
    root = _root(document)
    xpath = _as_path(path)
    ns = namespace or namespace_of(root)

    if root.tag != _qualify(xpath.segments[0], ns):
        return None
    rest = xpath.segments[1:]
    if not rest:
        return root
    if ns:
        expr = "/".join(f"{_PREFIX}:{s}" for s in rest)
        return root.find(expr, {_PREFIX: ns})
    return root.find("/".join(rest))


def get_element_text(
    document: Document, path: Union[XmlPath, str], namespace: Optional[str] = None
) -> Optional[str]:
    element = find_element(document, path, namespace)
    if element is None:
        return None
    return element.text or ""


def set_element_text(
    document: Document, path: Union[XmlPath, str], text: str, namespace: Optional[str] = None
) -> ET.Element:
    """
    Overwrite the content of the element at ``path`` with ``text``, or create it
    under its parent. Attributes of an existing element are kept.

    Only the leaf is ever created. If the parent chain is missing a
    MissingAncestorError names the parent path.
    """
    xpath = _as_path(path)
    element = find_element(document, xpath, namespace)
    if element is not None:
        # Replacing the text replaces the whole content, child elements included.
        for child in list(element):
            element.remove(child)
        element.text = text
        return element

    parent_path = xpath.parent
    parent = find_element(document, parent_path, namespace) if parent_path else None
    if parent is None:
        # A one-segment path would need a new document root.
        raise MissingAncestorError((parent_path or xpath).joined())

    root = _root(document)
    element = ET.SubElement(parent, _qualify(xpath.leaf, namespace_of(root)))
    element.text = text
    log.debug("created <%s> under %s", xpath.leaf, parent_path)
    return element
