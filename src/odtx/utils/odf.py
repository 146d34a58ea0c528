"""
Low-level helpers over the lxml tree of an ODF content.xml.

Every view in odtx goes through these functions rather than touching lxml
directly. A missing element is always represented as None.
"""
from typing import Dict, Iterable, Iterator, Optional

import structlog
from lxml import etree

from odtx.errors import InvalidArgumentError

logger = structlog.get_logger(__name__)

NAMESPACES: Dict[str, str] = {
    "office": "urn:oasis:names:tc:opendocument:xmlns:office:1.0",
    "style": "urn:oasis:names:tc:opendocument:xmlns:style:1.0",
    "text": "urn:oasis:names:tc:opendocument:xmlns:text:1.0",
    "table": "urn:oasis:names:tc:opendocument:xmlns:table:1.0",
    "draw": "urn:oasis:names:tc:opendocument:xmlns:drawing:1.0",
    "fo": "urn:oasis:names:tc:opendocument:xmlns:xsl-fo-compatible:1.0",
    "xlink": "http://www.w3.org/1999/xlink",
    "svg": "urn:oasis:names:tc:opendocument:xmlns:svg-compatible:1.0",
    "dc": "http://purl.org/dc/elements/1.1/",
    "meta": "urn:oasis:names:tc:opendocument:xmlns:meta:1.0",
    "number": "urn:oasis:names:tc:opendocument:xmlns:datastyle:1.0",
}

# Parsing untrusted packages: never resolve entities or touch the network.
_PARSER = etree.XMLParser(resolve_entities=False, no_network=True, remove_blank_text=False)


def _split(name: str):
    if name.startswith("{") or ":" not in name:
        return None, name
    prefix, local = name.split(":", 1)
    if prefix not in NAMESPACES:
        raise InvalidArgumentError(f"Unknown namespace prefix '{prefix}' in '{name}'")
    return prefix, local


def qn(name: str) -> str:
    """
    Turns a prefixed name such as 'text:p' into lxml's Clark notation.
    Clark names and unprefixed names are returned unchanged.
    """
    prefix, local = _split(name)
    if prefix is None:
        return local
    return f"{{{NAMESPACES[prefix]}}}{local}"


def _missing_nsmap(parent, names: Iterable[str]) -> Optional[Dict[str, str]]:
    """
    Namespace declarations a new element needs so that lxml serializes it
    with the usual ODF prefixes instead of generated ns0/ns1 ones.
    """
    in_scope = set(parent.nsmap.values()) if parent is not None else set()
    missing = {}
    for name in names:
        prefix, _ = _split(name)
        if prefix is not None and NAMESPACES[prefix] not in in_scope:
            missing[prefix] = NAMESPACES[prefix]
    return missing or None


def parse_xml(data: bytes):
    return etree.fromstring(data, parser=_PARSER)


def serialize(root) -> bytes:
    return etree.tostring(root.getroottree(), xml_declaration=True, encoding="UTF-8")


def create_element(name: str, attributes: Optional[Dict[str, str]] = None, scope=None):
    """
    Detached element. scope is the element it will be attached to, used to
    avoid re-declaring namespaces that are already in effect there.
    """
    attributes = attributes or {}
    element = etree.Element(qn(name), nsmap=_missing_nsmap(scope, [name, *attributes]))
    for key, value in attributes.items():
        create_attribute(element, key, value)
    return element


def create_attribute(element, name: str, value: str):
    """Sets (or overwrites) an attribute; get-or-create semantics."""
    element.set(qn(name), str(value))


def get_attribute(element, name: str, default: str = "") -> str:
    if element is None:
        return default
    return element.get(qn(name), default)


def find_child(node, name: str):
    """First direct child of node with the given tag, or None."""
    if node is None:
        return None
    return node.find(qn(name))


def next_sibling(node, name: str):
    """Next following sibling of node with the given tag, or None."""
    if node is None:
        return None
    return next(node.itersiblings(qn(name)), None)


def iter_children(node, *names: str) -> Iterator:
    """Direct children of node carrying any of the given tags, in document order."""
    if node is None:
        return iter(())
    return node.iterchildren(*[qn(name) for name in names])


def append_child(parent, name: str, attributes: Optional[Dict[str, str]] = None):
    attributes = attributes or {}
    child = etree.SubElement(
        parent, qn(name), nsmap=_missing_nsmap(parent, [name, *attributes])
    )
    for key, value in attributes.items():
        create_attribute(child, key, value)
    return child


def insert_child_at(parent, index: int, name: str, attributes: Optional[Dict[str, str]] = None):
    child = create_element(name, attributes, scope=parent)
    parent.insert(index, child)
    return child


def insert_child_after(parent, name: str, anchor, attributes: Optional[Dict[str, str]] = None):
    return insert_child_at(parent, parent.index(anchor) + 1, name, attributes)


def remove_child(parent, child):
    # lxml drops the tail together with the element; keep surrounding text intact
    if child.tail:
        previous = child.getprevious()
        if previous is not None:
            previous.tail = (previous.tail or "") + child.tail
        else:
            parent.text = (parent.text or "") + child.tail
    parent.remove(child)


def get_text(element) -> str:
    if element is None:
        return ""
    return element.text or ""


def set_text(element, text: str) -> bool:
    """
    Replaces the leading text of element. Returns False when there is no
    element or lxml refuses the value (e.g. control characters).
    """
    if element is None:
        return False
    try:
        element.text = text
    except (ValueError, TypeError) as e:
        logger.warning(f"Rejected text write on {element.tag}: {e}")
        return False
    return True


def element_text(element) -> str:
    """
    Visible text of an element and its descendants, expanding the ODF
    whitespace markers (text:s, text:tab, text:line-break).
    """
    if element is None:
        return ""
    parts = []
    _collect_text(element, parts)
    return "".join(parts)


_SPACE = qn("text:s")
_TAB = qn("text:tab")
_LINE_BREAK = qn("text:line-break")


def _collect_text(element, parts):
    if element.text:
        parts.append(element.text)
    for child in element:
        if not isinstance(child.tag, str):
            # Comments and processing instructions
            pass
        elif child.tag == _SPACE:
            parts.append(" " * _space_count(child))
        elif child.tag == _TAB:
            parts.append("\t")
        elif child.tag == _LINE_BREAK:
            parts.append("\n")
        else:
            _collect_text(child, parts)
        if child.tail:
            parts.append(child.tail)


def _space_count(element) -> int:
    try:
        return max(int(element.get(qn("text:c"), "1")), 1)
    except ValueError:
        return 1
