"""
=============================================================================
MEDIA TYPES AND CONTENT NEGOTIATION
=============================================================================

A single user can be read as JSON (the default) or as XML. Which one the
client gets is decided by its Accept header.

=============================================================================
HOW NEGOTIATION WORKS
=============================================================================

    Accept: application/xml;q=0.9, application/json;q=0.5
            ────────┬──────  ──┬──   ───────┬────────  ──┬──
                    │          │            │            │
               media range  quality    media range   quality

    1. Split the header into media ranges and read each q (default 1.0).
    2. Drop ranges with q=0 and sort the rest by q, highest first.
    3. Walk the ranges and return the first type we can produce.
       "*/*" and "application/*" match our first (preferred) type.
    4. Nothing matched, or no Accept header at all → JSON.

We never answer 406 Not Acceptable: like most frameworks' default
behaviour, an unsatisfiable Accept header falls back to JSON.

=============================================================================
"""

from typing import Any, Dict, List, Optional, Sequence, Tuple
from xml.etree import ElementTree


JSON = "application/json"
XML = "application/xml"
TEXT_XML = "text/xml"

# What the API can produce, in order of preference
PRODUCIBLE = (JSON, XML)

# Aliases that map onto one of the producible types
_ALIASES = {
    TEXT_XML: XML,
    "text/json": JSON,
}


def parse_accept(header: str) -> List[Tuple[str, float]]:
    """
    Parse an Accept header into (media_type, quality) pairs.

    The result is sorted by quality, highest first. Ties keep the order
    the client wrote them in. Ranges with q=0 ("not acceptable") and
    malformed quality values are dropped.

    Example:
        >>> parse_accept("text/xml;q=0.5, application/json")
        [('application/json', 1.0), ('text/xml', 0.5)]
    """
    ranges: List[Tuple[str, float]] = []

    for part in header.split(","):
        pieces = [p.strip() for p in part.split(";")]
        media_type = pieces[0].lower()
        if not media_type:
            continue

        quality = 1.0
        for param in pieces[1:]:
            name, _, value = param.partition("=")
            if name.strip().lower() == "q":
                try:
                    quality = float(value)
                except ValueError:
                    quality = 0.0

        if quality > 0:
            ranges.append((media_type, quality))

    # sorted() is stable, so equal q keeps header order
    return sorted(ranges, key=lambda item: item[1], reverse=True)


def negotiate(accept: str, offered: Sequence[str] = PRODUCIBLE) -> str:
    """
    Pick the representation to answer with.

    Args:
        accept: Raw Accept header (may be empty).
        offered: Media types the endpoint can produce, preferred first.

    Returns:
        One of `offered`. The first entry when nothing else matches.
    """
    for media_type, _ in parse_accept(accept):
        media_type = _ALIASES.get(media_type, media_type)

        if media_type in offered:
            return media_type

        if media_type == "*/*":
            return offered[0]

        if media_type.endswith("/*"):
            major = media_type[:-1]
            for candidate in offered:
                if candidate.startswith(major):
                    return candidate

    return offered[0]


# =============================================================================
# XML SERIALIZATION
# =============================================================================
#
# DTOs travel as camelCase JSON objects. Their XML form uses PascalCase
# element names under a root element named after the DTO:
#
#     {"id": "9f1c...", "login": "alice", "firstName": "Alice"}
#
#     <?xml version='1.0' encoding='utf-8'?>
#     <UserDto><Id>9f1c...</Id><Login>alice</Login><FirstName>Alice</FirstName></UserDto>
#
# Only flat documents are supported; the users API has nothing nested.
#
# =============================================================================

def to_pascal_case(name: str) -> str:
    """"firstName" → "FirstName"."""
    return name[:1].upper() + name[1:]


def to_xml(root_name: str, data: Dict[str, Any]) -> bytes:
    """
    Serialize a flat mapping into an XML document.

    None values become empty elements. Everything else goes through str().
    """
    root = ElementTree.Element(root_name)
    for key, value in data.items():
        child = ElementTree.SubElement(root, to_pascal_case(key))
        if value is not None:
            child.text = str(value)
    return ElementTree.tostring(root, encoding="utf-8", xml_declaration=True)


def content_type_header(media_type: str, charset: Optional[str] = "utf-8") -> str:
    """"application/xml" → "application/xml; charset=utf-8"."""
    if charset:
        return f"{media_type}; charset={charset}"
    return media_type
