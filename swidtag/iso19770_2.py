"""
ISO/IEC 19770-2:2015 vocabulary and element-tree helpers.

Tags are held as ``xml.etree.ElementTree`` trees. Element names are
namespace-qualified; attribute names are plain, as in the published schema.
"""

import re
import xml.etree.ElementTree as ET
from typing import Optional

from .exceptions import InvalidAttributeError

NAMESPACE = "http://standards.iso.org/iso/19770/-2/2015/schema.xsd"

# Serialize the ISO namespace as the default namespace
ET.register_namespace("", NAMESPACE)


def qualified(local_name: str) -> str:
    """Return the Clark-notation name of an element in the ISO namespace."""
    return f"{{{NAMESPACE}}}{local_name}"


def local_name(tag: str) -> str:
    """Strip the namespace part from a Clark-notation tag."""
    return tag.rsplit('}', 1)[-1]


# Elements
SOFTWARE_IDENTITY = qualified("SoftwareIdentity")
META = qualified("Meta")
ENTITY = qualified("Entity")
LINK = qualified("Link")

# SoftwareIdentity attributes
NAME_ATTRIBUTE = "name"
VERSION_ATTRIBUTE = "version"
VERSION_SCHEME_ATTRIBUTE = "versionScheme"
TAG_VERSION_ATTRIBUTE = "tagVersion"
TAG_ID_ATTRIBUTE = "tagId"
PATCH_ATTRIBUTE = "patch"
SUPPLEMENTAL_ATTRIBUTE = "supplemental"
MEDIA_ATTRIBUTE = "media"

# Meta attributes
SUMMARY_ATTRIBUTE = "summary"

# Entity attributes
REG_ID_ATTRIBUTE = "regid"
ROLE_ATTRIBUTE = "role"
THUMBPRINT_ATTRIBUTE = "thumbprint"

# Link attributes
HREF_ATTRIBUTE = "href"
RELATIONSHIP_ATTRIBUTE = "rel"
MEDIA_TYPE_ATTRIBUTE = "type"
OWNERSHIP_ATTRIBUTE = "ownership"
USE_ATTRIBUTE = "use"
ARTIFACT_ATTRIBUTE = "artifact"

TRUE_LITERALS = frozenset({"true", "1"})

_NAME_START = (
    "A-Z_a-z\u00C0-\u00D6\u00D8-\u00F6\u00F8-\u02FF\u0370-\u037D\u037F-\u1FFF"
    "\u200C-\u200D\u2070-\u218F\u2C00-\u2FEF\u3001-\uD7FF\uF900-\uFDCF\uFDF0-\uFFFD"
    "\U00010000-\U000EFFFF"
)
_NAME_CHAR = _NAME_START + "\\-.0-9\u00B7\u0300-\u036F\u203F-\u2040"

# XML names without a namespace prefix
_NCNAME = re.compile(f"[{_NAME_START}][{_NAME_CHAR}]*\\Z")

# Anything outside the XML 1.0 Char production
_NON_XML_CHARACTER = re.compile("[^\t\n\r\u0020-\uD7FF\uE000-\uFFFD\U00010000-\U0010FFFF]")


def new_document() -> ET.ElementTree:
    """Create a minimal, empty software identity document."""
    return ET.ElementTree(ET.Element(SOFTWARE_IDENTITY))


def new_element(tag: str, **attributes: Optional[str]) -> ET.Element:
    """Create an element, skipping attributes whose value is None."""
    element = ET.Element(tag)
    for attribute, value in attributes.items():
        set_attribute(element, attribute, value)
    return element


def get_attribute(element: Optional[ET.Element], attribute: str) -> Optional[str]:
    """Read an attribute; a missing element or attribute yields None."""
    if element is None:
        return None
    return element.get(attribute)


def check_attribute(attribute: str, value: Optional[str] = None) -> Optional[str]:
    """
    Validate an attribute for storage and return its text form.
    
    Names must be unprefixed XML names; values may only hold characters
    an XML document can carry.
    
    Raises:
        InvalidAttributeError: If the name or value cannot be written as XML
    """
    if not isinstance(attribute, str) or not _NCNAME.match(attribute) or attribute == "xmlns":
        raise InvalidAttributeError("not a valid XML attribute name", attribute, value)
    if value is None:
        return None
    text = str(value)
    bad = _NON_XML_CHARACTER.search(text)
    if bad:
        raise InvalidAttributeError(
            f"value contains character U+{ord(bad.group()):04X}, which XML cannot hold", attribute, text)
    return text


def set_attribute(element: ET.Element, attribute: str, value: Optional[str]) -> ET.Element:
    """
    Write an attribute as text. Writing None removes it.
    
    Raises:
        InvalidAttributeError: If the name or value cannot be written as XML
    """
    text = check_attribute(attribute, value)
    if text is None:
        element.attrib.pop(attribute, None)
    else:
        element.set(attribute, text)
    return element


def parse_bool(value: Optional[str]) -> Optional[bool]:
    """
    Read a tri-state boolean attribute value.
    
    Absent values stay None. "true" and "1" (any case, surrounding
    whitespace ignored) are True; any other text is False.
    """
    if value is None:
        return None
    return value.strip().lower() in TRUE_LITERALS


def format_bool(value: Optional[bool]) -> Optional[str]:
    """Render a tri-state boolean for storage; None stays None."""
    if value is None:
        return None
    return "true" if value else "false"
