"""
Reading and writing software identity tags as XML text.
"""

import copy
import os
import xml.etree.ElementTree as ET
from typing import Optional

import defusedxml.ElementTree as DET
from defusedxml import DefusedXmlException

from . import iso19770_2 as iso
from .config import OutputConfig, ParsingConfig
from .exceptions import TagParseError
from .identity import SoftwareIdentity
from .logging_config import get_logger

logger = get_logger('serialization')

XML_DECLARATION = '<?xml version="1.0" encoding="utf-8"?>\n'


class SwidTagWriter:
    """Renders a SoftwareIdentity's tag to XML text."""

    def __init__(self, config: Optional[OutputConfig] = None):
        self.config = config or OutputConfig()

    def to_text(self, identity: SoftwareIdentity) -> str:
        """
        Render the identity's tag.

        Attribute values and child order are preserved exactly; only
        whitespace between elements is changed. The identity itself is
        not modified.

        Args:
            identity: Identity to render

        Returns:
            XML document text
        """
        root = copy.deepcopy(identity.swid.getroot())
        if self.config.indent:
            ET.indent(root, space=self.config.indent)

        text = ET.tostring(root, encoding='unicode')
        if self.config.xml_declaration:
            text = XML_DECLARATION + text
        return text

    def write(self, identity: SoftwareIdentity, file_path: str) -> None:
        """Render the identity's tag to a UTF-8 file."""
        with open(file_path, 'w', encoding='utf-8') as f:
            f.write(self.to_text(identity))
        logger.debug(f"Wrote tag for '{identity.name}' to {file_path}")


class SwidTagReader:
    """Builds SoftwareIdentity objects from XML tag text."""

    def __init__(self, config: Optional[ParsingConfig] = None):
        self.config = config or ParsingConfig()

    def from_text(self, text: str, file_path: Optional[str] = None, **fields) -> SoftwareIdentity:
        """
        Parse tag text into a new identity.

        Args:
            text: XML document text
            file_path: Optional source path, used in error messages
            **fields: Process-local fields for the new identity (provider_name, source, ...)

        Returns:
            SoftwareIdentity owning the parsed tree

        Raises:
            TagParseError: If the text is not a well-formed software identity tag
        """
        try:
            root = DET.fromstring(text)
        except ET.ParseError as e:
            raise TagParseError(f"Invalid XML: {e}", file_path)
        except DefusedXmlException as e:
            raise TagParseError(f"Rejected unsafe XML: {e}", file_path)

        self._validate_root(root, file_path)

        identity = SoftwareIdentity.from_tag(ET.ElementTree(root), **fields)
        logger.debug(f"Parsed tag for '{identity.name}' version '{identity.version}'")
        return identity

    def parse(self, file_path: str, **fields) -> SoftwareIdentity:
        """
        Parse a tag file.

        Raises:
            FileNotFoundError: If the file doesn't exist
            TagParseError: If the file cannot be read or parsed
        """
        if not os.path.exists(file_path):
            raise FileNotFoundError(f"Tag file not found: {file_path}")

        try:
            with open(file_path, 'r', encoding='utf-8') as f:
                text = f.read()
        except (OSError, UnicodeDecodeError) as e:
            raise TagParseError(f"Error reading tag file: {e}", file_path)

        fields.setdefault('full_path', os.path.abspath(file_path))
        return self.from_text(text, file_path=file_path, **fields)

    def _validate_root(self, root: ET.Element, file_path: Optional[str]) -> None:
        if iso.local_name(root.tag) != iso.local_name(iso.SOFTWARE_IDENTITY):
            raise TagParseError(f"Root element is '{root.tag}', expected SoftwareIdentity", file_path)

        if root.tag != iso.SOFTWARE_IDENTITY:
            if self.config.require_namespace:
                raise TagParseError(f"SoftwareIdentity is not in the {iso.NAMESPACE} namespace", file_path)
            logger.warning(f"Tag root '{root.tag}' is outside the ISO namespace; moving it into {iso.NAMESPACE}")
            _adopt_namespace(root)


def _adopt_namespace(element: ET.Element) -> None:
    # Unqualified or foreign-namespace tags are renamed into the ISO namespace
    for each in element.iter():
        if isinstance(each.tag, str):
            each.tag = iso.qualified(iso.local_name(each.tag))
