"""
The SoftwareIdentity record: a package's identity held as an ISO-19770-2 tag.
"""

import xml.etree.ElementTree as ET
from typing import Any, List, Optional

from . import iso19770_2 as iso
from .elements import ElementCollection, Entity, Link, SoftwareMetadata
from .exceptions import InvalidMetadataMutation
from .logging_config import get_logger

logger = get_logger('identity')


def _root_attribute(attribute: str, doc: str) -> property:
    """Build a property reading/writing one attribute of the root element."""

    def getter(self) -> Optional[str]:
        return iso.get_attribute(self._root(), attribute)

    def setter(self, value: Optional[str]) -> None:
        iso.set_attribute(self.swid.getroot(), attribute, value)

    return property(getter, setter, doc=doc)


def _root_flag(attribute: str, doc: str) -> property:
    """Build a tri-state boolean property over one root attribute."""

    def getter(self) -> Optional[bool]:
        return iso.parse_bool(iso.get_attribute(self._root(), attribute))

    def setter(self, value: Optional[bool]) -> None:
        iso.set_attribute(self.swid.getroot(), attribute, iso.format_bool(value))

    return property(getter, setter, doc=doc)


class SoftwareIdentity:
    """
    A package found or installed by a provider, backed by a software identity tag.

    The tag tree is created on the first write. Reads on a fresh identity
    return None (or an empty collection) and do not create it.

    Provider bookkeeping (provider_name, source, status, ...) lives on the
    object only and is never written into the tag.
    """

    def __init__(self, provider_name: Optional[str] = None, source: Optional[str] = None,
                 status: Optional[str] = None, search_key: Optional[str] = None,
                 full_path: Optional[str] = None, package_filename: Optional[str] = None,
                 from_trusted_source: bool = False, fast_package_reference: Any = None):
        self.provider_name = provider_name
        self.source = source
        self.status = status
        self.search_key = search_key
        self.full_path = full_path
        self.package_filename = package_filename
        self.from_trusted_source = from_trusted_source
        self.fast_package_reference = fast_package_reference
        self._swid_tag: Optional[ET.ElementTree] = None

    @classmethod
    def from_tag(cls, tag: ET.ElementTree, **fields) -> 'SoftwareIdentity':
        """Wrap an existing tag tree. The identity takes ownership of it."""
        identity = cls(**fields)
        identity._swid_tag = tag
        return identity

    # ISO-19770-2 identity attributes

    name = _root_attribute(iso.NAME_ATTRIBUTE, "Software name.")
    version = _root_attribute(iso.VERSION_ATTRIBUTE, "Version string, interpreted by version_scheme.")
    version_scheme = _root_attribute(iso.VERSION_SCHEME_ATTRIBUTE, "Version scheme token, e.g. 'multipartnumeric'.")
    tag_version = _root_attribute(iso.TAG_VERSION_ATTRIBUTE, "Revision of the tag itself.")
    tag_id = _root_attribute(iso.TAG_ID_ATTRIBUTE, "Globally unique tag identifier.")
    applies_to_media = _root_attribute(iso.MEDIA_ATTRIBUTE, "Media query the tag applies to.")
    is_patch = _root_flag(iso.PATCH_ATTRIBUTE, "True if the tag describes a patch; None if not stated.")
    is_supplemental = _root_flag(iso.SUPPLEMENTAL_ATTRIBUTE, "True if the tag supplements another; None if not stated.")

    @property
    def summary(self) -> Optional[str]:
        """
        The summary from the first Meta element that carries one.

        A Meta holding an empty summary counts; None means no Meta has one.
        """
        for meta in self.meta:
            value = meta.summary
            if value is not None:
                return value
        return None

    @summary.setter
    def summary(self, value: str) -> None:
        self.set_meta(iso.SUMMARY_ATTRIBUTE, value)

    # Meta

    @property
    def meta(self) -> ElementCollection[SoftwareMetadata]:
        return ElementCollection(self._root, iso.META, SoftwareMetadata)

    def __getitem__(self, key: str) -> List[str]:
        """All values recorded for Meta key ``key``, in document order."""
        return [meta[key] for meta in self.meta if key in meta]

    def set_meta(self, key: str, value: str) -> None:
        """
        Record a Meta value on the first Meta element.

        A key that already holds a non-empty value anywhere in the tag may
        only be set again to one of its recorded values; that repeat is a no-op.

        Raises:
            InvalidMetadataMutation: If ``value`` would replace a different recorded value
            InvalidAttributeError: If ``key`` or ``value`` cannot be written as XML
        """
        value = iso.check_attribute(key, value)
        self._check_meta(key, value)
        if value is not None and value in self[key]:
            return

        logger.debug(f"Setting meta '{key}' = '{value}' on '{self.name}'")
        iso.set_attribute(self._first_meta(), key, value)

    def add_meta(self, **attributes: Optional[str]) -> SoftwareMetadata:
        """
        Append a new Meta element with the given attributes.

        Raises:
            InvalidMetadataMutation: If any value contradicts one already recorded
            InvalidAttributeError: If a key or value cannot be written as XML
        """
        for key, value in attributes.items():
            value = iso.check_attribute(key, value)
            if value is not None:
                self._check_meta(key, value)

        element = iso.new_element(iso.META, **attributes)
        self.swid.getroot().append(element)
        return SoftwareMetadata(element)

    # Entities and links

    @property
    def entities(self) -> ElementCollection[Entity]:
        return ElementCollection(self._root, iso.ENTITY, Entity)

    def add_entity(self, name: str, regid: str, role: str, thumbprint: Optional[str] = None) -> Entity:
        """Append an Entity element and return a view over it."""
        element = iso.new_element(iso.ENTITY, **{
            iso.NAME_ATTRIBUTE: name,
            iso.REG_ID_ATTRIBUTE: regid,
            iso.ROLE_ATTRIBUTE: role,
            iso.THUMBPRINT_ATTRIBUTE: thumbprint,
        })
        self.swid.getroot().append(element)
        return Entity(element)

    @property
    def links(self) -> ElementCollection[Link]:
        return ElementCollection(self._root, iso.LINK, Link)

    def add_link(self, href: str, relationship: str, media_type: Optional[str] = None,
                 ownership: Optional[str] = None, use: Optional[str] = None,
                 applies_to_media: Optional[str] = None, artifact: Optional[str] = None) -> Link:
        """Append a Link element and return a view over it."""
        element = iso.new_element(iso.LINK, **{
            iso.HREF_ATTRIBUTE: href,
            iso.RELATIONSHIP_ATTRIBUTE: relationship,
            iso.MEDIA_TYPE_ATTRIBUTE: media_type,
            iso.OWNERSHIP_ATTRIBUTE: ownership,
            iso.USE_ATTRIBUTE: use,
            iso.MEDIA_ATTRIBUTE: applies_to_media,
            iso.ARTIFACT_ATTRIBUTE: artifact,
        })
        self.swid.getroot().append(element)
        return Link(element)

    # Tag tree

    @property
    def has_swid_tag(self) -> bool:
        """True once the tag tree has been created."""
        return self._swid_tag is not None

    @property
    def swid(self) -> ET.ElementTree:
        """The owned tag tree, created on first access."""
        if self._swid_tag is None:
            logger.debug("Creating software identity tag")
            self._swid_tag = iso.new_document()
        return self._swid_tag

    @property
    def swid_tag_text(self) -> str:
        """The tag rendered as XML text with default output settings."""
        from .serialization import SwidTagWriter
        return SwidTagWriter().to_text(self)

    def _root(self) -> Optional[ET.Element]:
        if self._swid_tag is None:
            return None
        return self._swid_tag.getroot()

    def _check_meta(self, key: str, value: Optional[str]) -> None:
        existing = [v for v in self[key] if v]
        if existing and value not in existing:
            logger.warning(f"Refusing to change meta '{key}' on '{self.name}' from {existing} to '{value}'")
            raise InvalidMetadataMutation(key, existing, value)

    def _first_meta(self) -> ET.Element:
        root = self.swid.getroot()
        meta = root.find(iso.META)
        if meta is None:
            meta = ET.SubElement(root, iso.META)
        return meta

    def __repr__(self):
        return (f"SoftwareIdentity(name={self.name!r}, version={self.version!r}, "
                f"version_scheme={self.version_scheme!r}, provider_name={self.provider_name!r})")
