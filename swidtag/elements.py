"""
Read/write projections over Meta, Entity and Link elements of a tag.

Each projection wraps the backing element by reference, so writes through a
projection land in the owning tag and later reads see later writes.
"""

import xml.etree.ElementTree as ET
from typing import Callable, Dict, Generic, Iterator, List, Optional, TypeVar

from . import iso19770_2 as iso

T = TypeVar('T', bound='ElementView')


class ElementView:
    """Base class for projections over a single tag element."""
    
    def __init__(self, element: ET.Element):
        self._element = element
    
    @property
    def element(self) -> ET.Element:
        """The backing element."""
        return self._element
    
    def _get(self, attribute: str) -> Optional[str]:
        return iso.get_attribute(self._element, attribute)
    
    def _set(self, attribute: str, value: Optional[str]) -> None:
        iso.set_attribute(self._element, attribute, value)
    
    def __eq__(self, other):
        if not isinstance(other, ElementView):
            return NotImplemented
        return type(self) is type(other) and self._element is other._element
    
    def __hash__(self):
        return hash((type(self), id(self._element)))


class SoftwareMetadata(ElementView):
    """A Meta element: a free-form bag of key/value attributes."""
    
    def __getitem__(self, key: str) -> str:
        value = self._get(key)
        if value is None:
            raise KeyError(key)
        return value
    
    def __contains__(self, key) -> bool:
        return key in self._element.attrib
    
    def __iter__(self) -> Iterator[str]:
        return iter(list(self._element.attrib))
    
    def __len__(self) -> int:
        return len(self._element.attrib)
    
    def get(self, key: str, default: Optional[str] = None) -> Optional[str]:
        value = self._get(key)
        return default if value is None else value
    
    def keys(self) -> List[str]:
        return list(self._element.attrib)
    
    def items(self) -> List:
        return list(self._element.attrib.items())
    
    def to_dict(self) -> Dict[str, str]:
        return dict(self._element.attrib)
    
    def set(self, key: str, value: Optional[str]) -> None:
        """
        Write a value directly on this Meta element.
        
        This bypasses the record-wide set-once check; use
        SoftwareIdentity.set_meta for values that must not be overwritten.
        """
        self._set(key, value)
    
    @property
    def summary(self) -> Optional[str]:
        return self._get(iso.SUMMARY_ATTRIBUTE)
    
    def __repr__(self):
        return f"SoftwareMetadata({self.to_dict()!r})"


class Entity(ElementView):
    """An Entity element: a party associated with the software."""
    
    @property
    def name(self) -> Optional[str]:
        return self._get(iso.NAME_ATTRIBUTE)
    
    @name.setter
    def name(self, value: Optional[str]) -> None:
        self._set(iso.NAME_ATTRIBUTE, value)
    
    @property
    def regid(self) -> Optional[str]:
        return self._get(iso.REG_ID_ATTRIBUTE)
    
    @regid.setter
    def regid(self, value: Optional[str]) -> None:
        self._set(iso.REG_ID_ATTRIBUTE, value)
    
    @property
    def role(self) -> Optional[str]:
        return self._get(iso.ROLE_ATTRIBUTE)
    
    @role.setter
    def role(self, value: Optional[str]) -> None:
        self._set(iso.ROLE_ATTRIBUTE, value)
    
    @property
    def thumbprint(self) -> Optional[str]:
        return self._get(iso.THUMBPRINT_ATTRIBUTE)
    
    @thumbprint.setter
    def thumbprint(self, value: Optional[str]) -> None:
        self._set(iso.THUMBPRINT_ATTRIBUTE, value)
    
    def __repr__(self):
        return f"Entity(name={self.name!r}, regid={self.regid!r}, role={self.role!r})"


class Link(ElementView):
    """A Link element: a relationship to another artifact or resource."""
    
    @property
    def href(self) -> Optional[str]:
        return self._get(iso.HREF_ATTRIBUTE)
    
    @href.setter
    def href(self, value: Optional[str]) -> None:
        self._set(iso.HREF_ATTRIBUTE, value)
    
    @property
    def relationship(self) -> Optional[str]:
        return self._get(iso.RELATIONSHIP_ATTRIBUTE)
    
    @relationship.setter
    def relationship(self, value: Optional[str]) -> None:
        self._set(iso.RELATIONSHIP_ATTRIBUTE, value)
    
    @property
    def media_type(self) -> Optional[str]:
        return self._get(iso.MEDIA_TYPE_ATTRIBUTE)
    
    @media_type.setter
    def media_type(self, value: Optional[str]) -> None:
        self._set(iso.MEDIA_TYPE_ATTRIBUTE, value)
    
    @property
    def ownership(self) -> Optional[str]:
        return self._get(iso.OWNERSHIP_ATTRIBUTE)
    
    @ownership.setter
    def ownership(self, value: Optional[str]) -> None:
        self._set(iso.OWNERSHIP_ATTRIBUTE, value)
    
    @property
    def use(self) -> Optional[str]:
        return self._get(iso.USE_ATTRIBUTE)
    
    @use.setter
    def use(self, value: Optional[str]) -> None:
        self._set(iso.USE_ATTRIBUTE, value)
    
    @property
    def applies_to_media(self) -> Optional[str]:
        return self._get(iso.MEDIA_ATTRIBUTE)
    
    @applies_to_media.setter
    def applies_to_media(self, value: Optional[str]) -> None:
        self._set(iso.MEDIA_ATTRIBUTE, value)
    
    @property
    def artifact(self) -> Optional[str]:
        return self._get(iso.ARTIFACT_ATTRIBUTE)
    
    @artifact.setter
    def artifact(self, value: Optional[str]) -> None:
        self._set(iso.ARTIFACT_ATTRIBUTE, value)
    
    def __repr__(self):
        return f"Link(href={self.href!r}, relationship={self.relationship!r})"


class ElementCollection(Generic[T]):
    """
    Live, restartable view over the children of one kind.
    
    Every iteration re-reads the owner's current tree, so elements added
    after the collection was obtained are visible. An owner without a tree
    yields nothing.
    """
    
    def __init__(self, root_getter: Callable[[], Optional[ET.Element]], tag: str, view_type: Callable[[ET.Element], T]):
        self._root_getter = root_getter
        self._tag = tag
        self._view_type = view_type
    
    def _elements(self) -> List[ET.Element]:
        root = self._root_getter()
        if root is None:
            return []
        return root.findall(self._tag)
    
    def __iter__(self) -> Iterator[T]:
        for element in self._elements():
            yield self._view_type(element)
    
    def __len__(self) -> int:
        return len(self._elements())
    
    def __bool__(self) -> bool:
        return len(self) > 0
    
    def __getitem__(self, index: int) -> T:
        return self._view_type(self._elements()[index])
    
    def first(self) -> Optional[T]:
        elements = self._elements()
        return self._view_type(elements[0]) if elements else None
    
    def __repr__(self):
        return f"ElementCollection({iso.local_name(self._tag)}, {len(self)} items)"
