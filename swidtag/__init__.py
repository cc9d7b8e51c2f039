"""
swidtag

Software identity records modeled on ISO/IEC 19770-2 tags, and version
comparison across the version schemes those tags declare.
"""

__version__ = "0.1.0"
__author__ = "swidtag maintainers"

from .comparison import (
    Ordering,
    SoftwareIdentityVersionComparator,
    VersionScheme,
    compare,
    compare_versions,
)
from .elements import Entity, Link, SoftwareMetadata
from .exceptions import InvalidMetadataMutation, SwidTagError, TagParseError
from .identity import SoftwareIdentity
from .serialization import SwidTagReader, SwidTagWriter

__all__ = [
    'Entity',
    'InvalidMetadataMutation',
    'Link',
    'Ordering',
    'SoftwareIdentity',
    'SoftwareIdentityVersionComparator',
    'SoftwareMetadata',
    'SwidTagError',
    'SwidTagReader',
    'SwidTagWriter',
    'TagParseError',
    'VersionScheme',
    'compare',
    'compare_versions',
]
