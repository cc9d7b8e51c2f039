"""
Version comparison across the version schemes a software identity may declare.

Comparison never raises. Pairs that cannot be ordered (absent versions,
mismatched schemes, unparsable input, unknown schemes) compare as
``Ordering.INCOMPARABLE``, which behaves as 0 in three-way contexts.
"""

import functools
import re
from enum import Enum
from typing import Callable, Dict, Iterable, List, Optional

from .logging_config import get_logger

logger = get_logger('comparison')

DEFAULT_NUMERIC_CHARACTERS = frozenset("0123456789.")

UINT64_MAX = 2 ** 64 - 1

_UNSIGNED_INTEGER = re.compile(r'^\s*\+?[0-9]+\s*$')
_DECIMAL = re.compile(r'^\s*[+-]?(?:[0-9]+\.?[0-9]*|\.[0-9]+)(?:[eE][+-]?[0-9]+)?\s*$')


class Ordering(Enum):
    """Outcome of comparing two versions."""
    LESS = -1
    EQUAL = 0
    GREATER = 1
    INCOMPARABLE = None

    @property
    def sign(self) -> int:
        """Three-way result; INCOMPARABLE reads as 0."""
        return self.value or 0

    @property
    def is_incomparable(self) -> bool:
        return self is Ordering.INCOMPARABLE

    def inverted(self) -> 'Ordering':
        if self is Ordering.LESS:
            return Ordering.GREATER
        if self is Ordering.GREATER:
            return Ordering.LESS
        return self

    def __int__(self) -> int:
        return self.sign

    @classmethod
    def from_sign(cls, value: int) -> 'Ordering':
        if value < 0:
            return cls.LESS
        if value > 0:
            return cls.GREATER
        return cls.EQUAL


class VersionScheme(Enum):
    """Version schemes a tag's versionScheme attribute may name."""
    ALPHANUMERIC = "alphanumeric"
    DECIMAL = "decimal"
    MULTIPART_NUMERIC = "multipartnumeric"
    MULTIPART_NUMERIC_SUFFIX = "multipartnumeric+suffix"
    SEMVER = "semver"
    UNKNOWN = "unknown"

    @classmethod
    def from_token(cls, token: Optional[str]) -> 'VersionScheme':
        """Map a scheme token to a scheme, case-insensitively. Unrecognized tokens are UNKNOWN."""
        if not token:
            return cls.UNKNOWN
        try:
            return cls(token.lower())
        except ValueError:
            return cls.UNKNOWN


def _ordinal(x: str, y: str) -> Ordering:
    # Python compares str by code point
    if x < y:
        return Ordering.LESS
    if x > y:
        return Ordering.GREATER
    return Ordering.EQUAL


def _parse_decimal(version: str) -> Optional[float]:
    if not _DECIMAL.match(version):
        return None
    return float(version)


def _parse_part(part: str) -> Optional[int]:
    if not part:
        return 0
    if not _UNSIGNED_INTEGER.match(part):
        return None
    value = int(part)
    if value > UINT64_MAX:
        return None
    return value


def index_of_not_any(version: Optional[str], allowed: Iterable[str] = DEFAULT_NUMERIC_CHARACTERS) -> int:
    """
    Index of the first character of ``version`` outside ``allowed``, or -1.

    With the default character set this is where the numeric prefix of a
    version such as "1.2.3-beta" ends.
    """
    if not version:
        return -1
    allowed = frozenset(allowed)
    for index, ch in enumerate(version):
        if ch not in allowed:
            return index
    return -1


def compare_alphanumeric(x: str, y: str) -> Ordering:
    return _ordinal(x, y)


def compare_decimal(x: str, y: str) -> Ordering:
    x_value = _parse_decimal(x)
    y_value = _parse_decimal(y)
    if x_value is None or y_value is None:
        logger.debug(f"Cannot compare '{x}' and '{y}' as decimals")
        return Ordering.INCOMPARABLE
    return Ordering.from_sign((x_value > y_value) - (x_value < y_value))


def compare_multipart_numeric(x: str, y: str) -> Ordering:
    """
    Compare dot-separated unsigned integers part by part.

    The shorter version is padded with zeros, so "1.2" equals "1.2.0".
    Empty parts count as 0. Any part that is not an unsigned 64-bit
    integer makes the pair incomparable.
    """
    xs = x.split('.')
    ys = y.split('.')
    parts = max(len(xs), len(ys))
    xs += [''] * (parts - len(xs))
    ys += [''] * (parts - len(ys))

    result = Ordering.EQUAL
    for x_part, y_part in zip(xs, ys):
        x_value = _parse_part(x_part)
        y_value = _parse_part(y_part)
        if x_value is None or y_value is None:
            logger.debug(f"Cannot compare '{x}' and '{y}' as multipart numeric versions")
            return Ordering.INCOMPARABLE
        if result is Ordering.EQUAL and x_value != y_value:
            result = Ordering.LESS if x_value < y_value else Ordering.GREATER
    return result


def _compare_with_suffix(x: str, y: str, unsuffixed_first: bool) -> Ordering:
    x_pos = index_of_not_any(x)
    y_pos = index_of_not_any(y)
    x_numeric = x if x_pos == -1 else x[:x_pos]
    y_numeric = y if y_pos == -1 else y[:y_pos]

    result = compare_multipart_numeric(x_numeric, y_numeric)
    if result is not Ordering.EQUAL:
        return result

    if x_pos == -1 and y_pos == -1:
        return Ordering.EQUAL

    if x_pos == -1:
        return Ordering.LESS if unsuffixed_first else Ordering.GREATER

    if y_pos == -1:
        return Ordering.GREATER if unsuffixed_first else Ordering.LESS

    return _ordinal(x[x_pos:], y[y_pos:])


def compare_multipart_numeric_suffix(x: str, y: str) -> Ordering:
    """Multipart numeric prefix, then suffix; "1.0" sorts before "1.0-beta"."""
    return _compare_with_suffix(x, y, unsuffixed_first=True)


def compare_semver(x: str, y: str) -> Ordering:
    """Multipart numeric prefix, then suffix; a pre-release "1.0-beta" sorts before "1.0"."""
    return _compare_with_suffix(x, y, unsuffixed_first=False)


def compare_unknown(x: str, y: str) -> Ordering:
    return Ordering.INCOMPARABLE


SCHEME_COMPARATORS: Dict[VersionScheme, Callable[[str, str], Ordering]] = {
    VersionScheme.ALPHANUMERIC: compare_alphanumeric,
    VersionScheme.DECIMAL: compare_decimal,
    VersionScheme.MULTIPART_NUMERIC: compare_multipart_numeric,
    VersionScheme.MULTIPART_NUMERIC_SUFFIX: compare_multipart_numeric_suffix,
    VersionScheme.SEMVER: compare_semver,
    VersionScheme.UNKNOWN: compare_unknown,
}


def compare_versions(x_version: Optional[str], x_scheme: Optional[str],
                     y_version: Optional[str], y_scheme: Optional[str]) -> Ordering:
    """
    Compare two versions, each under its declared scheme.

    Args:
        x_version: First version string
        x_scheme: Version scheme token of the first version
        y_version: Second version string
        y_scheme: Version scheme token of the second version

    Returns:
        Ordering of x relative to y; INCOMPARABLE when no ordering can be claimed
    """
    if x_version is None or y_version is None:
        return Ordering.INCOMPARABLE

    x_scheme = x_scheme or ''
    y_scheme = y_scheme or ''
    if x_scheme.lower() != y_scheme.lower():
        logger.debug(f"Version schemes differ ('{x_scheme}' vs '{y_scheme}'); cannot compare")
        return Ordering.INCOMPARABLE

    scheme = VersionScheme.from_token(x_scheme)
    return SCHEME_COMPARATORS[scheme](x_version, y_version)


def compare(x_version: Optional[str], x_scheme: Optional[str],
            y_version: Optional[str], y_scheme: Optional[str]) -> int:
    """Three-way form of compare_versions: -1, 0 or 1."""
    return compare_versions(x_version, x_scheme, y_version, y_scheme).sign


class SoftwareIdentityVersionComparator:
    """Orders SoftwareIdentity objects by their declared version and scheme."""

    def compare_identities(self, x, y) -> Ordering:
        if x is None or y is None:
            # can't compare vs None
            return Ordering.INCOMPARABLE
        return compare_versions(x.version, x.version_scheme, y.version, y.version_scheme)

    def compare(self, x, y) -> int:
        """
        Compare two identities.

        Returns:
            -1 if x is older, 1 if newer, 0 if equal or incomparable
        """
        return self.compare_identities(x, y).sign

    def is_comparable(self, x, y) -> bool:
        return not self.compare_identities(x, y).is_incomparable

    def sort_key(self):
        """Key function for sorted()/list.sort()."""
        return functools.cmp_to_key(self.compare)

    def sort(self, identities: Iterable, reverse: bool = False) -> List:
        """
        Stable sort by version.

        Incomparable pairs keep their input order, so this is best-effort
        when schemes are mixed or versions are malformed.
        """
        return sorted(identities, key=self.sort_key(), reverse=reverse)

    def get_latest(self, identities: Iterable):
        """
        Get the newest identity from a collection.

        Identities without a version are skipped; among the rest, an
        identity replaces the current candidate only if it compares greater.

        Returns:
            Latest identity or None if there is none with a version
        """
        latest = None
        for identity in identities:
            if identity is None or identity.version is None:
                continue
            if latest is None or self.compare(identity, latest) > 0:
                latest = identity
        return latest

