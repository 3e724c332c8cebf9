"""Media type parsing and comparison.

This module provides the immutable ``MediaType`` value used throughout the
negotiation engine. A media type is a ``type/subtype[+suffix][;params]``
string, possibly with wildcard segments. Comparison is case-insensitive
and follows the subset relation used by content negotiation: a media
type A is a subset of B when every concrete content type matched by A is
also matched by B.

It also parses ``Accept`` header values into media types ordered by
client preference.
"""

import logging
import re
from dataclasses import dataclass, field
from typing import Iterable, List, Optional, Tuple, Union

from ..exceptions import InvalidMediaTypeError

logger = logging.getLogger(__name__)

ANY_CONTENT_TYPE = "*/*"
TEXT_HTML = "text/html"
APPLICATION_JSON = "application/json"
APPLICATION_XML = "application/xml"

# RFC 7230 token characters
_TOKEN = re.compile(r"^[A-Za-z0-9!#$%&'*+.^_`|~-]+$")
_QUALITY = re.compile(r"^(0(\.\d{0,3})?|1(\.0{0,3})?)$")

# Specificity ranks, lower is more specific
RANK_EXACT = 1
RANK_ANY_SUBTYPE_WITH_SUFFIX = 2
RANK_ANY_SUBTYPE = 3
RANK_ANY_TYPE = 4


def _parse_quality(value: str, raw: str) -> float:
    if not _QUALITY.match(value):
        raise InvalidMediaTypeError(f"Invalid quality value in {raw!r}", value=raw)
    return float(value)


@dataclass(frozen=True)
class MediaType:
    """An immutable, parsed media type.

    :param type: Top-level type, lower-cased (``*`` for any)
    :type type: str
    :param subtype: Subtype without the structured suffix (``*`` for any)
    :type subtype: str
    :param suffix: Structured syntax suffix, e.g. ``json`` in ``vnd.api+json``
    :type suffix: Optional[str]
    :param parameters: Media type parameters, excluding ``q`` and anything after it
    :type parameters: Tuple[Tuple[str, str], ...]
    :param quality: Quality factor from an ``Accept`` entry, if any
    :type quality: Optional[float]
    """

    type: str
    subtype: str
    suffix: Optional[str] = None
    parameters: Tuple[Tuple[str, str], ...] = ()
    quality: Optional[float] = field(default=None, compare=False)

    def __post_init__(self):
        if self.type == "*" and (self.subtype != "*" or self.suffix is not None):
            raise InvalidMediaTypeError(
                f"Wildcard type requires a wildcard subtype: {self.type}/{self.subtype}",
                value=f"{self.type}/{self.subtype}",
            )

    @classmethod
    def parse(cls, value: str) -> "MediaType":
        """Parse a media type string.

        :param value: Media type string such as ``application/vnd.api+json; charset=utf-8``
        :type value: str
        :return: Parsed media type
        :rtype: MediaType
        :raises InvalidMediaTypeError: If the string is not a valid media type
        """
        if not isinstance(value, str) or not value.strip():
            raise InvalidMediaTypeError("Empty media type", value=value)

        head, *raw_params = value.split(";")
        type_, sep, subtype = head.strip().partition("/")
        type_ = type_.strip().lower()
        subtype = subtype.strip().lower()
        if not sep or not _TOKEN.match(type_) or not _TOKEN.match(subtype):
            raise InvalidMediaTypeError(f"Invalid media type {value!r}", value=value)

        suffix = None
        if "+" in subtype:
            base, _, suffix = subtype.rpartition("+")
            if not base or not suffix:
                raise InvalidMediaTypeError(
                    f"Invalid structured suffix in {value!r}", value=value
                )
            subtype = base

        parameters: List[Tuple[str, str]] = []
        quality = None
        for raw in raw_params:
            raw = raw.strip()
            if not raw:
                continue
            name, eq, param_value = raw.partition("=")
            name = name.strip().lower()
            param_value = param_value.strip().strip('"')
            if not eq or not _TOKEN.match(name):
                raise InvalidMediaTypeError(
                    f"Invalid parameter {raw!r} in {value!r}", value=value
                )
            if name == "q":
                # q and everything after it are accept-extensions
                quality = _parse_quality(param_value, value)
                break
            parameters.append((name, param_value.lower()))

        return cls(type_, subtype, suffix, tuple(parameters), quality)

    @classmethod
    def try_parse(cls, value: str) -> Optional["MediaType"]:
        """Parse a media type string, returning None when it is malformed."""
        try:
            return cls.parse(value)
        except InvalidMediaTypeError:
            return None

    @property
    def full_subtype(self) -> str:
        if self.suffix is None:
            return self.subtype
        return f"{self.subtype}+{self.suffix}"

    @property
    def effective_quality(self) -> float:
        return 1.0 if self.quality is None else self.quality

    @property
    def matches_all_types(self) -> bool:
        return self.type == "*"

    @property
    def matches_all_subtypes(self) -> bool:
        return self.subtype == "*" and self.suffix is None

    @property
    def matches_all_subtypes_without_suffix(self) -> bool:
        return self.subtype == "*"

    @property
    def specificity(self) -> int:
        """Rank used to order negotiation entries (1 = most specific)."""
        if self.matches_all_types:
            return RANK_ANY_TYPE
        if self.matches_all_subtypes:
            return RANK_ANY_SUBTYPE
        if self.matches_all_subtypes_without_suffix:
            return RANK_ANY_SUBTYPE_WITH_SUFFIX
        return RANK_EXACT

    def is_subset_of(self, other: "MediaType") -> bool:
        """Check whether every content type matching this one also matches ``other``.

        Example: ``application/json`` is a subset of ``application/*``, and
        ``application/vnd.api+json`` is a subset of ``application/*+json``.

        :param other: The (possibly wildcarded) media type set
        :type other: MediaType
        :return: True if this media type is a subset of ``other``
        :rtype: bool
        """
        return (
            self._matches_type(other)
            and self._matches_subtype(other)
            and self._contains_all_parameters(other)
        )

    def _matches_type(self, other: "MediaType") -> bool:
        return other.matches_all_types or other.type == self.type

    def _matches_subtype(self, other: "MediaType") -> bool:
        if other.matches_all_subtypes:
            return True
        if other.suffix is not None:
            if self.suffix is not None:
                return (
                    other.matches_all_subtypes_without_suffix
                    or other.subtype == self.subtype
                ) and other.suffix == self.suffix
            # application/json is covered by application/xyz+json but not by application/json+xyz
            return self.subtype in (other.full_subtype, other.suffix)
        return other.subtype == self.full_subtype

    def _contains_all_parameters(self, other: "MediaType") -> bool:
        own = set(self.parameters)
        return all(p in own for p in other.parameters if p[0] != "*")

    def __str__(self) -> str:
        text = f"{self.type}/{self.full_subtype}"
        for name, value in self.parameters:
            text += f";{name}={value}"
        return text


def _split_accept(values: Union[str, Iterable[str], None]) -> List[str]:
    if values is None:
        return []
    if isinstance(values, str):
        values = [values]
    entries: List[str] = []
    for value in values:
        entries.extend(part.strip() for part in (value or "").split(","))
    return [e for e in entries if e]


def parse_accept_header(values: Union[str, Iterable[str], None]) -> List[MediaType]:
    """Parse ``Accept`` header values into media types sorted by quality.

    Multiple header lines are concatenated. Malformed entries and entries
    with a quality of zero are dropped. The result is sorted by descending
    quality; entries of equal quality keep their header order.

    :param values: A single header value, a list of header lines, or None
    :type values: Union[str, Iterable[str], None]
    :return: Acceptable media types, most preferred first
    :rtype: List[MediaType]
    """
    result: List[MediaType] = []
    for entry in _split_accept(values):
        media_type = MediaType.try_parse(entry)
        if media_type is None:
            logger.debug("Dropping malformed Accept entry: %r", entry)
            continue
        if media_type.effective_quality <= 0:
            logger.debug("Dropping not-acceptable Accept entry: %r", entry)
            continue
        result.append(media_type)
    return sorted(result, key=lambda m: -m.effective_quality)


__all__ = [
    "ANY_CONTENT_TYPE",
    "APPLICATION_JSON",
    "APPLICATION_XML",
    "TEXT_HTML",
    "MediaType",
    "parse_accept_header",
]
