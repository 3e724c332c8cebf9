"""Coarse endpoint priority based on the presence of a produces declaration."""

from functools import cmp_to_key
from typing import Any, Optional

from .metadata import Endpoint, ProducesMetadata, resolve_produces


def _declaration(item: Any) -> Optional[ProducesMetadata]:
    if item is None or isinstance(item, ProducesMetadata):
        return item
    if isinstance(item, Endpoint):
        return item.metadata
    return resolve_produces(item)


def _has_content_types(item: Any) -> bool:
    # An explicitly empty declaration counts as no declaration
    metadata = _declaration(item)
    return metadata is not None and len(metadata) > 0


def compare_endpoints(x: Any, y: Any) -> int:
    """Order endpoints so that those declaring content types come first.

    Accepts endpoints, declarations, or raw handlers. Never performs any
    content-type matching.

    :return: -1 if only ``x`` declares content types, 1 if only ``y`` does, else 0
    :rtype: int
    """
    x_has = _has_content_types(x)
    y_has = _has_content_types(y)
    if x_has == y_has:
        return 0
    return -1 if x_has else 1


endpoint_sort_key = cmp_to_key(compare_endpoints)

__all__ = ["compare_endpoints", "endpoint_sort_key"]
