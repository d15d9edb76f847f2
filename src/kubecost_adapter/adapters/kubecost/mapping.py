"""Resource selector -> allocation filter mapping.

A selector is a slash-delimited key whose first segment names the kind:

===========================  ==========================================
Selector                     Filter set
===========================  ==========================================
``namespace/<ns>``           ``{"namespace": ns}``
``pod/<ns>/<pod>``           ``{"namespace": ns, "pod": pod}``
``controller/<ns>/<ctrl>``   ``{"namespace": ns, "controller": ctrl}``
``node/<node>``              ``{"node": node}``
===========================  ==========================================

Any other selector maps to an empty filter set, which the backend reads as
"every allocation".  A typo in a selector therefore widens the query; each
such fallback is logged at debug level.
"""

from __future__ import annotations

import logging
from typing import Final

from kubecost_adapter.core.types import AllocationFilterSet, ResourceKind

logger = logging.getLogger(__name__)

_RESOURCE_TYPE_PREFIX: Final[str] = "k8s-"

# kind -> (minimum segment count, filter keys for segments[1:])
_SELECTOR_LAYOUT: Final[dict[ResourceKind, tuple[int, tuple[str, ...]]]] = {
    ResourceKind.NAMESPACE: (2, ("namespace",)),
    ResourceKind.POD: (3, ("namespace", "pod")),
    ResourceKind.CONTROLLER: (3, ("namespace", "controller")),
    ResourceKind.NODE: (2, ("node",)),
}

SUPPORTED_RESOURCE_TYPES: Final[frozenset[str]] = frozenset(
    f"{_RESOURCE_TYPE_PREFIX}{kind.value}" for kind in ResourceKind
)


def map_selector(selector: str) -> AllocationFilterSet:
    """Translate a resource selector into backend filter key/value pairs.

    Args:
        selector: Compound key such as ``"pod/default/test-pod"``.

    Returns:
        The filter set; empty when the selector is unrecognised.
    """
    parts = selector.split("/")
    try:
        kind = ResourceKind(parts[0])
    except ValueError:
        logger.debug("Unknown selector kind in %r; querying without filters", selector)
        return {}

    min_segments, keys = _SELECTOR_LAYOUT[kind]
    if len(parts) < min_segments:
        logger.debug("Selector %r has too few segments; querying without filters", selector)
        return {}

    return dict(zip(keys, parts[1:]))


def supports(resource_type: str) -> bool:
    """Return True for the four ``k8s-*`` resource types the adapter can price."""
    return resource_type in SUPPORTED_RESOURCE_TYPES
